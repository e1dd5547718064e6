from __future__ import annotations

from typing import Optional

import httpx

from .errors import (
    HttpStatusError,
    ParseError,
    ResponseTooLargeError,
    UnsupportedResponse,
)
from .hal import is_hal_json
from .models import EmptyRoot, ResourceRoot, RootResourceObject
from .parser import HalJsonParser, Parser

# 302 Found, 303 See Other, 307 Temporary Redirect; followed as GET.
REDIRECT_STATUSES = frozenset({302, 303, 307})
NO_CONTENT = 204

DEFAULT_MAX_RESPONSE_BYTES = 2_147_483_647
ERROR_SNIPPET_BYTES = 500


class ResponseProcessor:
    """
    Turns one raw httpx response into a RootResourceObject or a typed error.
    - Redirects are only detected here; following them is the caller's job
    - Body is read at most once and never beyond max_response_bytes
    - Does not close the response
    """

    def __init__(
        self,
        parser: Optional[Parser] = None,
        *,
        max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES,
    ):
        self.parser: Parser = parser if parser is not None else HalJsonParser()
        self.max_response_bytes = max_response_bytes

    @staticmethod
    def redirect_target(response: httpx.Response) -> Optional[str]:
        """Absolute follow-up URL for 302/303/307, None for any other status."""
        if response.status_code not in REDIRECT_STATUSES:
            return None

        location = response.headers.get("location")
        if not location:
            raise HttpStatusError(
                status_code=response.status_code,
                method=response.request.method,
                url=str(response.request.url),
                message="redirect response is missing the 'Location' header",
            )
        return str(response.request.url.join(location.strip()))

    async def process(self, response: httpx.Response) -> RootResourceObject:
        # Only the first declared Content-Type counts.
        content_types = response.headers.get_list("content-type")
        content_type = content_types[0] if content_types else None

        if is_hal_json(content_type):
            if response.status_code == NO_CONTENT:
                return EmptyRoot(status_code=response.status_code)

            text = await self.read_text(response)
            resource = self.parser.parse(text)
            return ResourceRoot(status_code=response.status_code, resource=resource)

        # HTTP failures win over content-type problems.
        if not response.is_success:
            raise await self._to_http_error(response)

        raise UnsupportedResponse(
            content_type=content_type,
            status_code=response.status_code,
            url=str(response.request.url),
        )

    async def read_body(self, response: httpx.Response) -> bytes:
        limit = self.max_response_bytes
        url = str(response.request.url)

        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > limit:
            raise ResponseTooLargeError(limit=limit, url=url)

        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > limit:
                raise ResponseTooLargeError(limit=limit, url=url)
        return bytes(body)

    async def read_text(self, response: httpx.Response) -> str:
        body = await self.read_body(response)
        encoding = response.charset_encoding or "utf-8"
        try:
            return body.decode(encoding)
        except (UnicodeDecodeError, LookupError) as exc:
            raise ParseError(
                f"Could not decode response body from {response.request.url} "
                f"as {encoding}"
            ) from exc

    async def _to_http_error(self, response: httpx.Response) -> HttpStatusError:
        snippet = bytearray()
        async for chunk in response.aiter_bytes():
            snippet.extend(chunk)
            if len(snippet) >= ERROR_SNIPPET_BYTES:
                break
        text = bytes(snippet[:ERROR_SNIPPET_BYTES]).decode("utf-8", errors="replace")

        return HttpStatusError(
            status_code=response.status_code,
            method=response.request.method,
            url=str(response.request.url),
            message=response.reason_phrase or "request failed",
            response_text=text or None,
        )


__all__ = [
    "ResponseProcessor",
    "REDIRECT_STATUSES",
    "NO_CONTENT",
    "DEFAULT_MAX_RESPONSE_BYTES",
]
