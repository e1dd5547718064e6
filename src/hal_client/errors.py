from __future__ import annotations

from typing import Optional, Sequence, Tuple


class HalClientError(Exception):
    """Base error for client failures."""


class TransportError(HalClientError):
    """Network, timeout or protocol failure below the HAL layer."""


class TransportTimeoutError(TransportError):
    pass


class ResponseTooLargeError(TransportError):
    def __init__(self, *, limit: int, url: str):
        super().__init__(
            f"Response body from {url} exceeds max_response_bytes={limit}"
        )
        self.limit = limit
        self.url = url


class HttpStatusError(HalClientError):
    def __init__(
        self,
        *,
        status_code: int,
        method: str,
        url: str,
        message: str,
        response_text: Optional[str] = None,
    ):
        super().__init__(f"{status_code} {method} {url}: {message}")
        self.status_code = status_code
        self.method = method
        self.url = url
        self.response_text = response_text


class UnsupportedResponse(HalClientError):
    """
    Raised for an otherwise successful response whose Content-Type is not
    application/hal+json. content_type is None when the header was missing.
    """

    def __init__(
        self,
        *,
        content_type: Optional[str],
        status_code: int,
        url: str,
    ):
        if content_type is None:
            message = "The response is missing the 'Content-Type' header"
        else:
            message = (
                "The response contains an unsupported 'Content-Type' header "
                f"value: {content_type}"
            )
        super().__init__(message)
        self.content_type = content_type
        self.status_code = status_code
        self.url = url


class ParseError(HalClientError):
    pass


class RedirectLoopError(HalClientError):
    def __init__(self, *, max_redirects: int, history: Sequence[str]):
        self.max_redirects = max_redirects
        self.history: Tuple[str, ...] = tuple(history)
        last = self.history[-1] if self.history else "?"
        super().__init__(
            f"Exceeded {max_redirects} redirects (last location: {last})"
        )


class ClientDisposedError(HalClientError):
    pass


class EmptyResponseError(HalClientError):
    pass


__all__ = [
    "HalClientError",
    "TransportError",
    "TransportTimeoutError",
    "ResponseTooLargeError",
    "HttpStatusError",
    "UnsupportedResponse",
    "ParseError",
    "RedirectLoopError",
    "ClientDisposedError",
    "EmptyResponseError",
]
