from __future__ import annotations

import dataclasses
import logging
import time
from typing import Any, List, Optional, Tuple, Union

import httpx
from pydantic import TypeAdapter

from .config import DEFAULT_TIMEOUT_SECONDS, ClientConfig
from .errors import (
    ClientDisposedError,
    HalClientError,
    RedirectLoopError,
    TransportError,
    TransportTimeoutError,
)
from .hal import HAL_JSON, JSON
from .models import ResourceObject, RootResourceObject
from .observability import log_event
from .parser import Parser
from .processor import ResponseProcessor

URLTypes = Union[str, httpx.URL]

_NO_BODY = object()
_JSON_BODY = TypeAdapter(Any)


class HalClient:
    """
    Async client for HAL+JSON APIs.
    - Every request goes out with exactly `Accept: application/hal+json`
    - 302/303/307 are followed as GET, up to config.max_redirects hops
    - Returns RootResourceObject results; failures raise HalClientError subclasses
    - Configuration is immutable; with_config() builds a new client

    The client owns its transport, including an injected one, and releases it
    on aclose().
    """

    def __init__(
        self,
        *,
        config: Optional[ClientConfig] = None,
        parser: Optional[Parser] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        if http is None:
            self.config = config if config is not None else ClientConfig()
            http = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=self.config.header_items(),
                timeout=self.config.timeout_seconds,
                follow_redirects=False,
            )
        elif config is not None:
            self.config = config
            self._apply_config(http, config)
        else:
            self.config = self._config_from_transport(http)

        self.log = logger or logging.getLogger("hal_client.client")
        self._processor = ResponseProcessor(
            parser, max_response_bytes=self.config.max_response_bytes
        )
        self._http: Optional[httpx.AsyncClient] = http

        # Opaque slot for callers; no request reads or writes it.
        self.root: Optional[RootResourceObject] = None

    @staticmethod
    def _apply_config(http: httpx.AsyncClient, config: ClientConfig) -> None:
        if config.base_url:
            http.base_url = config.base_url
        if config.headers:
            http.headers.update(config.header_items())
        http.timeout = config.timeout_seconds

    @staticmethod
    def _config_from_transport(http: httpx.AsyncClient) -> ClientConfig:
        read_timeout = http.timeout.read
        return ClientConfig(
            base_url=str(http.base_url),
            timeout_seconds=(
                read_timeout if read_timeout is not None else DEFAULT_TIMEOUT_SECONDS
            ),
        )

    # --- Configuration view ------------------------------------------------ #

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def headers(self) -> Tuple[Tuple[str, str], ...]:
        return self.config.headers

    @property
    def timeout_seconds(self) -> float:
        return self.config.timeout_seconds

    @property
    def max_response_bytes(self) -> int:
        return self.config.max_response_bytes

    @property
    def max_redirects(self) -> int:
        return self.config.max_redirects

    @property
    def parser(self) -> Parser:
        return self._processor.parser

    def with_config(self, **changes: Any) -> "HalClient":
        """Return a new client (with its own transport) using an updated config."""
        return HalClient(
            config=dataclasses.replace(self.config, **changes),
            parser=self._processor.parser,
            logger=self.log,
        )

    # --- Lifecycle --------------------------------------------------------- #

    @property
    def closed(self) -> bool:
        return self._http is None

    async def aclose(self) -> None:
        http, self._http = self._http, None
        if http is not None:
            await http.aclose()

    async def __aenter__(self) -> "HalClient":
        self._require_open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _require_open(self) -> httpx.AsyncClient:
        if self._http is None:
            raise ClientDisposedError("HalClient has been closed")
        return self._http

    # --- Verbs ------------------------------------------------------------- #

    async def get(self, url: URLTypes) -> RootResourceObject:
        return await self.request("GET", url)

    async def post(self, url: URLTypes, data: Any) -> RootResourceObject:
        return await self.request("POST", url, data)

    async def put(self, url: URLTypes, data: Any) -> RootResourceObject:
        return await self.request("PUT", url, data)

    async def delete(self, url: URLTypes) -> RootResourceObject:
        return await self.request("DELETE", url)

    async def follow(self, resource: ResourceObject, rel: str) -> RootResourceObject:
        """GET the first `rel` link of a resource. Templated links are refused."""
        link = resource.link(rel)
        if link is None:
            raise KeyError(f"Resource has no '{rel}' link")
        if link.is_templated:
            raise ValueError(f"Link '{rel}' is templated: {link.href}")
        return await self.get(link.href)

    async def request(
        self, method: str, url: URLTypes, data: Any = _NO_BODY
    ) -> RootResourceObject:
        """
        Core request method.
        - Sends one request and follows redirects as GET
        - Raises TransportError on network/timeout errors (never retried)
        - Raises RedirectLoopError after more than max_redirects hops
        - Processor errors (HttpStatusError, UnsupportedResponse, ParseError)
          propagate unchanged
        """
        http = self._require_open()
        method = method.upper()
        start = time.perf_counter()
        history: List[str] = []

        try:
            result = await self._exchange(http, method, url, data, history)
        except HalClientError as exc:
            log_event(
                "hal_call",
                method=method,
                url=str(url),
                status="exception",
                error_type=type(exc).__name__,
                redirects=len(history),
                duration_ms=int((time.perf_counter() - start) * 1000),
            )
            raise

        log_event(
            "hal_call",
            method=method,
            url=str(url),
            status=result.status_code,
            redirects=len(history),
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return result

    async def _exchange(
        self,
        http: httpx.AsyncClient,
        method: str,
        url: URLTypes,
        data: Any,
        history: List[str],
    ) -> RootResourceObject:
        while True:
            response = await self._send(http, method, url, data, hop=len(history))
            try:
                target = self._processor.redirect_target(response)
                if target is None:
                    return await self._processor.process(response)
            except httpx.HTTPError as exc:
                # Failures while streaming the body.
                raise self._transport_error(exc, method, url) from exc
            finally:
                await response.aclose()

            history.append(target)
            if len(history) > self.config.max_redirects:
                raise RedirectLoopError(
                    max_redirects=self.config.max_redirects, history=history
                )
            method, url, data = "GET", target, _NO_BODY

    async def _send(
        self,
        http: httpx.AsyncClient,
        method: str,
        url: URLTypes,
        data: Any,
        *,
        hop: int,
    ) -> httpx.Response:
        self._reset_accept_header(http)

        headers = {"Accept": HAL_JSON}
        content: Optional[bytes] = None
        if data is not _NO_BODY:
            headers["Content-Type"] = JSON
            content = _JSON_BODY.dump_json(data, by_alias=True)

        start = time.perf_counter()
        try:
            request = http.build_request(method, url, headers=headers, content=content)
            response = await http.send(request, stream=True, follow_redirects=False)
        except httpx.HTTPError as exc:
            raise self._transport_error(exc, method, url) from exc

        self.log.debug(
            "hal.request",
            extra={
                "method": method,
                "url": str(response.request.url),
                "status": response.status_code,
                "duration_ms": int((time.perf_counter() - start) * 1000),
                "hop": hop,
            },
        )
        return response

    @staticmethod
    def _reset_accept_header(http: httpx.AsyncClient) -> None:
        # Replaces any Accept value a caller put on the shared transport.
        http.headers["Accept"] = HAL_JSON

    @staticmethod
    def _transport_error(
        exc: httpx.HTTPError, method: str, url: URLTypes
    ) -> TransportError:
        if isinstance(exc, httpx.TimeoutException):
            return TransportTimeoutError(f"Timeout calling {method} {url}: {exc}")
        return TransportError(f"HTTPX error calling {method} {url}: {exc}")


__all__ = ["HalClient", "URLTypes"]
