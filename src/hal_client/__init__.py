"""hal_client package exports."""

from .client import HalClient
from .config import ClientConfig
from .errors import (
    ClientDisposedError,
    EmptyResponseError,
    HalClientError,
    HttpStatusError,
    ParseError,
    RedirectLoopError,
    ResponseTooLargeError,
    TransportError,
    TransportTimeoutError,
    UnsupportedResponse,
)
from .factory import HalClientFactory, create_client, create_client_from_env
from .hal import HAL_JSON
from .models import EmptyRoot, Link, ResourceObject, ResourceRoot, RootResourceObject
from .parser import HalJsonParser, Parser
from .processor import ResponseProcessor

__all__ = [
    # Client
    "HalClient",
    "ClientConfig",
    "HalClientFactory",
    "create_client",
    "create_client_from_env",
    # Response pipeline
    "ResponseProcessor",
    "Parser",
    "HalJsonParser",
    "HAL_JSON",
    # Models
    "Link",
    "ResourceObject",
    "RootResourceObject",
    "ResourceRoot",
    "EmptyRoot",
    # Exceptions
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
