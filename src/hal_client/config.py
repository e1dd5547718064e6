from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Mapping, Sequence, Tuple, Union

from dotenv import load_dotenv

from .processor import DEFAULT_MAX_RESPONSE_BYTES

HeaderValue = Union[str, Sequence[str]]

DEFAULT_TIMEOUT_SECONDS = 100.0
DEFAULT_MAX_REDIRECTS = 10


def _normalize_headers(
    headers: Union[Mapping[str, HeaderValue], Sequence[Tuple[str, str]], None],
) -> Tuple[Tuple[str, str], ...]:
    """Flatten name -> value(s) into (name, value) pairs."""
    if not headers:
        return ()
    items = headers.items() if isinstance(headers, Mapping) else headers

    pairs: List[Tuple[str, str]] = []
    for name, value in items:
        if isinstance(value, str):
            pairs.append((name, value))
        else:
            pairs.extend((name, v) for v in value)
    return tuple(pairs)


@dataclass(frozen=True)
class ClientConfig:
    """
    Settings fixed at client creation. Use dataclasses.replace (or
    HalClient.with_config) to derive a new configuration.
    """

    base_url: str = ""
    headers: Tuple[Tuple[str, str], ...] = ()
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES
    max_redirects: int = DEFAULT_MAX_REDIRECTS

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", (self.base_url or "").strip())
        object.__setattr__(self, "headers", _normalize_headers(self.headers))

        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        if self.max_response_bytes <= 0:
            raise ValueError("max_response_bytes must be greater than zero")
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be >= 0")

    @classmethod
    def from_env(cls, *, use_dotenv: bool = True, **overrides) -> "ClientConfig":
        """Load settings from HAL_CLIENT_* environment variables (optional .env)."""
        if use_dotenv:
            load_dotenv()

        def _read_int_env(name: str, default: int) -> int:
            raw = os.getenv(name)
            if raw is None or raw.strip() == "":
                return default
            return int(raw.replace("_", ""))

        def _read_float_env(name: str, default: float) -> float:
            raw = os.getenv(name)
            if raw is None or raw.strip() == "":
                return default
            return float(raw)

        values = dict(
            base_url=os.getenv("HAL_CLIENT_BASE_URL", "").strip(),
            timeout_seconds=_read_float_env(
                "HAL_CLIENT_TIMEOUT_S", DEFAULT_TIMEOUT_SECONDS
            ),
            max_response_bytes=_read_int_env(
                "HAL_CLIENT_MAX_RESPONSE_BYTES", DEFAULT_MAX_RESPONSE_BYTES
            ),
            max_redirects=_read_int_env(
                "HAL_CLIENT_MAX_REDIRECTS", DEFAULT_MAX_REDIRECTS
            ),
        )
        values.update(overrides)
        return cls(**values)

    def header_items(self) -> List[Tuple[str, str]]:
        return list(self.headers)


__all__ = [
    "ClientConfig",
    "HeaderValue",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_MAX_REDIRECTS",
]
