from typing import Any, Dict, Optional, Tuple

HAL_JSON = "application/hal+json"
JSON = "application/json"

LINKS_KEY = "_links"
EMBEDDED_KEY = "_embedded"
RESERVED_KEYS = frozenset({LINKS_KEY, EMBEDDED_KEY})


def media_type(content_type: Optional[str]) -> Optional[str]:
    """
    Strips parameters and whitespace from a Content-Type value and lowercases it.
    Example: media_type('Application/HAL+JSON; charset=utf-8') -> 'application/hal+json'
    """
    if content_type is None:
        return None
    return content_type.split(";", 1)[0].strip().lower()


def is_hal_json(content_type: Optional[str]) -> bool:
    return media_type(content_type) == HAL_JSON


def split_document(
    payload: Dict[str, Any],
) -> Tuple[Dict[str, Any], Any, Any]:
    """
    Splits a HAL document into (properties, raw _links, raw _embedded).
    Missing reserved sections come back as empty dicts.
    """
    properties = {k: v for k, v in payload.items() if k not in RESERVED_KEYS}
    return properties, payload.get(LINKS_KEY, {}), payload.get(EMBEDDED_KEY, {})


__all__ = [
    "HAL_JSON",
    "JSON",
    "LINKS_KEY",
    "EMBEDDED_KEY",
    "RESERVED_KEYS",
    "media_type",
    "is_hal_json",
    "split_document",
]
