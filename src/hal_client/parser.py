from __future__ import annotations

import json
from typing import Any, Dict, Protocol, Tuple, Union, runtime_checkable

from pydantic import ValidationError

from .errors import ParseError
from .hal import EMBEDDED_KEY, LINKS_KEY, split_document
from .models import Link, ResourceObject


@runtime_checkable
class Parser(Protocol):
    """Turns a HAL+JSON text into a ResourceObject or raises ParseError."""

    def parse(self, text: str) -> ResourceObject: ...


class HalJsonParser:
    """
    Default parser for application/hal+json documents.
    - Top level must be a JSON object
    - _links values: link object or array of link objects, each with an href
    - _embedded values: resource object or array of them, parsed recursively
    - Every other key is a plain property
    """

    def parse(self, text: str) -> ResourceObject:
        try:
            payload = json.loads(text)
        except RecursionError as exc:
            raise ParseError("HAL document is nested too deeply to decode") from exc
        except ValueError as exc:
            snippet = (text or "")[:200]
            raise ParseError(
                f"Expected HAL+JSON, got non-JSON body snippet: {snippet!r}"
            ) from exc

        if not isinstance(payload, dict):
            raise ParseError(
                f"Expected top-level JSON object, got {type(payload).__name__}"
            )

        try:
            return self.build(payload)
        except RecursionError as exc:
            raise ParseError("HAL document has too many nested resources") from exc

    def build(self, payload: Dict[str, Any]) -> ResourceObject:
        properties, raw_links, raw_embedded = split_document(payload)

        if not isinstance(raw_links, dict):
            raise ParseError(f"'{LINKS_KEY}' must be an object")
        if not isinstance(raw_embedded, dict):
            raise ParseError(f"'{EMBEDDED_KEY}' must be an object")

        links = {rel: self._parse_links(rel, value) for rel, value in raw_links.items()}
        embedded = {
            rel: self._parse_embedded(rel, value) for rel, value in raw_embedded.items()
        }
        return ResourceObject(properties=properties, links=links, embedded=embedded)

    def _parse_links(self, rel: str, value: Any) -> Union[Link, Tuple[Link, ...]]:
        if isinstance(value, list):
            return tuple(self._parse_link(rel, item) for item in value)
        return self._parse_link(rel, value)

    @staticmethod
    def _parse_link(rel: str, value: Any) -> Link:
        if not isinstance(value, dict):
            raise ParseError(
                f"Link '{rel}' must be an object, got {type(value).__name__}"
            )
        try:
            return Link.model_validate(value)
        except ValidationError as exc:
            raise ParseError(f"Invalid link '{rel}': {exc}") from exc

    def _parse_embedded(
        self, rel: str, value: Any
    ) -> Union[ResourceObject, Tuple[ResourceObject, ...]]:
        if isinstance(value, list):
            return tuple(self._parse_resource(rel, item) for item in value)
        return self._parse_resource(rel, value)

    def _parse_resource(self, rel: str, value: Any) -> ResourceObject:
        if not isinstance(value, dict):
            raise ParseError(
                f"Embedded resource '{rel}' must be an object, "
                f"got {type(value).__name__}"
            )
        return self.build(value)


__all__ = ["Parser", "HalJsonParser"]
