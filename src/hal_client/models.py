from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Literal, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from .errors import EmptyResponseError
from .hal import EMBEDDED_KEY, LINKS_KEY

T = TypeVar("T", bound=BaseModel)


class Link(BaseModel):
    """
    A single HAL link object. The relation name is the key it is stored
    under; attributes beyond the HAL set are kept as extras.
    """

    href: str
    templated: Optional[bool] = None
    type: Optional[str] = None
    deprecation: Optional[str] = None
    name: Optional[str] = None
    profile: Optional[str] = None
    title: Optional[str] = None
    hreflang: Optional[str] = None

    model_config = ConfigDict(extra="allow", frozen=True)

    @property
    def is_templated(self) -> bool:
        return bool(self.templated)

    def to_hal(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ResourceObject(BaseModel):
    """
    A node of the HAL graph: plain properties, links and embedded resources.
    Links and embedded resources keep the one-or-many shape of the payload:
    a single object stays a single object, an array becomes a tuple.
    The three maps are read-only views.
    """

    properties: Dict[str, Any] = Field(default_factory=dict, validate_default=True)
    links: Dict[str, Union[Link, Tuple[Link, ...]]] = Field(
        default_factory=dict, validate_default=True
    )
    embedded: Dict[str, Union[ResourceObject, Tuple[ResourceObject, ...]]] = Field(
        default_factory=dict, validate_default=True
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("properties", "links", "embedded", mode="after")
    @classmethod
    def _read_only(cls, value: Dict[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(value)

    @field_serializer("properties", "links", "embedded")
    def _plain_dict(self, value: Mapping[str, Any]) -> Dict[str, Any]:
        return dict(value)

    def get(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    def links_for(self, rel: str) -> Tuple[Link, ...]:
        value = self.links.get(rel)
        if value is None:
            return ()
        return value if isinstance(value, tuple) else (value,)

    def link(self, rel: str) -> Optional[Link]:
        found = self.links_for(rel)
        return found[0] if found else None

    def link_href(self, rel: str) -> Optional[str]:
        """
        Example: resource.link_href('self') -> '/orders/1'
        """
        link = self.link(rel)
        return link.href if link else None

    def link_title(self, rel: str) -> Optional[str]:
        link = self.link(rel)
        return link.title if link else None

    def embedded_all(self, rel: str) -> Tuple[ResourceObject, ...]:
        value = self.embedded.get(rel)
        if value is None:
            return ()
        return value if isinstance(value, tuple) else (value,)

    def embedded_one(self, rel: str) -> Optional[ResourceObject]:
        found = self.embedded_all(rel)
        return found[0] if found else None

    def embedded_as(self, rel: str, model: Type[T]) -> Optional[T]:
        raw = self.embedded_one(rel)
        if raw is None:
            return None
        try:
            return model.model_validate(raw.to_hal())
        except ValidationError:
            return None

    def resolve(self, name: str) -> Any:
        """
        Looks the name up as a property first, then as a link title, then as
        an embedded resource. Servers are free to expose the same relation in
        any of the three places.
        """
        if name in self.properties:
            return self.properties[name]

        title = self.link_title(name)
        if title:
            return title

        return self.embedded_one(name)

    def to_hal(self) -> Dict[str, Any]:
        document: Dict[str, Any] = dict(self.properties)
        if self.links:
            document[LINKS_KEY] = {
                rel: (
                    [link.to_hal() for link in value]
                    if isinstance(value, tuple)
                    else value.to_hal()
                )
                for rel, value in self.links.items()
            }
        if self.embedded:
            document[EMBEDDED_KEY] = {
                rel: (
                    [res.to_hal() for res in value]
                    if isinstance(value, tuple)
                    else value.to_hal()
                )
                for rel, value in self.embedded.items()
            }
        return document


class RootResourceObject(BaseModel):
    """
    Outcome of one HTTP exchange: the final status code and, when the body
    was a HAL document, its resource graph.

    Concrete results are either ResourceRoot or EmptyRoot; switch on `kind`
    or isinstance rather than testing `resource` for None.
    """

    status_code: int
    resource: Optional[ResourceObject] = None

    model_config = ConfigDict(frozen=True)

    @property
    def has_resource(self) -> bool:
        return self.resource is not None

    def require_resource(self) -> ResourceObject:
        if self.resource is None:
            raise EmptyResponseError(
                f"{self.status_code} response carried no HAL resource"
            )
        return self.resource


class ResourceRoot(RootResourceObject):
    kind: Literal["resource"] = "resource"
    resource: ResourceObject


class EmptyRoot(RootResourceObject):
    kind: Literal["empty"] = "empty"
    resource: None = None


ResourceObject.model_rebuild()


__all__ = [
    "Link",
    "ResourceObject",
    "RootResourceObject",
    "ResourceRoot",
    "EmptyRoot",
]
