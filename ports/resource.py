"""
Port: Resource
Odpowiedzialność: kontrakty zdolności wspólne dla wszystkich zasobów (id, daty, locale)
oraz kontrakt typów wpisów dekodowanych przez rejestr content types.
"""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from adapters.resource_decoder.decoder import ResourceDecoder


@runtime_checkable
class ResourceProtocol(Protocol):
    @property
    def id(self) -> str:
        """The unique identifier of the resource (sys.id). Never empty."""
        ...

    @property
    def created_at(self) -> Optional[datetime]:
        """When the resource was first created."""
        ...

    @property
    def updated_at(self) -> Optional[datetime]:
        """When the resource was last updated."""
        ...

    @property
    def locale_code(self) -> Optional[str]:
        """The locale the resource carries data for; None for multi-locale payloads."""
        ...


@runtime_checkable
class EntryDecodable(ResourceProtocol, Protocol):
    content_type_id: ClassVar[str]

    @classmethod
    def decode(cls, decoder: "ResourceDecoder") -> Any:
        """
        Builds an instance from one entry JSON object.
        Link fields are registered on decoder.link_resolver and assigned on churn.
        """
        ...


@runtime_checkable
class AssetDecodable(ResourceProtocol, Protocol):
    @classmethod
    def decode(cls, decoder: "ResourceDecoder") -> Any:
        """Builds an asset instance from one asset JSON object."""
        ...


ContentTypeRegistry = dict[str, type]


def build_registry(types: list[type]) -> ContentTypeRegistry:
    """Indeksuje klasy wpisów po content_type_id. Duplikaty → ValueError."""
    registry: ContentTypeRegistry = {}
    for entry_type in types:
        type_id = getattr(entry_type, "content_type_id", "")
        if not type_id:
            raise ValueError(f"{entry_type.__name__} has no content_type_id")
        if type_id in registry:
            raise ValueError(
                f"Duplicate content type {type_id!r}: "
                f"{registry[type_id].__name__} and {entry_type.__name__}"
            )
        registry[type_id] = entry_type
    return registry
