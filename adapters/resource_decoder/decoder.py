"""
ResourceDecoder / ResponseDecoder — dekodowanie zasobów i kolekcji z odpowiedzi API.

Kontekst (lokalizacja, rejestr content types, LinkResolver) jest przekazywany jawnie
przez DecodeContext, bez stanu globalnego.

Przepływ dla kolekcji:
  items + includes.Entry + includes.Asset → decode_resource (każdy zasób do cache,
  pola-linki rejestrują callbacki) → jeden churn_links() → ArrayResponse
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from adapters.json_decoder.dynamic import decode_value
from adapters.link_resolver.resolver import LinkResolver
from adapters.resource_decoder.fields import FieldsContainer
from contracts import (
    ArrayResponse,
    Asset,
    ContentType,
    ContentTypeField,
    DeletedResource,
    Entry,
    FileMetadata,
    Link,
    Locale,
    LocalizationContext,
    MissingLocalizedValue,
    StructuralDecodeError,
    Sys,
    UnknownContentType,
)
from ports.resource import AssetDecodable, ContentTypeRegistry

logger = logging.getLogger("contentwire.response_decoder")


@dataclass
class DecodeContext:
    localization: LocalizationContext
    content_types: ContentTypeRegistry = field(default_factory=dict)
    link_resolver: LinkResolver = field(default_factory=LinkResolver)
    strict_content_types: bool = False
    # typ użytkownika dla assetów; None → wbudowany Asset
    asset_type: Optional[type[AssetDecodable]] = None

    @classmethod
    def create(
        cls,
        locales: Optional[list[Locale]] = None,
        locale: Optional[str] = None,
        content_types: Optional[ContentTypeRegistry] = None,
        default_locale: str = "en-US",
        strict_content_types: bool = False,
        asset_type: Optional[type[AssetDecodable]] = None,
    ) -> "DecodeContext":
        if locales:
            localization = LocalizationContext.from_locales(locales, current=locale)
        else:
            localization = LocalizationContext.single(locale or default_locale)
        return cls(
            localization=localization,
            content_types=dict(content_types or {}),
            strict_content_types=strict_content_types,
            asset_type=asset_type,
        )


class ResourceDecoder:
    """Uchwyt dekodowania jednego obiektu JSON zasobu."""

    def __init__(self, json: Mapping[str, Any], context: DecodeContext, path: str = "") -> None:
        if not isinstance(json, Mapping):
            raise StructuralDecodeError(path, "object", f"got {type(json).__name__}")
        self._json = json
        self._context = context
        self._path = path

    @property
    def raw(self) -> Mapping[str, Any]:
        return self._json

    @property
    def path(self) -> str:
        return self._path

    @property
    def link_resolver(self) -> LinkResolver:
        return self._context.link_resolver

    @property
    def localization_context(self) -> LocalizationContext:
        return self._context.localization

    @property
    def content_types(self) -> ContentTypeRegistry:
        return self._context.content_types

    def sys(self) -> Sys:
        path = self.join_path("sys")
        raw = self._json.get("sys")
        if not isinstance(raw, Mapping):
            raise StructuralDecodeError(path, "sys object")
        try:
            return Sys.model_validate(dict(raw))
        except ValidationError as exc:
            raise StructuralDecodeError(path, "sys object", str(exc.errors()[0]["msg"])) from exc

    def fields_container(self) -> FieldsContainer:
        path = self.join_path("fields")
        raw = self._json.get("fields", {})
        if not isinstance(raw, Mapping):
            raise StructuralDecodeError(path, "fields object")
        return FieldsContainer(raw, self._context.localization, self._context.link_resolver, path)

    def join_path(self, key: str) -> str:
        return f"{self._path}.{key}" if self._path else key


# ── Dekodery typów wbudowanych ────────────────────────────────────────────────


def decode_entry(decoder: ResourceDecoder) -> Entry:
    """Generyczny wpis: każde pole dekodowane dynamicznie, linki rozwiązywane na churn."""
    entry = Entry(sys=decoder.sys())
    fields = decoder.fields_container()
    for key in fields.keys():
        raw = fields.localized_value(key, default=None)
        if raw is None:
            continue
        try:
            value = decode_value(raw, decoder.join_path(f"fields.{key}"))
        except StructuralDecodeError:
            logger.debug("Entry %s: dropping field %r", entry.id, key)
            continue
        entry.fields[key] = value

        if isinstance(value, Link):
            decoder.link_resolver.resolve(value, _field_setter(entry, key))
        elif value and isinstance(value, list) and all(isinstance(v, Link) for v in value):
            decoder.link_resolver.resolve_many(value, _field_setter(entry, key))
    return entry


def _field_setter(entry: Entry, key: str):
    def assign(resolved: Any) -> None:
        # nierozwiązany pojedynczy link zostaje jako Link
        if resolved is not None:
            entry.fields[key] = resolved

    return assign


def decode_asset(decoder: ResourceDecoder) -> Asset:
    fields = decoder.fields_container()
    return Asset(
        sys=decoder.sys(),
        title=_optional(fields, "title", str),
        description=_optional(fields, "description", str),
        file=_optional(fields, "file", FileMetadata),
    )


def _optional(fields: FieldsContainer, key: str, type_: Any) -> Any:
    try:
        return fields.decode_if_present(key, type_)
    except MissingLocalizedValue:
        return None


def decode_content_type(decoder: ResourceDecoder) -> ContentType:
    raw = decoder.raw
    raw_fields = raw.get("fields", [])
    if not isinstance(raw_fields, list):
        raise StructuralDecodeError(decoder.join_path("fields"), "array")
    try:
        return ContentType(
            sys=decoder.sys(),
            name=raw.get("name", ""),
            description=raw.get("description"),
            display_field=raw.get("displayField"),
            fields=[ContentTypeField.model_validate(f) for f in raw_fields],
        )
    except ValidationError as exc:
        raise StructuralDecodeError(decoder.path, "content type", str(exc.errors()[0]["msg"])) from exc


# ── Odpowiedzi ────────────────────────────────────────────────────────────────


class ResponseDecoder:
    """
    Dekoduje pojedynczy zasób albo kolekcję i rozwiązuje linki.

    Błędy strukturalne i MissingLocalizedValue nie są połykane: przerywają
    dekodowanie zasobu. Dla kolekcji `skip_invalid=True` pomija wadliwy zasób
    (zapis w ArrayResponse.errors) zamiast przerywać całą odpowiedź.
    """

    def __init__(self, context: DecodeContext) -> None:
        self._context = context

    @property
    def context(self) -> DecodeContext:
        return self._context

    def decode_resource(self, json: Mapping[str, Any], path: str = "") -> Any:
        """Dekoduje jeden zasób i dodaje go do cache. Linki pozostają oczekujące."""
        decoder = ResourceDecoder(json, self._context, path)
        sys = decoder.sys()

        if sys.type == "Entry":
            entry = self._decode_entry(decoder, sys)
            self._context.link_resolver.cache_entries([entry])
            return entry
        elif sys.type == "Asset":
            asset = self._decode_asset(decoder)
            self._context.link_resolver.cache_assets([asset])
            return asset
        elif sys.type in ("DeletedEntry", "DeletedAsset"):
            return DeletedResource(sys=sys)
        elif sys.type == "ContentType":
            return decode_content_type(decoder)
        else:
            raise StructuralDecodeError(decoder.path, "a known sys.type", f"got {sys.type!r}")

    def decode_single(self, json: Mapping[str, Any]) -> Any:
        resource = self.decode_resource(json)
        self._context.link_resolver.churn_links()
        return resource

    def decode_collection(self, json: Mapping[str, Any], skip_invalid: bool = False) -> ArrayResponse:
        if not isinstance(json, Mapping):
            raise StructuralDecodeError("", "collection object", f"got {type(json).__name__}")
        response = ArrayResponse(
            total=_int(json, "total"),
            skip=_int(json, "skip"),
            limit=_int(json, "limit"),
            errors=_errors(json),
        )
        includes = json.get("includes", {}) or {}
        if not isinstance(includes, Mapping):
            raise StructuralDecodeError("includes", "object")

        for path, raw in _enumerate(json.get("items", []), "items"):
            resource = self._decode_member(raw, path, response, skip_invalid)
            if resource is not None:
                response.items.append(resource)
        for path, raw in _enumerate(includes.get("Entry", []), "includes.Entry"):
            resource = self._decode_member(raw, path, response, skip_invalid)
            if resource is not None:
                response.included_entries.append(resource)
        for path, raw in _enumerate(includes.get("Asset", []), "includes.Asset"):
            resource = self._decode_member(raw, path, response, skip_invalid)
            if resource is not None:
                response.included_assets.append(resource)

        report = self._context.link_resolver.churn_links()
        logger.debug(
            "Decoded collection: %d items, %d included entries, %d included assets; "
            "%d link keys, %d unresolved",
            len(response.items), len(response.included_entries), len(response.included_assets),
            report.keys, len(report.unresolved),
        )
        return response

    # ── private ───────────────────────────────────────────────────────────────

    def _decode_entry(self, decoder: ResourceDecoder, sys: Sys) -> Any:
        type_id = sys.content_type_id
        entry_type = self._context.content_types.get(type_id) if type_id else None
        if entry_type is not None:
            return entry_type.decode(decoder)
        if self._context.strict_content_types:
            raise UnknownContentType(type_id or "")
        return decode_entry(decoder)

    def _decode_asset(self, decoder: ResourceDecoder) -> Any:
        asset_type = self._context.asset_type
        if asset_type is not None:
            return asset_type.decode(decoder)
        return decode_asset(decoder)

    def _decode_member(
        self,
        raw: Any,
        path: str,
        response: ArrayResponse,
        skip_invalid: bool,
    ) -> Any:
        try:
            return self.decode_resource(raw, path)
        except (StructuralDecodeError, MissingLocalizedValue) as exc:
            if not skip_invalid:
                raise
            logger.warning("Skipping %s: %s", path, exc)
            response.errors.append({
                "sys": {"id": "DecodeError", "type": "Error"},
                "details": {"path": path, "message": str(exc)},
            })
            return None


def _enumerate(raw: Any, path: str):
    if not isinstance(raw, list):
        raise StructuralDecodeError(path, "array")
    for index, item in enumerate(raw):
        yield f"{path}[{index}]", item


def _int(json: Mapping[str, Any], key: str) -> int:
    value = json.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, int):
        raise StructuralDecodeError(key, "integer")
    return value


def _errors(json: Mapping[str, Any]) -> list[dict[str, Any]]:
    raw = json.get("errors", [])
    if not isinstance(raw, list):
        raise StructuralDecodeError("errors", "array")
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping):
            raise StructuralDecodeError(f"errors[{index}]", "object")
    return [dict(item) for item in raw]
