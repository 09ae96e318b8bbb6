"""
contracts.py — Jedyne źródło prawdy dla typów danych Contentwire.
Wszystkie moduły importują typy WYŁĄCZNIE stąd. Nie modyfikować bez versioning.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator, model_validator

CONTRACTS_VERSION = "1.0.0"


# ─────────────────────────── Błędy ───────────────────────────────────────

class ContentwireError(Exception):
    """Bazowy wyjątek dekodera."""


class StructuralDecodeError(ContentwireError):
    """Kształt JSON nie pasuje do oczekiwanego typu."""

    def __init__(self, path: str, expected: str, detail: str = "") -> None:
        self.path = path
        self.expected = expected
        self.detail = detail
        msg = f"{path or '<root>'}: expected {expected}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class MissingLocalizedValue(ContentwireError, KeyError):
    """Brak wartości pola w bieżącym locale i w całym łańcuchu fallback."""

    def __init__(self, field_key: str, locale_chain: Optional[list[str]] = None) -> None:
        self.field_key = field_key
        self.locale_chain = list(locale_chain or [])
        super().__init__(field_key)

    def __str__(self) -> str:
        chain = " -> ".join(self.locale_chain) or "-"
        return f"No value present for field {self.field_key!r} (locales: {chain})"


class UnknownContentType(ContentwireError, KeyError):
    def __init__(self, content_type_id: str) -> None:
        self.content_type_id = content_type_id
        super().__init__(content_type_id)

    def __str__(self) -> str:
        return f"No decode target registered for content type {self.content_type_id!r}"


# ─────────────────────────── Locale ──────────────────────────────────────

class Locale(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    code: str
    name: str = ""
    default: bool = False
    fallback_code: Optional[str] = Field(default=None, alias="fallbackCode")


class LocalizationContext(BaseModel):
    """Niemutowalny kontekst lokalizacji dla jednej sesji dekodowania."""

    model_config = ConfigDict(frozen=True)

    current_locale: Locale
    locales: dict[str, Locale]

    @classmethod
    def from_locales(cls, locales: list[Locale], current: Optional[str] = None) -> "LocalizationContext":
        if not locales:
            raise ValueError("At least one locale is required")
        by_code = {loc.code: loc for loc in locales}
        if current is not None:
            if current not in by_code:
                raise KeyError(f"Unknown locale: {current!r}")
            current_locale = by_code[current]
        else:
            current_locale = next((loc for loc in locales if loc.default), locales[0])
        return cls(current_locale=current_locale, locales=by_code)

    @classmethod
    def single(cls, code: str) -> "LocalizationContext":
        """Kontekst z jednym locale bez fallbacku."""
        locale = Locale(code=code, default=True)
        return cls(current_locale=locale, locales={code: locale})

    def with_current(self, code: str) -> "LocalizationContext":
        if code not in self.locales:
            raise KeyError(f"Unknown locale: {code!r}")
        return LocalizationContext(current_locale=self.locales[code], locales=self.locales)


# ─────────────────────────── Link ────────────────────────────────────────

class LinkType(str, Enum):
    ENTRY = "Entry"
    ASSET = "Asset"


class Link(BaseModel):
    """Nierozwiązana referencja do innego zasobu. Klucz lookup, nigdy wartość końcowa."""

    model_config = ConfigDict(frozen=True)

    link_type: LinkType
    id: StrictStr

    @model_validator(mode="before")
    @classmethod
    def _unwrap_sys(cls, data: Any) -> Any:
        # {"sys": {"type": "Link", "linkType": "Entry", "id": "X"}} → {link_type, id}
        if isinstance(data, dict) and "sys" in data:
            sys = data["sys"]
            if not isinstance(sys, dict) or sys.get("type") != "Link":
                raise ValueError("not a link object")
            return {"link_type": sys.get("linkType"), "id": sys.get("id")}
        return data

    @field_validator("id")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("link id must not be empty")
        return v


# ─────────────────────────── Typy liściowe pól ───────────────────────────

class ImageInfo(BaseModel):
    width: StrictInt
    height: StrictInt


class FileDetails(BaseModel):
    size: Optional[StrictInt] = None
    image: Optional[ImageInfo] = None


class FileMetadata(BaseModel):
    """Metadane pliku zasobu (pole `file` w Asset)."""

    model_config = ConfigDict(populate_by_name=True)

    url: StrictStr
    file_name: StrictStr = Field(alias="fileName")
    content_type: StrictStr = Field(alias="contentType")
    details: Optional[FileDetails] = None


class Location(BaseModel):
    """Współrzędne geograficzne (pole typu Location)."""

    model_config = ConfigDict(extra="forbid")

    lat: StrictFloat
    lon: StrictFloat

    @model_validator(mode="before")
    @classmethod
    def _ints_are_floats(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: float(v) if isinstance(v, int) and not isinstance(v, bool) else v
                for k, v in data.items()
            }
        return data


# ─────────────────────────── Sys ─────────────────────────────────────────

class Sys(BaseModel):
    """Systemowy blok metadanych wspólny dla każdego zasobu."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: StrictStr
    type: StrictStr
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    locale: Optional[str] = None
    revision: Optional[int] = None
    content_type_id: Optional[str] = Field(default=None, alias="contentType")

    @field_validator("id")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("sys.id must not be empty")
        return v

    @field_validator("content_type_id", mode="before")
    @classmethod
    def _content_type_link(cls, v: Any) -> Any:
        # {"sys": {"type": "Link", "linkType": "ContentType", "id": "cat"}} → "cat"
        if isinstance(v, dict):
            sys = v.get("sys")
            if not isinstance(sys, dict):
                raise ValueError("contentType must be a link object")
            return sys.get("id")
        return v


# ─────────────────────────── Zasoby ──────────────────────────────────────

class Resource(BaseModel):
    """
    Baza dla każdego zasobu: przechowuje tylko `sys`, reszta akcesorów jest z niego
    wyprowadzana (id, type, created_at, updated_at, locale_code).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    sys: Sys

    @property
    def id(self) -> str:
        return self.sys.id

    @property
    def type(self) -> str:
        return self.sys.type

    @property
    def created_at(self) -> Optional[datetime]:
        return self.sys.created_at

    @property
    def updated_at(self) -> Optional[datetime]:
        return self.sys.updated_at

    @property
    def locale_code(self) -> Optional[str]:
        return self.sys.locale

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        return self.id == other.id and self.sys.updated_at == other.sys.updated_at

    def __hash__(self) -> int:
        return hash(self.id)


class EntryModel(Resource):
    """
    Baza dla typów wpisów definiowanych przez użytkownika (EntryDecodable).
    Podklasa ustawia `content_type_id` i implementuje classmethod `decode(decoder)`.
    """

    content_type_id: ClassVar[str] = ""

    @property
    def content_type(self) -> Optional[str]:
        return self.sys.content_type_id


class Entry(EntryModel):
    """Generyczny wpis: pola zdekodowane dynamicznie dla bieżącego locale."""

    fields: dict[str, Any] = Field(default_factory=dict)


class Asset(Resource):
    title: Optional[str] = None
    description: Optional[str] = None
    file: Optional[FileMetadata] = None

    @property
    def url(self) -> Optional[str]:
        return self.file.url if self.file else None


class DeletedResource(Resource):
    """Zasób z odpowiedzi sync typu DeletedEntry / DeletedAsset — tylko sys."""


class ContentTypeField(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    type: str
    link_type: Optional[LinkType] = Field(default=None, alias="linkType")
    localized: bool = False
    required: bool = False
    disabled: bool = False
    items: Optional[dict[str, Any]] = None


class ContentType(Resource):
    name: str
    description: Optional[str] = None
    display_field: Optional[str] = None
    fields: list[ContentTypeField] = Field(default_factory=list)

    @property
    def identifier(self) -> str:
        return self.sys.id


# ─────────────────────────── Kolekcje ────────────────────────────────────

class ArrayResponse(BaseModel):
    """Koperta kolekcji po zdekodowaniu i rozwiązaniu linków."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: list[Any] = Field(default_factory=list)
    included_entries: list[Any] = Field(default_factory=list)
    included_assets: list[Any] = Field(default_factory=list)
    total: int = 0
    skip: int = 0
    limit: int = 0
    errors: list[dict[str, Any]] = Field(default_factory=list)
