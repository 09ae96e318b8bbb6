"""
Podgląd zdekodowanych zasobów jako czysty JSON (dla API i CLI).

Zasoby powiązane są renderowane jako referencje {"link": ..., "resolved": true},
więc cykle między wpisami (A → B → A) nie są problemem.
"""
from __future__ import annotations

from typing import Any

from adapters.json_decoder.dynamic import value_kind
from contracts import Asset, ContentType, Entry, FileMetadata, Link, Location, Resource


def summarize_resource(resource: Any) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": resource.id,
        "type": resource.sys.type,
        "locale": resource.sys.locale,
        "content_type": resource.sys.content_type_id,
        "updated_at": resource.sys.updated_at.isoformat() if resource.sys.updated_at else None,
    }
    if isinstance(resource, Entry):
        out["fields"] = {key: summarize_value(value) for key, value in resource.fields.items()}
    elif isinstance(resource, Asset):
        out["fields"] = {
            "title": resource.title,
            "description": resource.description,
            "file": summarize_value(resource.file) if resource.file else None,
        }
    elif isinstance(resource, ContentType):
        out["fields"] = {"name": resource.name, "fields": [f.id for f in resource.fields]}
    elif isinstance(resource, Resource):
        out["fields"] = {
            name: summarize_value(getattr(resource, name))
            for name in type(resource).model_fields
            if name != "sys"
        }
    return out


def summarize_value(value: Any) -> Any:
    if isinstance(value, Link):
        return {"link": value.link_type.value, "id": value.id, "resolved": False}
    if isinstance(value, Resource):
        return {"link": value.sys.type, "id": value.id, "resolved": True}
    if isinstance(value, FileMetadata):
        return value.model_dump(by_alias=True, exclude_none=True)
    if isinstance(value, Location):
        return {"lat": value.lat, "lon": value.lon}
    if isinstance(value, dict):
        return {key: summarize_value(v) for key, v in value.items()}
    if isinstance(value, list):
        return [summarize_value(v) for v in value]
    return value


def describe_value(value: Any) -> str:
    """Jednolinijkowy opis wartości do tabel w CLI."""
    if isinstance(value, Resource):
        return f"→ {value.sys.type} {value.id}"
    if isinstance(value, list) and value and all(isinstance(v, Resource) for v in value):
        return "→ [" + ", ".join(v.id for v in value) + "]"
    kind = value_kind(value)
    if kind == "link":
        return f"link {value.link_type.value}:{value.id} (unresolved)"
    if kind in ("object", "array"):
        return f"{kind}({len(value)})"
    return repr(value)
