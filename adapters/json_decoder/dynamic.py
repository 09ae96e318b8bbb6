"""
Dynamic JSON decoder — dekodowanie JSON bez schematu do wartości z jawnym zbiorem typów.

Kolejność prób (jedna dla map i tablic):
  bool → str → int → float → FileMetadata → Link → Location → mapa → tablica

Pierwsza udana próba wygrywa. Typy domenowe MUSZĄ być próbowane przed generycznymi
kontenerami: link zdekodowany jako mapa traci informację o typie.
Wartości niepasujące do żadnej próby (np. null) są pomijane, nie są błędem.

Location przyjmuje wyłącznie klucze lat i lon: obiekt z dodatkowymi kluczami
(np. {"lat", "lon", "alt"}) zostaje zwykłą mapą, a nie Location.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Sequence, Union

from pydantic import BaseModel, ValidationError

from contracts import FileMetadata, Link, Location, StructuralDecodeError

logger = logging.getLogger("contentwire.dynamic_decoder")

JsonValue = Union[
    bool, int, float, str,
    FileMetadata, Link, Location,
    dict[str, "JsonValue"], list["JsonValue"],
]


# ── Próby ─────────────────────────────────────────────────────────────────────


def _probe_bool(value: Any, path: str) -> bool:
    if isinstance(value, bool):
        return value
    raise StructuralDecodeError(path, "bool")


def _probe_str(value: Any, path: str) -> str:
    if isinstance(value, str):
        return value
    raise StructuralDecodeError(path, "string")


def _probe_int(value: Any, path: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise StructuralDecodeError(path, "integer")


def _probe_float(value: Any, path: str) -> float:
    if isinstance(value, float):
        return value
    raise StructuralDecodeError(path, "float")


def _model_probe(model: type[BaseModel], expected: str) -> Callable[[Any, str], Any]:
    def probe(value: Any, path: str) -> Any:
        if not isinstance(value, Mapping):
            raise StructuralDecodeError(path, expected)
        try:
            return model.model_validate(dict(value))
        except ValidationError as exc:
            raise StructuralDecodeError(path, expected, f"{exc.error_count()} error(s)") from exc

    return probe


def _probe_link(value: Any, path: str) -> Link:
    # tylko kształt z API: {"sys": {"type": "Link", ...}}
    if not isinstance(value, Mapping) or "sys" not in value:
        raise StructuralDecodeError(path, "link")
    return _link_model(value, path)


_link_model = _model_probe(Link, "link")


def _probe_mapping(value: Any, path: str) -> dict[str, JsonValue]:
    if isinstance(value, Mapping):
        return decode_mapping(value, path)
    raise StructuralDecodeError(path, "object")


def _probe_sequence(value: Any, path: str) -> list[JsonValue]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return decode_sequence(value, path)
    raise StructuralDecodeError(path, "array")


PROBES: tuple[tuple[str, Callable[[Any, str], Any]], ...] = (
    ("bool", _probe_bool),
    ("string", _probe_str),
    ("integer", _probe_int),
    ("float", _probe_float),
    ("file", _model_probe(FileMetadata, "file metadata")),
    ("link", _probe_link),
    ("location", _model_probe(Location, "location")),
    ("object", _probe_mapping),
    ("array", _probe_sequence),
)


# ── API ───────────────────────────────────────────────────────────────────────


def decode_value(value: Any, path: str = "") -> JsonValue:
    """Dekoduje pojedynczą wartość. Brak pasującej próby → StructuralDecodeError."""
    for _name, probe in PROBES:
        try:
            return probe(value, path)
        except StructuralDecodeError:
            continue
    raise StructuralDecodeError(path, "a JSON value", f"got {type(value).__name__}")


def decode_mapping(obj: Mapping[str, Any], path: str = "") -> dict[str, JsonValue]:
    """Mapa str → JsonValue. Klucze bez pasującej próby są pomijane."""
    result: dict[str, JsonValue] = {}
    for key, value in obj.items():
        key_path = f"{path}.{key}" if path else str(key)
        try:
            result[str(key)] = decode_value(value, key_path)
        except StructuralDecodeError:
            logger.debug("Dropping undecodable value at %s", key_path)
    return result


def decode_sequence(seq: Sequence[Any], path: str = "") -> list[JsonValue]:
    """Lista JsonValue w kolejności wejścia. Elementy bez pasującej próby są pomijane."""
    result: list[JsonValue] = []
    for index, value in enumerate(seq):
        item_path = f"{path}[{index}]"
        try:
            result.append(decode_value(value, item_path))
        except StructuralDecodeError:
            logger.debug("Skipping undecodable element at %s", item_path)
    return result


def value_kind(value: JsonValue) -> str:
    """Nazwa próby, która wyprodukowała daną wartość (do podglądu w CLI/API)."""
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, str):
        return "string"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, FileMetadata):
        return "file"
    if isinstance(value, Link):
        return "link"
    if isinstance(value, Location):
        return "location"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__
