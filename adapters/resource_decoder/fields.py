"""
FieldsContainer — dostęp do obiektu `fields` wpisu/assetu z obsługą locale.

Wartość pola może przyjść wprost (odpowiedź z jednym locale) albo jako mapa
{kod_locale: wartość} (locale=*). Mapą locale jest obiekt, którego wszystkie klucze
są znanymi kodami locale, albo obiekt o kluczach w formacie kodu locale, w którym
łańcuch fallback znajduje co najmniej jeden klucz (locale spoza kontekstu).
Mapa locale idzie od razu przez łańcuch fallback; każda inna wartość jest najpierw
dekodowana wprost.
"""
from __future__ import annotations

import functools
import re
from typing import Any, Callable, Mapping

from pydantic import TypeAdapter, ValidationError

from adapters.json_decoder.dynamic import JsonValue, decode_mapping, decode_sequence
from adapters.locale.fallback import fallback_chain, resolve_locale_code
from contracts import Link, LocalizationContext, MissingLocalizedValue, StructuralDecodeError
from ports.link_resolver import LinkResolverPort, ResolutionCallback

_MISSING = object()

# "en", "en-US", "tlh", "zh-Hant-TW"
_LOCALE_CODE = re.compile(r"^[a-z]{2,3}(?:-[A-Za-z0-9]{2,8})*$")


@functools.lru_cache(maxsize=128)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


def coerce(value: Any, type_: Any, path: str) -> Any:
    """Dekoduje wartość JSON do `type_`. Niezgodny kształt → StructuralDecodeError."""
    if type_ is bool:
        if isinstance(value, bool):
            return value
    elif type_ is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif type_ is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif type_ is str:
        if isinstance(value, str):
            return value
    elif type_ is dict:
        if isinstance(value, Mapping):
            return decode_mapping(value, path)
    elif type_ is list:
        if isinstance(value, list):
            return decode_sequence(value, path)
    else:
        try:
            return _adapter(type_).validate_python(value)
        except ValidationError as exc:
            raise StructuralDecodeError(path, _type_name(type_), str(exc.errors()[0]["msg"])) from exc
    raise StructuralDecodeError(path, _type_name(type_), f"got {type(value).__name__}")


def _type_name(type_: Any) -> str:
    return getattr(type_, "__name__", None) or str(type_)


class FieldsContainer:
    def __init__(
        self,
        fields: Mapping[str, Any],
        localization: LocalizationContext,
        link_resolver: LinkResolverPort,
        path: str = "fields",
    ) -> None:
        self._fields = fields
        self._localization = localization
        self._link_resolver = link_resolver
        self._path = path

    # ── inspekcja ─────────────────────────────────────────────────────────────

    def contains(self, key: str) -> bool:
        return key in self._fields

    def keys(self) -> list[str]:
        return list(self._fields.keys())

    @property
    def localization(self) -> LocalizationContext:
        return self._localization

    # ── dekodowanie ───────────────────────────────────────────────────────────

    def decode(self, key: str, type_: Any) -> Any:
        """
        Wartość pola jako `type_`.
        Brak wartości w bieżącym locale i całym łańcuchu fallback → MissingLocalizedValue.
        """
        path = f"{self._path}.{key}"
        if key not in self._fields:
            raise MissingLocalizedValue(key, self._chain())
        raw = self._fields[key]

        if not self._is_locale_map(raw):
            try:
                return coerce(raw, type_, path)
            except StructuralDecodeError:
                if not isinstance(raw, Mapping):
                    raise

        code = resolve_locale_code(self._localization.current_locale, raw.keys(), self._localization)
        if code is None:
            raise MissingLocalizedValue(key, self._chain())
        return coerce(raw[code], type_, f"{path}.{code}")

    def decode_if_present(self, key: str, type_: Any, default: Any = None) -> Any:
        """Jak decode, ale brak klucza albo null → `default`."""
        if self._fields.get(key) is None:
            return default
        return self.decode(key, type_)

    def decode_dict(self, key: str) -> dict[str, JsonValue]:
        return self.decode(key, dict)

    def decode_list(self, key: str) -> list[JsonValue]:
        return self.decode(key, list)

    def localized_value(self, key: str, default: Any = _MISSING) -> Any:
        """Surowa wartość pola dla bieżącego locale (bez konwersji typu)."""
        raw = self._fields.get(key, _MISSING)
        if raw is _MISSING:
            if default is _MISSING:
                raise MissingLocalizedValue(key, self._chain())
            return default
        if not self._is_locale_map(raw):
            return raw
        code = resolve_locale_code(self._localization.current_locale, raw.keys(), self._localization)
        if code is None:
            if default is _MISSING:
                raise MissingLocalizedValue(key, self._chain())
            return default
        return raw[code]

    # ── linki ─────────────────────────────────────────────────────────────────

    def resolve_link(self, key: str, callback: ResolutionCallback) -> None:
        """Rejestruje callback dla pola-linku. Brak pola → nic się nie dzieje."""
        link = self.decode_if_present(key, Link)
        if link is not None:
            self._link_resolver.resolve(link, callback)

    def resolve_links_array(self, key: str, callback: ResolutionCallback) -> None:
        """Rejestruje callback dla listy linków. Brak pola → nic się nie dzieje."""
        links = self.decode_if_present(key, list[Link])
        if links is not None:
            self._link_resolver.resolve_many(links, callback)

    def assign_link(self, key: str, target: Any, attr: str) -> None:
        """Skrót: po churn ustawia `target.attr` na rozwiązany zasób (None → bez zmian)."""
        self.resolve_link(key, _setter(target, attr, skip_none=True))

    def assign_links(self, key: str, target: Any, attr: str) -> None:
        self.resolve_links_array(key, _setter(target, attr, skip_none=False))

    # ── private ───────────────────────────────────────────────────────────────

    def _chain(self) -> list[str]:
        return fallback_chain(self._localization.current_locale, self._localization)

    def _is_locale_map(self, raw: Any) -> bool:
        if not isinstance(raw, Mapping) or not raw:
            return False
        if all(code in self._localization.locales for code in raw.keys()):
            return True
        return (
            all(isinstance(code, str) and _LOCALE_CODE.match(code) for code in raw.keys())
            and resolve_locale_code(self._localization.current_locale, raw.keys(), self._localization)
            is not None
        )


def _setter(target: Any, attr: str, skip_none: bool) -> Callable[[Any], None]:
    def assign(value: Any) -> None:
        if value is None and skip_none:
            return
        setattr(target, attr, value)

    return assign
