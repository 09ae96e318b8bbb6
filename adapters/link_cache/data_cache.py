"""
DataCache — repozytorium zasobów jednej sesji dekodowania, trzymane in-memory.
Klucz: "<tag>_<id>" (tag: entry / asset). Jeden slot na (typ, id) niezależnie od locale;
późniejszy zasób o tym samym id nadpisuje wcześniejszy.
"""
from __future__ import annotations

from typing import Any, Optional

from contracts import Asset, Link, LinkType

_TAGS = {LinkType.ENTRY: "entry", LinkType.ASSET: "asset"}


def cache_key(link: Link) -> str:
    return f"{_TAGS[link.link_type]}_{link.id}"


def cache_key_for(resource: Any) -> str:
    """Klucz dla już zdekodowanego zasobu: Asset → asset_<id>, reszta → entry_<id>."""
    link_type = LinkType.ASSET if isinstance(resource, Asset) else LinkType.ENTRY
    return f"{_TAGS[link_type]}_{resource.id}"


class DataCache:
    def __init__(self) -> None:
        # cache key → zasób (Asset, Entry albo typ użytkownika)
        self._items: dict[str, Any] = {}

    # ── write ─────────────────────────────────────────────────────────────────

    def add(self, resource: Any) -> None:
        self._items[cache_key_for(resource)] = resource

    def add_asset(self, asset: Any) -> None:
        self._items[f"asset_{asset.id}"] = asset

    def add_entry(self, entry: Any) -> None:
        self._items[f"entry_{entry.id}"] = entry

    def clear(self) -> None:
        self._items.clear()

    # ── lookup ────────────────────────────────────────────────────────────────

    def item(self, key: str) -> Optional[Any]:
        return self._items.get(key)

    def __len__(self) -> int:
        return len(self._items)
