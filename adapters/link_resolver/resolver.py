"""
LinkResolver — odroczone rozwiązywanie linków w obrębie jednej odpowiedzi.

Cykl życia:
  1. dekodowanie: zasoby trafiają do cache (cache*), pola-linki rejestrują callbacki
     (resolve / resolve_many)
  2. churn_links(): każdy callback dostaje zasób (albo None) lub listę zasobów
     (brakujące pominięte), po czym tabela callbacków i cache są zerowane.

Instancja jest wielokrotnego użytku między odpowiedziami, ale nie dzieli stanu
między cyklami. Nie jest thread-safe: jedna sesja dekodowania na instancję.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

from adapters.link_cache.data_cache import DataCache, cache_key
from contracts import Link
from ports.link_resolver import LinkCache, ResolutionCallback

logger = logging.getLogger("contentwire.link_resolver")


@dataclass(frozen=True)
class SingleKey:
    key: str


@dataclass(frozen=True)
class ListKey:
    keys: tuple[str, ...]


ResolutionKey = Union[SingleKey, ListKey]


@dataclass
class ChurnReport:
    keys: int = 0
    callbacks: int = 0
    unresolved: list[str] = field(default_factory=list)
    failed: int = 0


class LinkResolver:
    def __init__(self, cache: Optional[LinkCache] = None) -> None:
        self._cache: LinkCache = cache if cache is not None else DataCache()
        # klucz rozwiązania → callbacki w kolejności rejestracji
        self._callbacks: dict[ResolutionKey, list[ResolutionCallback]] = {}

    # ── cache ─────────────────────────────────────────────────────────────────

    def cache(self, resource: Any) -> None:
        self._cache.add(resource)

    def cache_assets(self, assets: Iterable[Any]) -> None:
        for asset in assets:
            self._cache.add_asset(asset)

    def cache_entries(self, entries: Iterable[Any]) -> None:
        for entry in entries:
            self._cache.add_entry(entry)

    def cache_resources(self, resources: Iterable[Any]) -> None:
        for resource in resources:
            self._cache.add(resource)

    # ── rejestracja ───────────────────────────────────────────────────────────

    def resolve(self, link: Link, callback: ResolutionCallback) -> None:
        self._callbacks.setdefault(SingleKey(cache_key(link)), []).append(callback)

    def resolve_many(self, links: Iterable[Link], callback: ResolutionCallback) -> None:
        key = ListKey(tuple(cache_key(link) for link in links))
        self._callbacks.setdefault(key, []).append(callback)

    # ── churn ─────────────────────────────────────────────────────────────────

    def churn_links(self) -> ChurnReport:
        """Wywołuje wszystkie callbacki, potem czyści callbacki i cache. Nie rzuca."""
        pending, self._callbacks = self._callbacks, {}
        report = ChurnReport(keys=len(pending))
        for key, callbacks in pending.items():
            if isinstance(key, ListKey):
                items = [self._cache.item(k) for k in key.keys]
                missing = [k for k, item in zip(key.keys, items) if item is None]
                value: Any = [item for item in items if item is not None]
            else:
                value = self._cache.item(key.key)
                missing = [key.key] if value is None else []

            for k in missing:
                logger.debug("Unresolved link %s", k)
            report.unresolved.extend(missing)

            for callback in callbacks:
                report.callbacks += 1
                try:
                    callback(list(value) if isinstance(key, ListKey) else value)
                except Exception:
                    report.failed += 1
                    logger.warning("Link callback for %s failed", key, exc_info=True)

        self._cache.clear()
        return report

    # ── introspekcja ──────────────────────────────────────────────────────────

    @property
    def pending_count(self) -> int:
        return sum(len(cbs) for cbs in self._callbacks.values())

    @property
    def cached_count(self) -> int:
        return len(self._cache)

    def cached(self, key: str) -> Any:
        return self._cache.item(key)
