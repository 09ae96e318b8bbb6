"""
Port: LinkResolver
Odpowiedzialność: odroczone rozwiązywanie linków między zasobami jednej odpowiedzi.
"""
from typing import Any, Callable, Iterable, Optional, Protocol, runtime_checkable

from contracts import Link

ResolutionCallback = Callable[[Any], None]


@runtime_checkable
class LinkCache(Protocol):
    def add(self, resource: Any) -> None:
        """Stores the resource under its derived cache key, overwriting any previous one."""
        ...

    def add_asset(self, asset: Any) -> None:
        """Stores a resource under the asset key, whatever its Python type."""
        ...

    def add_entry(self, entry: Any) -> None:
        """Stores a resource under the entry key, whatever its Python type."""
        ...

    def item(self, key: str) -> Optional[Any]:
        """Returns the cached resource or None. Never raises."""
        ...

    def clear(self) -> None:
        """Drops every cached resource."""
        ...

    def __len__(self) -> int:
        ...


@runtime_checkable
class LinkResolverPort(Protocol):
    def cache(self, resource: Any) -> None:
        """Adds one decoded asset or entry to the session cache."""
        ...

    def resolve(self, link: Link, callback: ResolutionCallback) -> None:
        """
        Registers a callback for a single link.
        On churn it receives the linked resource, or None if it was never cached.
        """
        ...

    def resolve_many(self, links: Iterable[Link], callback: ResolutionCallback) -> None:
        """
        Registers a callback for an ordered list of links.
        On churn it receives the list of cached resources in link order; misses are dropped.
        """
        ...

    def churn_links(self) -> Any:
        """Runs every pending callback, then clears callbacks and cache. Never raises."""
        ...
