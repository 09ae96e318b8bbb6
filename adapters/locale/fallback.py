"""
Locale fallback — wybór najlepszego dostępnego locale dla pola wielojęzycznego.

Algorytm: start od preferowanego locale; dopóki mapa pola nie ma klucza z kodem
bieżącego locale, przejdź do jego `fallback_code`. Koniec łańcucha, nieznany kod
fallbacku albo cykl → None (NotFound). Maksymalnie len(locales) + 1 kroków.
"""
from __future__ import annotations

import logging
from typing import Collection, Optional

from contracts import Locale, LocalizationContext

logger = logging.getLogger("contentwire.locale_fallback")


def fallback_chain(preferred: Locale, context: LocalizationContext) -> list[str]:
    """Zwraca kody locale w kolejności przeszukiwania, bez powtórzeń."""
    chain: list[str] = []
    current: Optional[Locale] = preferred
    while current is not None:
        if current.code in chain:
            logger.warning("Locale fallback cycle detected: %s -> %s", " -> ".join(chain), current.code)
            break
        chain.append(current.code)
        if current.fallback_code is None:
            break
        nxt = context.locales.get(current.fallback_code)
        if nxt is None:
            logger.debug(
                "Fallback locale %r of %r is not a known locale.",
                current.fallback_code, current.code,
            )
        current = nxt
    return chain


def resolve_locale_code(
    preferred: Locale,
    available: Collection[str],
    context: LocalizationContext,
) -> Optional[str]:
    """Pierwszy kod z łańcucha fallback obecny w `available`, albo None."""
    for code in fallback_chain(preferred, context):
        if code in available:
            return code
    return None
