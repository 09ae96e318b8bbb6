"""
schemas.py — Request/Response modele FastAPI.
Oddzielone od contracts.py żeby API mogło ewoluować niezależnie.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from contracts import Locale


# ─────────────────────────── /decode ─────────────────────────────

class DecodeRequest(BaseModel):
    response: dict[str, Any]                   # surowa odpowiedź API (zasób albo kolekcja)
    locales: list[Locale] = Field(default_factory=list)
    locale: Optional[str] = None               # bieżące locale; domyślnie locale oznaczone default
    skip_invalid: bool = False                 # tylko kolekcje: pomiń wadliwe zasoby


class DecodeResponse(BaseModel):
    kind: str                                  # "collection" | "resource"
    locale: str
    items: list[dict[str, Any]]
    included_entries: list[dict[str, Any]] = []
    included_assets: list[dict[str, Any]] = []
    total: int = 0
    errors: list[dict[str, Any]] = []


# ─────────────────────────── /health ─────────────────────────────

class HealthResponse(BaseModel):
    status: str
    version: str
