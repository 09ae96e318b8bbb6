"""
dependencies.py — FastAPI Dependency Injection.
Rejestr content types i ustawienia trzymane w Request.app.state.
"""
from __future__ import annotations

from fastapi import Request

from config import Settings
from ports.resource import ContentTypeRegistry


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_content_types(request: Request) -> ContentTypeRegistry:
    return request.app.state.content_types
