"""
api/main.py — punkt wejścia FastAPI.

Serwis bezstanowy: każde żądanie /decode buduje własny DecodeContext
(LinkResolver nie jest współdzielony między żądaniami).
Rejestr content types można podać do create_app() (własne typy EntryModel).
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.routers import decode
from api.schemas import HealthResponse
from config import Settings
from contracts import MissingLocalizedValue, StructuralDecodeError, UnknownContentType
from ports.resource import ContentTypeRegistry

logger = logging.getLogger("contentwire")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Contentwire API ready (%d registered content types).",
        len(app.state.content_types),
    )
    yield
    logger.info("Shutting down.")


def create_app(
    settings: Optional[Settings] = None,
    content_types: Optional[ContentTypeRegistry] = None,
) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.content_types = dict(content_types or {})

    # Routers
    app.include_router(decode.router)

    # Health
    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health():
        return HealthResponse(status="ok", version=settings.app_version)

    # Globalne handlery błędów
    @app.exception_handler(StructuralDecodeError)
    async def structural_error_handler(request: Request, exc: StructuralDecodeError):
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "error": "structural", "path": exc.path},
        )

    @app.exception_handler(MissingLocalizedValue)
    async def missing_value_handler(request: Request, exc: MissingLocalizedValue):
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "error": "missing_value", "field": exc.field_key},
        )

    @app.exception_handler(UnknownContentType)
    async def unknown_type_handler(request: Request, exc: UnknownContentType):
        return JSONResponse(status_code=422, content={"detail": str(exc), "error": "unknown_content_type"})

    @app.exception_handler(KeyError)
    async def key_error_handler(request: Request, exc: KeyError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    return app


app = create_app()
