"""
Router: POST /decode

Dekoduje surową odpowiedź API (pojedynczy zasób albo kolekcję `sys.type == "Array"`),
rozwiązuje linki i zwraca podgląd zasobów. Każde żądanie ma własny LinkResolver.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from adapters.resource_decoder.decoder import DecodeContext, ResponseDecoder
from adapters.resource_decoder.summary import summarize_resource
from api.dependencies import get_content_types, get_settings
from api.schemas import DecodeRequest, DecodeResponse
from config import Settings
from ports.resource import ContentTypeRegistry

router = APIRouter(prefix="/decode", tags=["decode"])


@router.post("", response_model=DecodeResponse)
async def decode(
    body: DecodeRequest,
    settings: Settings = Depends(get_settings),
    content_types: ContentTypeRegistry = Depends(get_content_types),
) -> DecodeResponse:
    context = DecodeContext.create(
        locales=body.locales,
        locale=body.locale,
        content_types=content_types,
        default_locale=settings.default_locale,
        strict_content_types=settings.strict_content_types,
    )
    decoder = ResponseDecoder(context)
    locale = context.localization.current_locale.code

    sys = body.response.get("sys")
    if isinstance(sys, dict) and sys.get("type") == "Array":
        result = decoder.decode_collection(body.response, skip_invalid=body.skip_invalid)
        return DecodeResponse(
            kind="collection",
            locale=locale,
            items=[summarize_resource(r) for r in result.items],
            included_entries=[summarize_resource(r) for r in result.included_entries],
            included_assets=[summarize_resource(r) for r in result.included_assets],
            total=result.total,
            errors=result.errors,
        )

    resource = decoder.decode_single(body.response)
    return DecodeResponse(kind="resource", locale=locale, items=[summarize_resource(resource)], total=1)
