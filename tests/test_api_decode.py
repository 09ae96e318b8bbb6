from __future__ import annotations

from fastapi.testclient import TestClient

from api.main import create_app
from config import Settings


def _client(**settings) -> TestClient:
    return TestClient(create_app(settings=Settings(**settings)))


def _link(id_: str) -> dict:
    return {"sys": {"type": "Link", "linkType": "Entry", "id": id_}}


def _entry(id_: str, fields: dict) -> dict:
    return {
        "sys": {
            "id": id_,
            "type": "Entry",
            "contentType": {"sys": {"type": "Link", "linkType": "ContentType", "id": "post"}},
        },
        "fields": fields,
    }


def test_health():
    resp = _client().get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_decode_collection_resolves_links_as_references():
    body = {
        "response": {
            "sys": {"type": "Array"},
            "total": 2,
            "items": [
                _entry("a", {"title": {"en-US": "A"}, "next": {"en-US": _link("b")}}),
                _entry("b", {"title": {"en-US": "B", "de-DE": "B (de)"}, "next": {"en-US": _link("a")}}),
            ],
        },
        "locales": [
            {"code": "en-US", "default": True},
            {"code": "de-DE", "fallbackCode": "en-US"},
        ],
        "locale": "de-DE",
    }
    resp = _client().post("/decode", json=body)
    assert resp.status_code == 200
    data = resp.json()
    assert data["kind"] == "collection"
    assert data["locale"] == "de-DE"
    first, second = data["items"]
    assert first["fields"]["title"] == "A"
    assert first["fields"]["next"] == {"link": "Entry", "id": "b", "resolved": True}
    assert second["fields"]["title"] == "B (de)"


def test_decode_single_resource_with_unresolved_link():
    body = {"response": _entry("a", {"next": _link("missing")})}
    resp = _client(default_locale="en-US").post("/decode", json=body)
    assert resp.status_code == 200
    data = resp.json()
    assert data["kind"] == "resource"
    assert data["items"][0]["fields"]["next"]["resolved"] is False


def test_structural_error_maps_to_422():
    resp = _client().post("/decode", json={"response": {"sys": {"type": "Array"}, "items": [{"fields": {}}]}})
    assert resp.status_code == 422
    assert resp.json()["error"] == "structural"


def test_strict_content_types_maps_to_422():
    resp = _client(strict_content_types=True).post("/decode", json={"response": _entry("a", {})})
    assert resp.status_code == 422
    assert resp.json()["error"] == "unknown_content_type"


def test_malformed_content_type_link_maps_to_422():
    payload = {"sys": {"id": "x", "type": "Entry", "contentType": {"sys": "oops"}}, "fields": {}}
    resp = _client().post("/decode", json={"response": payload})
    assert resp.status_code == 422
    assert resp.json()["error"] == "structural"
