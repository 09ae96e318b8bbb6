from __future__ import annotations

from typing import Any, ClassVar, Optional

import pytest
from pydantic import Field

from adapters.resource_decoder.decoder import DecodeContext, ResponseDecoder
from contracts import (
    Asset,
    ContentType,
    DeletedResource,
    Entry,
    EntryModel,
    FileMetadata,
    Link,
    Locale,
    MissingLocalizedValue,
    Resource,
    StructuralDecodeError,
    UnknownContentType,
)
from ports.resource import AssetDecodable, EntryDecodable, ResourceProtocol, build_registry


class Cat(EntryModel):
    content_type_id: ClassVar[str] = "cat"

    name: str
    lives: int = 9
    best_friend: Optional[Any] = None
    kittens: list[Any] = Field(default_factory=list)
    image: Optional[Any] = None

    @classmethod
    def decode(cls, decoder):
        fields = decoder.fields_container()
        cat = cls(
            sys=decoder.sys(),
            name=fields.decode("name", str),
            lives=fields.decode_if_present("lives", int, 9),
        )
        fields.assign_link("bestFriend", cat, "best_friend")
        fields.assign_links("kittens", cat, "kittens")
        fields.assign_link("image", cat, "image")
        return cat


class Picture(Resource):
    url: Optional[str] = None

    @classmethod
    def decode(cls, decoder):
        file = decoder.fields_container().decode_if_present("file", FileMetadata)
        return cls(sys=decoder.sys(), url=file.url if file else None)


def _link(link_type: str, id_: str) -> dict:
    return {"sys": {"type": "Link", "linkType": link_type, "id": id_}}


def _sys(id_: str, type_: str = "Entry", content_type: str | None = "cat", locale: str | None = "en-US") -> dict:
    sys: dict = {
        "id": id_,
        "type": type_,
        "createdAt": "2017-05-18T09:14:45.000Z",
        "updatedAt": "2017-05-18T09:14:45.000Z",
        "revision": 1,
    }
    if locale:
        sys["locale"] = locale
    if content_type:
        sys["contentType"] = {"sys": {"type": "Link", "linkType": "ContentType", "id": content_type}}
    return sys


def _cat(id_: str, name: str, **fields: Any) -> dict:
    return {"sys": _sys(id_), "fields": {"name": name, **fields}}


def _asset(id_: str) -> dict:
    return {
        "sys": _sys(id_, "Asset", content_type=None),
        "fields": {
            "title": "Nyan Cat",
            "file": {
                "url": "//images.example.com/nyan.png",
                "fileName": "Nyan_cat_250px_frame.png",
                "contentType": "image/png",
                "details": {"size": 12273, "image": {"width": 250, "height": 250}},
            },
        },
    }


def _collection() -> dict:
    return {
        "sys": {"type": "Array"},
        "total": 1,
        "skip": 0,
        "limit": 100,
        "items": [
            _cat(
                "nyancat", "Nyan Cat",
                lives=1337,
                bestFriend=_link("Entry", "happycat"),
                kittens=[_link("Entry", "happycat"), _link("Entry", "ghost"), _link("Entry", "garfield")],
                image=_link("Asset", "nyan-image"),
            ),
        ],
        "includes": {
            "Entry": [
                _cat("happycat", "Happy Cat", bestFriend=_link("Entry", "nyancat")),
                _cat("garfield", "Garfield"),
            ],
            "Asset": [_asset("nyan-image")],
        },
    }


def _decoder(**kwargs: Any) -> ResponseDecoder:
    kwargs.setdefault("content_types", build_registry([Cat]))
    return ResponseDecoder(DecodeContext.create(**kwargs))


def test_collection_links_are_resolved_after_churn():
    result = _decoder().decode_collection(_collection())

    nyan = result.items[0]
    assert isinstance(nyan, Cat)
    assert nyan.lives == 1337
    assert nyan.best_friend.name == "Happy Cat"
    assert [k.id for k in nyan.kittens] == ["happycat", "garfield"]
    assert isinstance(nyan.image, Asset)
    assert nyan.image.file.details.image.width == 250
    # cykl A → B → A
    assert nyan.best_friend.best_friend is nyan
    assert result.total == 1 and result.limit == 100
    assert len(result.included_entries) == 2
    assert len(result.included_assets) == 1


def test_resolver_state_is_cleared_after_collection_decode():
    decoder = _decoder()
    decoder.decode_collection(_collection())
    assert decoder.context.link_resolver.pending_count == 0
    assert decoder.context.link_resolver.cached_count == 0


def test_unresolved_single_link_leaves_field_unset():
    cat = _decoder().decode_single(_cat("lonely", "Lonely", bestFriend=_link("Entry", "nobody")))
    assert cat.best_friend is None


def test_unknown_content_type_falls_back_to_generic_entry():
    payload = {
        "sys": {"type": "Array"},
        "items": [
            {"sys": _sys("post-1", content_type="post"), "fields": {
                "title": "Hello",
                "author": _link("Entry", "nyancat"),
                "tags": ["a", "b"],
                "location": {"lat": 52.2, "lon": 21.0},
            }},
            _cat("nyancat", "Nyan Cat"),
        ],
    }
    result = _decoder().decode_collection(payload)

    post = result.items[0]
    assert isinstance(post, Entry)
    assert post.content_type == "post"
    assert post.fields["title"] == "Hello"
    assert isinstance(post.fields["author"], Cat)
    assert post.fields["tags"] == ["a", "b"]


def test_generic_entry_keeps_link_when_target_missing():
    entry = _decoder().decode_single(
        {"sys": _sys("post-2", content_type="post"), "fields": {"author": _link("Entry", "ghost")}}
    )
    assert isinstance(entry.fields["author"], Link)


def test_strict_content_types_reject_unknown_type():
    decoder = _decoder(strict_content_types=True)
    with pytest.raises(UnknownContentType):
        decoder.decode_single({"sys": _sys("post-1", content_type="post"), "fields": {}})


def test_multi_locale_payload_uses_fallback_chain():
    locales = [
        Locale(code="en-US", default=True),
        Locale(code="de-DE", fallback_code="en-US"),
    ]
    payload = {
        "sys": _sys("nyancat", locale=None),
        "fields": {
            "name": {"en-US": "Nyan Cat", "de-DE": "Nyan Katze"},
            "lives": {"en-US": 1337},
        },
    }
    cat = _decoder(locales=locales, locale="de-DE").decode_single(payload)
    assert cat.name == "Nyan Katze"
    assert cat.lives == 1337
    assert cat.locale_code is None


def test_missing_required_field_propagates():
    payload = {"sys": {"type": "Array"}, "items": [{"sys": _sys("bad"), "fields": {}}]}
    with pytest.raises(MissingLocalizedValue):
        _decoder().decode_collection(payload)


def test_skip_invalid_reports_error_and_keeps_other_items():
    payload = {
        "sys": {"type": "Array"},
        "items": [{"sys": _sys("bad"), "fields": {}}, _cat("good", "Good")],
    }
    result = _decoder().decode_collection(payload, skip_invalid=True)
    assert [c.id for c in result.items] == ["good"]
    assert result.errors[0]["details"]["path"] == "items[0]"


def test_structural_errors_propagate():
    with pytest.raises(StructuralDecodeError):
        _decoder().decode_single({"fields": {}})
    with pytest.raises(StructuralDecodeError):
        _decoder().decode_single({"sys": {"id": "x", "type": "Space"}})
    with pytest.raises(StructuralDecodeError):
        _decoder().decode_collection({"sys": {"type": "Array"}, "items": {}})


def test_empty_id_is_rejected():
    with pytest.raises(StructuralDecodeError):
        _decoder().decode_single({"sys": {"id": "", "type": "Entry"}, "fields": {}})


def test_resource_accessors_derive_from_sys():
    cat = _decoder().decode_single(_cat("nyancat", "Nyan Cat"))
    assert cat.id == "nyancat"
    assert cat.locale_code == "en-US"
    assert cat.created_at is not None and cat.created_at.year == 2017
    assert cat.updated_at == cat.sys.updated_at
    assert isinstance(cat, ResourceProtocol)
    assert isinstance(cat, EntryDecodable)


def test_deleted_resources_and_content_types():
    decoder = _decoder()
    deleted = decoder.decode_resource({"sys": {"id": "gone", "type": "DeletedEntry"}})
    assert isinstance(deleted, DeletedResource)

    content_type = decoder.decode_resource({
        "sys": {"id": "cat", "type": "ContentType"},
        "name": "Cat",
        "displayField": "name",
        "fields": [
            {"id": "name", "name": "Name", "type": "Symbol", "localized": True, "required": True},
            {"id": "bestFriend", "name": "Best Friend", "type": "Link", "linkType": "Entry"},
        ],
    })
    assert isinstance(content_type, ContentType)
    assert content_type.identifier == "cat"
    assert [f.id for f in content_type.fields] == ["name", "bestFriend"]


def test_build_registry_rejects_duplicates():
    class OtherCat(Cat):
        pass

    with pytest.raises(ValueError):
        build_registry([Cat, OtherCat])


def test_custom_asset_type_is_decoded_and_linked():
    result = _decoder(asset_type=Picture).decode_collection(_collection())

    nyan = result.items[0]
    assert isinstance(nyan.image, Picture)
    assert nyan.image.url == "//images.example.com/nyan.png"
    assert result.included_assets == [nyan.image]
    assert isinstance(nyan.image, AssetDecodable)


def test_generic_entry_localizes_map_with_locales_outside_context():
    entry = _decoder().decode_single({
        "sys": _sys("post-3", content_type="post", locale=None),
        "fields": {"title": {"en-US": "A", "fr-FR": "Ah"}},
    })
    assert entry.fields["title"] == "A"


def test_malformed_content_type_link_is_structural_error():
    with pytest.raises(StructuralDecodeError):
        _decoder().decode_single(
            {"sys": {"id": "x", "type": "Entry", "contentType": {"sys": "oops"}}, "fields": {}}
        )


def test_content_type_with_null_fields_is_structural_error():
    with pytest.raises(StructuralDecodeError) as exc_info:
        _decoder().decode_resource({"sys": {"id": "cat", "type": "ContentType"}, "name": "Cat", "fields": None})
    assert exc_info.value.path == "fields"


def test_collection_errors_must_be_list_of_objects():
    with pytest.raises(StructuralDecodeError):
        _decoder().decode_collection({"sys": {"type": "Array"}, "items": [], "errors": 5})
    with pytest.raises(StructuralDecodeError) as exc_info:
        _decoder().decode_collection({"sys": {"type": "Array"}, "items": [], "errors": [{}, "boom"]})
    assert exc_info.value.path == "errors[1]"

    result = _decoder().decode_collection(
        {"sys": {"type": "Array"}, "items": [], "errors": [{"sys": {"id": "notResolvable", "type": "error"}}]}
    )
    assert result.errors[0]["sys"]["id"] == "notResolvable"
