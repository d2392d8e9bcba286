# tests/unit/test_post_service.py
# Unit tests for post summaries, ordering and mutations

from datetime import datetime, timezone

import pytest

from collage_api.app.core.errors import BadRequest
from collage_api.app.schemas.post import CollageItem, PostCreate
from collage_api.app.services.post_service import (
    EPOCH,
    PostService,
    clean_slug,
    parse_timestamp,
    summarize,
)
from collage_api.app.services.record_resolver import RecordNotFound, RecordResolver


@pytest.fixture
def service(storage):
    return PostService(RecordResolver(storage, prefix="collages", page_size=2), storage)


class TestHelpers:
    def test_clean_slug(self):
        assert clean_slug("  case-1 ") == "case-1"
        for bad in (None, "", "   ", "a/b"):
            with pytest.raises(BadRequest):
                clean_slug(bad)

    def test_parse_timestamp(self):
        assert parse_timestamp("2024-05-01") == datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert parse_timestamp("2024-05-01T10:00:00.000Z") == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)
        assert parse_timestamp("yesterday") == EPOCH
        assert parse_timestamp(None) == EPOCH
        assert parse_timestamp(20240501) == EPOCH

    def test_summary_defaults(self):
        summary = summarize("case-1", {"items": [{"url": "https://cdn/1.jpg"}], "created_at": "2024-01-01"})
        assert summary.title == "case-1"
        assert summary.date == "2024-01-01"
        assert summary.preview == "https://cdn/1.jpg"
        assert summary.tags == []
        assert summary.visible is True

    def test_summary_preview_order(self):
        data = {"cover": "https://cdn/cover.jpg", "items": [{"url": "https://cdn/1.jpg"}]}
        assert summarize("s", data).preview == "https://cdn/cover.jpg"
        data["preview"] = "https://cdn/p.jpg"
        assert summarize("s", data).preview == "https://cdn/p.jpg"
        assert summarize("s", {}).preview is None

    def test_only_literal_false_hides(self):
        assert summarize("s", {"visible": False}).visible is False
        assert summarize("s", {"visible": 0}).visible is True
        assert summarize("s", {"visible": None}).visible is True


class TestListing:
    @pytest.mark.asyncio
    async def test_newest_first_with_fallbacks(self, storage, service):
        storage.put_raw("collages/old/data", {"date": "2023-01-01"})
        storage.put_raw("collages/new/data", {"date": "2024-06-01"})
        storage.put_raw("collages/created/data", {"created_at": "2024-01-01T00:00:00.000Z"})
        storage.put_raw("collages/undated/data", {"title": "no date"})
        posts = await service.list_posts()
        assert [p.slug for p in posts] == ["new", "created", "old", "undated"]

    @pytest.mark.asyncio
    async def test_hidden_posts(self, storage, service):
        storage.put_raw("collages/shown/data", {"date": "2024-01-01"})
        storage.put_raw("collages/hidden/data", {"date": "2024-02-01", "visible": False})
        assert [p.slug for p in await service.list_posts()] == ["shown"]
        assert [p.slug for p in await service.list_posts(include_hidden=True)] == ["hidden", "shown"]


class TestMutations:
    @pytest.mark.asyncio
    async def test_create_builds_record(self, storage, service):
        payload = PostCreate(
            slug=" case-1 ",
            title="Night",
            date="2024-05-01",
            items=[CollageItem(url="https://cdn/1.jpg", caption="one"), CollageItem(url="https://cdn/2.jpg")],
        )
        assert await service.create_post(payload) == "case-1"
        record = storage.record("collages/case-1/data")
        assert record["slug"] == "case-1"
        assert record["desc"] == ""
        assert record["tags"] == []
        assert record["preview"] == "https://cdn/1.jpg"
        assert record["visible"] is True
        assert record["items"] == [{"url": "https://cdn/1.jpg", "caption": "one"}, {"url": "https://cdn/2.jpg"}]
        assert record["created_at"].endswith("Z")

    @pytest.mark.asyncio
    async def test_create_keeps_explicit_preview_and_visibility(self, storage, service):
        payload = PostCreate(
            slug="case-2",
            items=[CollageItem(url="https://cdn/1.jpg")],
            preview="https://cdn/cover.jpg",
            visible=False,
        )
        await service.create_post(payload)
        record = storage.record("collages/case-2/data")
        assert record["preview"] == "https://cdn/cover.jpg"
        assert record["visible"] is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sent", ["false", 0, "abc", None])
    async def test_create_ignores_non_boolean_visibility(self, storage, service, sent):
        await service.create_post(PostCreate(slug="case-3", items=[CollageItem(url="https://cdn/1.jpg")], visible=sent))
        assert storage.record("collages/case-3/data")["visible"] is True

    @pytest.mark.asyncio
    async def test_create_requires_items(self, service):
        with pytest.raises(BadRequest, match="items required"):
            await service.create_post(PostCreate(slug="x", items=[]))

    @pytest.mark.asyncio
    async def test_set_visibility_missing(self, service):
        with pytest.raises(RecordNotFound):
            await service.set_visibility("ghost", False)

    @pytest.mark.asyncio
    async def test_delete(self, storage, service):
        storage.put_raw("collages/case-1/data", {"title": "x"})
        storage.put_raw("collages/case-1/data.json", {"title": "x"})
        storage.images["collages/case-1/01"] = b"img"
        storage.put_raw("collages/case-10/data", {"title": "other"})

        assert await service.delete_post("case-1") == "case-1"

        assert storage.deleted == [("collages/case-1/", "image"), ("collages/case-1/", "raw")]
        assert storage.deleted_folders == ["collages/case-1/"]
        assert list(storage.raw) == ["collages/case-10/data"]
        assert storage.images == {}
