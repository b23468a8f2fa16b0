"""Unit tests for AdminService."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from story_recorder.models.filters import FilterSpec
from story_recorder.services.admin_service import AdminService
from story_recorder.utils.errors import StorageError
from tests.conftest import CATEGORIES, make_record

_BASE = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
async def service(metadata_store, data_dir):
    for offset, (story_id, category) in enumerate([("001", "nina"), ("002", "dani"), ("003", "dani")]):
        record = make_record(story_id, category, timestamp=_BASE + timedelta(minutes=offset))
        await metadata_store.append_one(record)
        (data_dir / record.audio_path).write_bytes(b"audio")
    return AdminService(metadata_store, data_dir, CATEGORIES)


@pytest.mark.asyncio
async def test_list_stories_newest_first(service):
    assert [r.id for r in await service.list_stories()] == ["003", "002", "001"]


@pytest.mark.asyncio
async def test_query_uses_filter_engine(service):
    view = await service.query(FilterSpec(for_whom="dani"))
    assert [r.id for r in view.stories] == ["003", "002"]
    assert view.facets.for_whom == {"nina": 1, "dani": 2, "beide": 0}


# ─── Like toggle ──────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_toggle_like_twice_restores_state(service, metadata_store):
    first = await service.toggle_like("002")
    second = await service.toggle_like("002")

    assert first.liked is True
    assert second.liked is False
    assert (await metadata_store.get_by_id("002")).liked is False


@pytest.mark.asyncio
async def test_toggle_like_unknown_id(service, metadata_store):
    before = metadata_store.path.read_text()
    assert await service.toggle_like("999") is None
    assert metadata_store.path.read_text() == before


# ─── Delete ───────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_delete_removes_record_and_file(service, metadata_store, data_dir):
    removed = await service.delete_story("001")

    assert removed.id == "001"
    assert await metadata_store.get_by_id("001") is None
    assert not (data_dir / "audios" / "001_nina.webm").exists()


@pytest.mark.asyncio
async def test_delete_tolerates_missing_audio(service, metadata_store, data_dir):
    (data_dir / "audios" / "002_dani.webm").unlink()

    assert (await service.delete_story("002")).id == "002"
    assert await metadata_store.get_by_id("002") is None


@pytest.mark.asyncio
async def test_delete_unknown_id(service):
    assert await service.delete_story("999") is None


@pytest.mark.asyncio
async def test_delete_reports_undeletable_audio(service, metadata_store):
    with patch("pathlib.Path.unlink", side_effect=PermissionError(13, "denied")):
        with pytest.raises(StorageError):
            await service.delete_story("003")

    # The record is already gone; it never points at a file it can't find.
    assert await metadata_store.get_by_id("003") is None
