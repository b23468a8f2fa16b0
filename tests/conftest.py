"""Shared pytest fixtures for the Story Recorder test suite."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest
import structlog

from story_recorder.config.settings import Settings
from story_recorder.interfaces.transcoder import ITranscoder
from story_recorder.models.story import StoryRecord
from story_recorder.providers.counter.json_counter_store import JsonCounterStore
from story_recorder.providers.metadata.json_metadata_store import JsonMetadataStore

CATEGORIES = ("nina", "dani", "beide")

# Uncached loggers so output always goes to the stream pytest is capturing.
structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
    cache_logger_on_first_use=False,
)


class FakeTranscoder(ITranscoder):
    """Transcoder double: returns a fixed duration (or None) and records calls."""

    def __init__(self, duration: float | None = None, available: bool = True) -> None:
        self.duration = duration
        self.available = available
        self.calls: list[Path] = []

    def get_provider_name(self) -> str:
        return "fake"

    def is_available(self) -> bool:
        return self.available

    async def fix(self, audio_path: str | Path) -> float | None:
        self.calls.append(Path(audio_path))
        return self.duration


def make_record(
    story_id: str = "001",
    recorded_by: str = "nina",
    author: str = "Mira",
    timestamp: datetime | None = None,
    **kwargs: Any,
) -> StoryRecord:
    return StoryRecord(
        id=story_id,
        recorded_by=recorded_by,
        author=author,
        timestamp=timestamp or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        duration=kwargs.get("duration", 12.5),
        liked=kwargs.get("liked", False),
        audio_path=kwargs.get("audio_path", f"audios/{story_id}_{recorded_by}.webm"),
    )


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Empty data directory with the audio and temp folders in place."""
    root = tmp_path / "stories"
    (root / "audios").mkdir(parents=True)
    (root / "temp").mkdir()
    return root


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return Settings(
        _env_file=None,
        data_dir=str(data_dir),
        admin_password="s3cret",
        transcode_enabled=False,
        relocate_backoff_seconds=0.0,
    )


@pytest.fixture
def app_config() -> dict[str, Any]:
    """Resolved config as ``load_config`` would return it."""
    return {
        "app": {"name": "story-recorder", "version": "0.1.0"},
        "stories": {"categories": list(CATEGORIES), "id_width": 3},
        "upload": {
            "allowed_extensions": [".webm", ".ogg", ".mp4", ".m4a", ".wav", ".mp3"],
            "default_extension": ".webm",
        },
    }


@pytest.fixture
async def counter_store(data_dir: Path) -> JsonCounterStore:
    store = JsonCounterStore(data_dir / "counter.json")
    await store.initialize()
    return store


@pytest.fixture
async def metadata_store(data_dir: Path) -> JsonMetadataStore:
    store = JsonMetadataStore(data_dir / "stories.json")
    await store.initialize()
    return store


@pytest.fixture
def fake_transcoder() -> FakeTranscoder:
    return FakeTranscoder()


@pytest.fixture
def temp_upload(data_dir: Path):
    """Factory writing a fake recording into the temp folder."""

    def _make(name: str = "temp_upload.webm", payload: bytes = b"\x1aE\xdf\xa3fake-webm") -> Path:
        path = data_dir / "temp" / name
        path.write_bytes(payload)
        return path

    return _make
