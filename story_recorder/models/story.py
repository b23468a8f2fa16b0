"""Story domain models - recorded audio stories and their metadata document.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph - no imports from upper layers).
#
# ``StoryRecord`` is the single persisted shape for a recording.  The on-disk
# metadata document wraps the records in ``StoryDocument`` so the schema is
# versioned from the start; older per-file JSON metadata is imported once by
# the ``migrate`` CLI and never read at runtime.
#
# All models use ``frozen=True``.  The only mutation a record ever sees (the
# ``liked`` toggle) goes through ``model_copy(update={...})``.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Version of the metadata document layout written by this code.
SCHEMA_VERSION = 1

# Relative directory (under the data dir) holding the audio blobs.
AUDIO_SUBDIR = "audios"


def format_story_id(value: int, width: int = 3) -> str:
    """Zero-pad a counter value to ``width`` digits.

    Values that need more digits than ``width`` are written in full
    (``1000`` -> ``"1000"``); ids are never truncated.
    """
    if value < 1:
        raise ValueError(f"Story ids start at 1, got {value}")
    return str(value).zfill(width)


def build_audio_path(story_id: str, category: str, extension: str) -> str:
    """Return the relative audio path for a story, e.g. ``audios/001_dani.webm``."""
    if not extension.startswith("."):
        extension = f".{extension}"
    return f"{AUDIO_SUBDIR}/{story_id}_{category}{extension}"


class StoryRecord(BaseModel):
    """One recorded story as stored in the metadata document."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Zero-padded, never reused story id (e.g. '001').")
    recorded_by: str = Field(description="Category the story was recorded for.")
    author: str = Field(min_length=1, description="Display name supplied by the uploader.")
    timestamp: datetime = Field(description="Server-side creation time (UTC).")
    duration: float = Field(default=0.0, ge=0, description="Length of the recording in seconds.")
    liked: bool = Field(default=False, description="Admin favourite flag.")
    audio_path: str = Field(description="Audio file path relative to the data directory.")


class StoryDocument(BaseModel):
    """The whole metadata document: a schema version plus records in insertion order."""

    schema_version: int = Field(default=SCHEMA_VERSION)
    stories: list[StoryRecord] = Field(default_factory=list)
