"""JSON-document-backed story metadata store.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing IMetadataStore).
#
# File: ``<data_dir>/stories.json``::
#
#     {"schema_version": 1, "stories": [ {...StoryRecord...}, ... ]}
#
# Every mutation re-reads the whole document, applies the change in memory
# and writes it back atomically, all under one ``asyncio.Lock`` so two
# concurrent read-modify-write cycles can't lose each other's update.
# Reads also take the lock so they never observe a half-applied mutation
# from this process.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog
from pydantic import ValidationError

from story_recorder.interfaces.metadata_store import IMetadataStore, StoryMutator
from story_recorder.models.story import SCHEMA_VERSION, StoryDocument, StoryRecord
from story_recorder.utils.errors import StorageError
from story_recorder.utils.json_files import read_json, write_json_atomic

logger = structlog.get_logger(logger_name=__name__)

_COMPONENT = "metadata"


class JsonMetadataStore(IMetadataStore):
    """Stores all story records in a single JSON document."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def initialize(self) -> None:
        """Create an empty document if none exists; validate an existing one."""
        async with self._lock:
            if await asyncio.to_thread(self._path.exists):
                document = await asyncio.to_thread(self._read)
                logger.info(
                    "metadata_store_loaded",
                    path=str(self._path),
                    stories=len(document.stories),
                )
                return
            await asyncio.to_thread(self._path.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(self._write, StoryDocument())
        logger.info("metadata_store_initialized", path=str(self._path))

    def get_provider_name(self) -> str:
        return "json_metadata"

    # ── Reads ─────────────────────────────────────────────────────────

    async def load_all(self) -> list[StoryRecord]:
        async with self._lock:
            document = await asyncio.to_thread(self._read)
        return list(document.stories)

    async def get_by_id(self, story_id: str) -> StoryRecord | None:
        for record in await self.load_all():
            if record.id == story_id:
                return record
        return None

    # ── Mutations ─────────────────────────────────────────────────────

    async def append_one(self, record: StoryRecord) -> None:
        async with self._lock:
            document = await asyncio.to_thread(self._read)
            if any(existing.id == record.id for existing in document.stories):
                raise StorageError(
                    message=f"Story {record.id} already exists",
                    component=_COMPONENT,
                )
            updated = StoryDocument(stories=[*document.stories, record])
            await asyncio.to_thread(self._write, updated)
        logger.info("story_record_appended", story_id=record.id)

    async def update_by_id(
        self,
        story_id: str,
        mutator: StoryMutator,
    ) -> StoryRecord | None:
        async with self._lock:
            document = await asyncio.to_thread(self._read)
            stories = list(document.stories)
            for index, existing in enumerate(stories):
                if existing.id == story_id:
                    replacement = mutator(existing)
                    if replacement.id != story_id:
                        raise StorageError(
                            message=f"Update of story {story_id} tried to change its id",
                            component=_COMPONENT,
                        )
                    stories[index] = replacement
                    await asyncio.to_thread(self._write, StoryDocument(stories=stories))
                    return replacement
        return None

    async def delete_by_id(self, story_id: str) -> StoryRecord | None:
        async with self._lock:
            document = await asyncio.to_thread(self._read)
            remaining: list[StoryRecord] = []
            removed: StoryRecord | None = None
            for existing in document.stories:
                if removed is None and existing.id == story_id:
                    removed = existing
                else:
                    remaining.append(existing)
            if removed is None:
                return None
            await asyncio.to_thread(self._write, StoryDocument(stories=remaining))
        logger.info("story_record_deleted", story_id=story_id)
        return removed

    # ── Blocking helpers (run via asyncio.to_thread) ──────────────────

    def _read(self) -> StoryDocument:
        if not self._path.exists():
            return StoryDocument()
        raw = read_json(self._path, _COMPONENT)
        if not isinstance(raw, dict) or raw.get("schema_version") != SCHEMA_VERSION:
            version = raw.get("schema_version") if isinstance(raw, dict) else None
            raise StorageError(
                message=f"{self._path.name} has unsupported schema version {version!r}",
                component=_COMPONENT,
            )
        try:
            return StoryDocument.model_validate(raw)
        except ValidationError as exc:
            raise StorageError(
                message=f"{self._path.name} contains invalid story records "
                f"({exc.error_count()} errors)",
                component=_COMPONENT,
            ) from exc

    def _write(self, document: StoryDocument) -> None:
        write_json_atomic(self._path, document.model_dump(mode="json"), _COMPONENT)
