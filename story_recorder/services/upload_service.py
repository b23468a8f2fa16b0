"""Upload pipeline - validate, allocate an id, store the audio, record metadata.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services (business logic orchestration).
# Depends on: ICounterStore, IMetadataStore, ITranscoder, file_relocator.
#
# One upload runs these steps in order; each may end the request:
#
#   1. VALIDATION - author non-empty, category in the closed set, file
#      present.  Rejections delete the temp file and touch no store.
#   2. ID ALLOCATION - next counter value, zero-padded ("001").
#   3. PATH - audios/{id}_{category}{ext}, derived only from id + category.
#   4. RELOCATION - temp file -> final path.  Fatal on failure; the id is
#      burned, never reused.
#   5. TRANSCODE FIX-UP - remux for a correct duration.  Never fatal; on
#      failure the client's estimate is kept.
#   6. METADATA APPEND - the record becomes visible only now, after its
#      audio file is in place.
#
# There is deliberately no rollback across steps 2-6: a crash between 4
# and 6 leaves an audio file without a record and a gap in the ids.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Sequence

import structlog

from story_recorder.interfaces.counter_store import ICounterStore
from story_recorder.interfaces.metadata_store import IMetadataStore
from story_recorder.interfaces.transcoder import ITranscoder
from story_recorder.models.story import StoryRecord, build_audio_path, format_story_id
from story_recorder.utils.errors import (
    StoryRecorderError,
    UploadValidationError,
    ValidationKind,
)
from story_recorder.utils.file_relocator import relocate

logger = structlog.get_logger(logger_name=__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UploadService:
    """Turns one received audio upload into a persisted ``StoryRecord``.

    All collaborators are constructor-injected; the service owns no state
    besides its configuration.
    """

    def __init__(
        self,
        counter_store: ICounterStore,
        metadata_store: IMetadataStore,
        transcoder: ITranscoder,
        data_dir: str | Path,
        categories: Sequence[str],
        *,
        id_width: int = 3,
        allowed_extensions: Sequence[str] = (".webm", ".ogg", ".mp4", ".m4a", ".wav", ".mp3"),
        default_extension: str = ".webm",
        relocate_retries: int = 3,
        relocate_backoff_seconds: float = 0.1,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._counter = counter_store
        self._metadata = metadata_store
        self._transcoder = transcoder
        self._data_dir = Path(data_dir)
        self._categories = tuple(categories)
        self._id_width = id_width
        self._allowed_extensions = frozenset(e.lower() for e in allowed_extensions)
        self._default_extension = default_extension
        self._relocate_retries = relocate_retries
        self._relocate_backoff = relocate_backoff_seconds
        self._clock = clock

    @property
    def categories(self) -> tuple[str, ...]:
        return self._categories

    # ── Public API ─────────────────────────────────────────────────────

    async def handle_upload(
        self,
        author: str | None,
        category: str | None,
        temp_path: str | Path | None,
        client_duration: float | None = None,
        original_filename: str | None = None,
    ) -> StoryRecord:
        """Run the full upload pipeline for one received file.

        Raises
        ------
        UploadValidationError
            Author missing, category unknown, or no file.  No id consumed.
        StorageError, RelocationError
            Fatal failures.  The temp file is removed before re-raising.
        """
        temp = Path(temp_path) if temp_path else None
        author_name = (author or "").strip()

        # 1. Validation - order matches the messages the client expects.
        try:
            if not author_name:
                raise UploadValidationError(ValidationKind.MISSING_AUTHOR)
            if not category or category not in self._categories:
                raise UploadValidationError(ValidationKind.INVALID_CATEGORY)
            if temp is None or not await asyncio.to_thread(temp.is_file):
                raise UploadValidationError(ValidationKind.MISSING_FILE)
        except UploadValidationError as exc:
            await self._discard(temp)
            logger.info("upload_rejected", reason=exc.kind.value)
            raise

        try:
            # 2. Id allocation.
            story_id = format_story_id(await self._counter.allocate(), self._id_width)

            # 3. Deterministic final path.
            audio_path = build_audio_path(story_id, category, self._pick_extension(original_filename))
            final_path = self._data_dir / audio_path

            # 4. Relocation (fatal on failure; id stays burned).
            await relocate(
                temp,
                final_path,
                retries=self._relocate_retries,
                backoff_seconds=self._relocate_backoff,
            )
        except StoryRecorderError as exc:
            await self._discard(temp)
            logger.error("upload_failed", step="store_audio", error=str(exc))
            raise

        # 5. Duration fix-up (never fatal).
        estimate = max(0.0, float(client_duration or 0.0))
        measured = await self._transcoder.fix(final_path)
        duration = measured if measured is not None else estimate

        # 6. Record becomes visible only once the audio is in place.
        record = StoryRecord(
            id=story_id,
            recorded_by=category,
            author=author_name,
            timestamp=self._clock(),
            duration=duration,
            liked=False,
            audio_path=audio_path,
        )
        try:
            await self._metadata.append_one(record)
        except StoryRecorderError as exc:
            # The audio file is left in place without a record; see module docs.
            logger.error(
                "upload_failed",
                step="append_metadata",
                story_id=story_id,
                orphaned_audio=str(final_path),
                error=str(exc),
            )
            raise

        logger.info(
            "story_uploaded",
            story_id=story_id,
            category=category,
            duration=duration,
            duration_source="transcoder" if measured is not None else "client",
        )
        return record

    # ── Private helpers ────────────────────────────────────────────────

    def _pick_extension(self, original_filename: str | None) -> str:
        suffix = Path(original_filename or "").suffix.lower()
        if suffix in self._allowed_extensions:
            return suffix
        return self._default_extension

    @staticmethod
    async def _discard(temp: Path | None) -> None:
        if temp is None:
            return
        try:
            await asyncio.to_thread(temp.unlink, missing_ok=True)
        except OSError as exc:
            logger.warning("temp_cleanup_failed", path=str(temp), error=str(exc))
