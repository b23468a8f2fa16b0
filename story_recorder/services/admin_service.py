"""Admin operations - list, filter, like and delete stories.

Thin orchestration over the metadata store and the filter engine.  Like and
delete address stories by id and return ``None`` for unknown ids; the API
layer maps that to 404.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Sequence

import structlog

from story_recorder.interfaces.metadata_store import IMetadataStore
from story_recorder.models.filters import FilteredView, FilterSpec
from story_recorder.models.story import StoryRecord
from story_recorder.services.story_filter import build_view, sort_newest_first
from story_recorder.utils.errors import StorageError

logger = structlog.get_logger(logger_name=__name__)


class AdminService:
    """Admin-facing story management."""

    def __init__(
        self,
        metadata_store: IMetadataStore,
        data_dir: str | Path,
        categories: Sequence[str],
    ) -> None:
        self._metadata = metadata_store
        self._data_dir = Path(data_dir)
        self._categories = tuple(categories)

    @property
    def categories(self) -> tuple[str, ...]:
        return self._categories

    async def list_stories(self) -> list[StoryRecord]:
        """Every story, newest first."""
        return sort_newest_first(await self._metadata.load_all())

    async def query(self, spec: FilterSpec) -> FilteredView:
        """Filtered stories plus facet counts for the admin filter dialog."""
        records = await self._metadata.load_all()
        return build_view(records, spec, self._categories)

    async def toggle_like(self, story_id: str) -> StoryRecord | None:
        updated = await self._metadata.update_by_id(
            story_id,
            lambda record: record.model_copy(update={"liked": not record.liked}),
        )
        if updated is not None:
            logger.info("story_like_toggled", story_id=story_id, liked=updated.liked)
        return updated

    async def delete_story(self, story_id: str) -> StoryRecord | None:
        """Remove the record, then its audio file.

        The record goes first so a story never points at a deleted file.
        An audio file that's already gone is only logged.
        """
        removed = await self._metadata.delete_by_id(story_id)
        if removed is None:
            return None

        audio_file = self._data_dir / removed.audio_path
        try:
            await asyncio.to_thread(audio_file.unlink)
        except FileNotFoundError:
            logger.warning("story_audio_already_missing", story_id=story_id, path=str(audio_file))
        except OSError as exc:
            logger.error(
                "story_audio_delete_failed",
                story_id=story_id,
                path=str(audio_file),
                errno=exc.errno,
                error=str(exc),
            )
            raise StorageError(
                message=f"Story {story_id} was removed but its audio file could not be deleted",
                component="admin",
            ) from exc

        logger.info("story_deleted", story_id=story_id)
        return removed
