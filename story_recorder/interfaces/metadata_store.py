"""Abstract base class for story metadata persistence.

# ─── ADAPTER PATTERN ─────────────────────────────────────────────────
#
# IMetadataStore hides how story records are persisted.  The concrete
# implementation is JsonMetadataStore
# (story_recorder/providers/metadata/json_metadata_store.py), which keeps
# every record in one JSON document and rewrites it on each mutation.
#
# "Not found" is a normal result (``None``), not an exception: only I/O
# failures and corrupt documents raise ``StorageError``.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from story_recorder.models.story import StoryRecord

# A mutator receives the current record and returns the replacement.
StoryMutator = Callable[[StoryRecord], StoryRecord]


class IMetadataStore(ABC):
    """Contract for story record persistence."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create an empty document if none exists.  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""

    @abstractmethod
    async def load_all(self) -> list[StoryRecord]:
        """Return every record in insertion order.

        Callers that present records must sort them themselves.
        """

    @abstractmethod
    async def get_by_id(self, story_id: str) -> StoryRecord | None:
        """Return a single record, or None if the id is unknown."""

    @abstractmethod
    async def append_one(self, record: StoryRecord) -> None:
        """Append a new record.

        Raises ``StorageError`` if a record with the same id already exists.
        """

    @abstractmethod
    async def update_by_id(
        self,
        story_id: str,
        mutator: StoryMutator,
    ) -> StoryRecord | None:
        """Replace a record with ``mutator(record)``.

        Returns
        -------
        StoryRecord | None
            The updated record, or None if the id is unknown.
        """

    @abstractmethod
    async def delete_by_id(self, story_id: str) -> StoryRecord | None:
        """Remove a record.

        Returns
        -------
        StoryRecord | None
            The removed record, or None if the id is unknown.
        """
