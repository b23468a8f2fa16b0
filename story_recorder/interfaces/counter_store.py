"""Abstract base class for the story id counter.

The counter hands out monotonically increasing integers.  A value is never
handed out twice, even after the story that used it is deleted, so ids stay
unique for the lifetime of the data directory.

Concrete implementation: JsonCounterStore (story_recorder/providers/counter/).
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ICounterStore(ABC):
    """Contract for persistent id allocation."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create the backing store if it doesn't exist.  Called at startup."""

    @abstractmethod
    async def allocate(self) -> int:
        """Return the next id and persist its successor before returning.

        Concurrent callers must never receive the same value.  An unreadable
        or corrupt store raises ``StorageError`` instead of guessing.
        """

    @abstractmethod
    async def peek(self) -> int:
        """Return the value the next ``allocate()`` would hand out."""

    @abstractmethod
    async def ensure_at_least(self, value: int) -> int:
        """Raise the next id to ``value`` if it is lower; never lower it.

        Returns the resulting next id.
        """
