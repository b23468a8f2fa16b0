"""JSON-file-backed story id counter.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing ICounterStore).
#
# File: ``<data_dir>/counter.json`` containing ``{"nextId": <int>}``.  The key
# name matches the layout the recorder has always used, so existing data
# directories keep counting from where they left off.
#
# Every read-increment-write runs under one ``asyncio.Lock``; with a single
# uvicorn worker that makes allocation indivisible.  Running several worker
# processes against one data directory is NOT supported.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from story_recorder.interfaces.counter_store import ICounterStore
from story_recorder.utils.errors import StorageError
from story_recorder.utils.json_files import read_json, write_json_atomic

logger = structlog.get_logger(logger_name=__name__)

_COMPONENT = "counter"
_KEY = "nextId"


class JsonCounterStore(ICounterStore):
    """Persists the next story id in a tiny JSON document."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def initialize(self) -> None:
        """Create ``counter.json`` with ``nextId = 1`` if it doesn't exist."""
        async with self._lock:
            if await asyncio.to_thread(self._path.exists):
                # Fail at startup rather than on the first upload.
                await asyncio.to_thread(self._read)
                return
            await asyncio.to_thread(self._path.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(self._write, 1)
        logger.info("counter_initialized", path=str(self._path))

    async def allocate(self) -> int:
        async with self._lock:
            current = await asyncio.to_thread(self._read)
            await asyncio.to_thread(self._write, current + 1)
        logger.debug("story_id_allocated", value=current)
        return current

    async def peek(self) -> int:
        async with self._lock:
            return await asyncio.to_thread(self._read)

    async def ensure_at_least(self, value: int) -> int:
        async with self._lock:
            current = await asyncio.to_thread(self._read)
            if value > current:
                await asyncio.to_thread(self._write, value)
                logger.info("counter_raised", previous=current, value=value)
                return value
            return current

    # ── Blocking helpers (run via asyncio.to_thread) ──────────────────

    def _read(self) -> int:
        data = read_json(self._path, _COMPONENT)
        value = data.get(_KEY) if isinstance(data, dict) else None
        # bool is an int subclass; reject it explicitly.
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise StorageError(
                message=f"{self._path.name} has no valid '{_KEY}' (got {value!r})",
                component=_COMPONENT,
            )
        return value

    def _write(self, value: int) -> None:
        write_json_atomic(self._path, {_KEY: value}, _COMPONENT)
