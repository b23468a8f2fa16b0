"""Unit tests for JsonCounterStore.

Covers initialization, sequential allocation under concurrency, and the
handling of unreadable counter files.
"""

from __future__ import annotations

import asyncio
import json

import pytest

from story_recorder.providers.counter.json_counter_store import JsonCounterStore
from story_recorder.utils.errors import StorageError


# ─── Initialization ───────────────────────────────────────────────

@pytest.mark.asyncio
async def test_initialize_creates_counter_file(tmp_path):
    path = tmp_path / "counter.json"
    store = JsonCounterStore(path)
    await store.initialize()

    assert json.loads(path.read_text()) == {"nextId": 1}
    assert await store.peek() == 1


@pytest.mark.asyncio
async def test_initialize_keeps_existing_value(tmp_path):
    path = tmp_path / "counter.json"
    path.write_text('{"nextId": 42}')
    store = JsonCounterStore(path)
    await store.initialize()

    assert await store.peek() == 42


@pytest.mark.asyncio
async def test_initialize_rejects_corrupt_file(tmp_path):
    path = tmp_path / "counter.json"
    path.write_text("{not json")
    store = JsonCounterStore(path)

    with pytest.raises(StorageError):
        await store.initialize()


# ─── Allocation ───────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_allocate_returns_current_and_advances(counter_store):
    assert await counter_store.allocate() == 1
    assert await counter_store.allocate() == 2
    assert await counter_store.peek() == 3


@pytest.mark.asyncio
async def test_concurrent_allocations_are_distinct_and_gapless(counter_store):
    values = await asyncio.gather(*(counter_store.allocate() for _ in range(25)))

    assert sorted(values) == list(range(1, 26))
    assert await counter_store.peek() == 26


@pytest.mark.asyncio
async def test_value_survives_new_instance(counter_store):
    await counter_store.allocate()
    await counter_store.allocate()

    reopened = JsonCounterStore(counter_store.path)
    assert await reopened.allocate() == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ['{"nextId": 0}', '{"nextId": "7"}', '{"nextId": true}', "[]"])
async def test_allocate_rejects_invalid_values(tmp_path, content):
    path = tmp_path / "counter.json"
    path.write_text(content)
    store = JsonCounterStore(path)

    with pytest.raises(StorageError):
        await store.allocate()
    # The bad file is left untouched for inspection.
    assert path.read_text() == content


# ─── ensure_at_least ──────────────────────────────────────────────

@pytest.mark.asyncio
async def test_ensure_at_least_raises_counter(counter_store):
    assert await counter_store.ensure_at_least(10) == 10
    assert await counter_store.allocate() == 10


@pytest.mark.asyncio
async def test_ensure_at_least_never_lowers(counter_store):
    await counter_store.ensure_at_least(10)
    assert await counter_store.ensure_at_least(5) == 10
    assert await counter_store.peek() == 10
