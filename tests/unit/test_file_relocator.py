"""Unit tests for the file relocator.

Filesystem faults are simulated by patching ``os.replace`` and
``shutil.copy2``; the real calls are used for the successful attempts.
"""

from __future__ import annotations

import errno
import os
import shutil
from unittest.mock import patch

import pytest

from story_recorder.utils.errors import RelocationError
from story_recorder.utils.file_relocator import relocate

_real_replace = os.replace
_real_copy2 = shutil.copy2


def _os_error(code: int) -> OSError:
    return OSError(code, os.strerror(code))


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "temp" / "temp_abc.webm"
    path.parent.mkdir()
    path.write_bytes(b"audio-bytes")
    return path


@pytest.fixture
def target(tmp_path):
    return tmp_path / "audios" / "001_dani.webm"


@pytest.mark.asyncio
async def test_plain_rename(source, target):
    result = await relocate(source, target)

    assert result == target
    assert target.read_bytes() == b"audio-bytes"
    assert not source.exists()


@pytest.mark.asyncio
async def test_transient_error_is_retried(source, target):
    calls = []

    def flaky_replace(src, dst):
        calls.append(src)
        if len(calls) == 1:
            raise _os_error(errno.EBUSY)
        return _real_replace(src, dst)

    with patch("story_recorder.utils.file_relocator.os.replace", side_effect=flaky_replace):
        await relocate(source, target, backoff_seconds=0)

    assert len(calls) == 2
    assert target.read_bytes() == b"audio-bytes"
    assert not source.exists()


@pytest.mark.asyncio
async def test_cross_device_falls_back_to_copy(source, target):
    with patch(
        "story_recorder.utils.file_relocator.os.replace",
        side_effect=_os_error(errno.EXDEV),
    ) as replace:
        await relocate(source, target, backoff_seconds=0)

    # EXDEV is structural: no rename retries.
    assert replace.call_count == 1
    assert target.read_bytes() == b"audio-bytes"
    assert not source.exists()


@pytest.mark.asyncio
async def test_exhausted_retries_fall_back_to_copy(source, target):
    with patch(
        "story_recorder.utils.file_relocator.os.replace",
        side_effect=_os_error(errno.EACCES),
    ) as replace:
        await relocate(source, target, retries=2, backoff_seconds=0)

    assert replace.call_count == 3
    assert target.read_bytes() == b"audio-bytes"


@pytest.mark.asyncio
async def test_fatal_rename_error_raises(source, target):
    with patch(
        "story_recorder.utils.file_relocator.os.replace",
        side_effect=_os_error(errno.ENOSPC),
    ):
        with pytest.raises(RelocationError):
            await relocate(source, target, backoff_seconds=0)

    assert source.exists()
    assert not target.exists()


@pytest.mark.asyncio
async def test_copy_retries_transient_errors(source, target):
    copies = []

    def flaky_copy(src, dst):
        copies.append(src)
        if len(copies) == 1:
            raise _os_error(errno.EBUSY)
        return _real_copy2(src, dst)

    with patch(
        "story_recorder.utils.file_relocator.os.replace",
        side_effect=_os_error(errno.EXDEV),
    ), patch("story_recorder.utils.file_relocator.shutil.copy2", side_effect=flaky_copy):
        await relocate(source, target, backoff_seconds=0)

    assert len(copies) == 2
    assert target.read_bytes() == b"audio-bytes"


@pytest.mark.asyncio
async def test_failed_copy_raises_and_leaves_no_partial_target(source, target):
    def broken_copy(src, dst):
        dst.write_bytes(b"partial")
        raise _os_error(errno.ENOSPC)

    with patch(
        "story_recorder.utils.file_relocator.os.replace",
        side_effect=_os_error(errno.EXDEV),
    ), patch("story_recorder.utils.file_relocator.shutil.copy2", side_effect=broken_copy):
        with pytest.raises(RelocationError):
            await relocate(source, target, backoff_seconds=0)

    assert not target.exists()
    assert source.exists()


@pytest.mark.asyncio
async def test_missing_source_raises(tmp_path, target):
    with pytest.raises(RelocationError):
        await relocate(tmp_path / "nope.webm", target)


@pytest.mark.asyncio
async def test_uncreatable_target_dir_raises_relocation_error(source, tmp_path):
    blocker = tmp_path / "audios"
    blocker.write_bytes(b"a file where the audio dir should be")

    with pytest.raises(RelocationError):
        await relocate(source, blocker / "001_dani.webm", backoff_seconds=0)

    assert source.exists()
