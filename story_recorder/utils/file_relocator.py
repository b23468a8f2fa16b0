"""Move an uploaded temp file to its final location, tolerating flaky filesystems.

Strategy, in order:

1. ``os.replace`` -- atomic on the same filesystem.  Errors that usually mean
   "someone else has the file open" (virus scanners, indexers, a concurrent
   reader) are retried a bounded number of times with a short sleep.
2. Copy-then-delete -- used when the rename is structurally impossible
   (``EXDEV``: temp dir and audio dir live on different devices) or the
   transient retries ran out.  The copy is itself retried on transient
   errors.
3. :class:`RelocationError` -- everything else.  The upload fails loudly
   instead of silently losing the recording.

Blocking filesystem calls run in a worker thread via ``asyncio.to_thread``;
the backoff is a real ``asyncio.sleep`` so other requests keep flowing.
"""

from __future__ import annotations

import asyncio
import errno
import os
import shutil
from pathlib import Path

import structlog

from story_recorder.utils.errors import RelocationError, TransientIOError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_RETRIES = 3
_DEFAULT_BACKOFF_SECONDS = 0.1

# errno values worth another attempt after a short wait.
_TRANSIENT_ERRNOS = frozenset({errno.EBUSY, errno.EPERM, errno.EACCES, errno.ETXTBSY})


def _copy_then_delete(source: Path, target: Path) -> None:
    try:
        shutil.copy2(source, target)
    except OSError as exc:
        # Never leave a half-written final file behind.
        target.unlink(missing_ok=True)
        if exc.errno in _TRANSIENT_ERRNOS:
            raise TransientIOError(
                message=f"{exc.strerror or exc} (errno {exc.errno})",
                component="relocator",
            ) from exc
        raise

    try:
        source.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning(
            "relocate_temp_cleanup_failed",
            source=str(source),
            errno=exc.errno,
            error=str(exc),
        )


async def relocate(
    temp_path: str | Path,
    final_path: str | Path,
    *,
    retries: int = _DEFAULT_RETRIES,
    backoff_seconds: float = _DEFAULT_BACKOFF_SECONDS,
) -> Path:
    """Move *temp_path* to *final_path* and return the final path.

    Raises
    ------
    RelocationError
        When neither the rename nor the copy fallback succeeded.
    """
    source = Path(temp_path)
    target = Path(final_path)
    try:
        await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
    except OSError as exc:
        logger.error(
            "relocate_target_dir_failed",
            target_dir=str(target.parent),
            errno=exc.errno,
            error=str(exc),
        )
        raise RelocationError(
            message=f"Cannot create {target.parent}: {exc.strerror or exc} (errno {exc.errno})",
        ) from exc

    for attempt in range(retries + 1):
        try:
            await asyncio.to_thread(os.replace, source, target)
            return target
        except OSError as exc:
            if exc.errno == errno.EXDEV:
                logger.info("relocate_cross_device", source=str(source), target=str(target))
                break
            if exc.errno in _TRANSIENT_ERRNOS:
                if attempt < retries:
                    logger.warning(
                        "relocate_retry",
                        source=str(source),
                        attempt=attempt + 1,
                        errno=exc.errno,
                    )
                    await asyncio.sleep(backoff_seconds)
                    continue
                break
            logger.error(
                "relocate_failed",
                source=str(source),
                target=str(target),
                errno=exc.errno,
                error=str(exc),
            )
            raise RelocationError(
                message=f"Rename of {source.name} failed: {exc.strerror or exc} (errno {exc.errno})",
            ) from exc

    last_error: BaseException | None = None
    for attempt in range(retries + 1):
        try:
            await asyncio.to_thread(_copy_then_delete, source, target)
            logger.info("relocate_copied", source=str(source), target=str(target))
            return target
        except TransientIOError as exc:
            last_error = exc
            if attempt < retries:
                logger.warning("relocate_copy_retry", source=str(source), attempt=attempt + 1)
                await asyncio.sleep(backoff_seconds)
                continue
        except OSError as exc:
            last_error = exc
            break

    logger.error(
        "relocate_copy_failed",
        source=str(source),
        target=str(target),
        error=str(last_error),
    )
    raise RelocationError(
        message=f"Copy of {source.name} failed: {last_error}",
    ) from last_error
