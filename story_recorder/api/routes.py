"""Public REST routes - story upload, audio retrieval, health.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: API (FastAPI route handlers).
# Pattern: Routes access services via ``request.app.state.<name>``, set
#          up by ``create_app()`` in story_recorder/main.py.
#
# Endpoints:
#   POST /api/upload            - multipart upload (audio, category, author, duration)
#   GET  /api/health            - liveness probe
#   GET  /audios/{filename}     - stored audio files (no path traversal)
#
# Upload errors are raised as StoryRecorderError subclasses and turned
# into JSON by ErrorHandlingMiddleware.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO
from uuid import uuid4

import structlog
from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse

from story_recorder.api.schemas import HealthResponse, UploadResponse
from story_recorder.services.upload_service import UploadService
from story_recorder.utils.errors import StorageError, UploadValidationError, ValidationKind

logger = structlog.get_logger(logger_name=__name__)

router = APIRouter(tags=["stories"])

_CHUNK_SIZE = 1024 * 1024


# ── Service accessor ──────────────────────────────────────────────────
def _get_upload_service(request: Request) -> UploadService:
    """Retrieve UploadService from app state; raise 503 if unavailable."""
    svc = getattr(request.app.state, "upload_service", None)
    if svc is None:
        raise HTTPException(status_code=503, detail="Upload service unavailable")
    return svc


# ── Upload spooling ───────────────────────────────────────────────────
def _copy_limited(source: BinaryIO, target: Path, max_bytes: int) -> int:
    """Copy ``source`` into ``target``; raise once ``max_bytes`` is exceeded."""
    written = 0
    with open(target, "wb") as out:
        while chunk := source.read(_CHUNK_SIZE):
            written += len(chunk)
            if written > max_bytes:
                raise UploadValidationError(ValidationKind.FILE_TOO_LARGE)
            out.write(chunk)
    return written


def _discard_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("temp_cleanup_failed", path=str(path), error=str(exc))


async def _spool_upload(audio: UploadFile | None, temp_dir: Path, max_bytes: int) -> Path | None:
    """Write the uploaded blob to the temp directory.

    Returns None when no (or an empty) file was sent; the pipeline turns
    that into a ``missing_file`` rejection after checking author/category.
    """
    if audio is None or not audio.filename:
        return None

    suffix = Path(audio.filename).suffix.lower()[:8]
    temp_path = temp_dir / f"temp_{uuid4().hex}{suffix}"
    try:
        await asyncio.to_thread(temp_dir.mkdir, parents=True, exist_ok=True)
        size = await asyncio.to_thread(_copy_limited, audio.file, temp_path, max_bytes)
    except UploadValidationError as exc:
        await asyncio.to_thread(temp_path.unlink, missing_ok=True)
        logger.info("upload_rejected", reason=exc.error_code, max_bytes=max_bytes)
        raise
    except OSError as exc:
        await asyncio.to_thread(_discard_quietly, temp_path)
        raise StorageError(
            message=f"Could not spool upload to {temp_path}: {exc.strerror or exc} (errno {exc.errno})",
            component="upload",
        ) from exc

    if size == 0:
        await asyncio.to_thread(temp_path.unlink, missing_ok=True)
        return None
    return temp_path


def _parse_duration(raw: str | None) -> float:
    """Client duration estimate; anything unusable counts as 0 seconds."""
    try:
        value = float(raw) if raw not in (None, "") else 0.0
    except ValueError:
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return max(0.0, value)


# ── Upload ────────────────────────────────────────────────────────────
@router.post("/api/upload", response_model=UploadResponse)
async def upload_story(
    request: Request,
    audio: UploadFile | None = File(default=None, description="Recorded audio (webm/ogg/mp4)"),
    category: str | None = Form(default=None),
    author: str | None = Form(default=None),
    duration: str | None = Form(default=None),
) -> UploadResponse:
    """Store an uploaded recording and its metadata."""
    svc = _get_upload_service(request)
    settings = request.app.state.settings

    temp_path = await _spool_upload(audio, settings.temp_dir, settings.max_upload_bytes)
    try:
        record = await svc.handle_upload(
            author=author,
            category=category,
            temp_path=temp_path,
            client_duration=_parse_duration(duration),
            original_filename=audio.filename if audio else None,
        )
    finally:
        # On success the file was moved away and this is a no-op.
        if temp_path is not None:
            await asyncio.to_thread(_discard_quietly, temp_path)

    return UploadResponse(
        story_id=record.id,
        category=record.recorded_by,
        duration=record.duration,
    )


# ── Health ────────────────────────────────────────────────────────────
@router.get("/api/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    transcoder = getattr(request.app.state, "transcoder", None)
    return HealthResponse(
        timestamp=datetime.now(timezone.utc),
        transcoder=transcoder.get_provider_name() if transcoder else "none",
        transcoder_available=transcoder.is_available() if transcoder else False,
    )


# ── Audio retrieval ───────────────────────────────────────────────────
def _resolve_audio(audio_dir: Path, filename: str) -> Path | None:
    """Stored file for ``filename``, or None if missing or outside ``audio_dir``."""
    root = audio_dir.resolve()
    candidate = (root / filename).resolve()
    if not candidate.is_relative_to(root) or not candidate.is_file():
        return None
    return candidate


@router.get("/audios/{filename:path}", include_in_schema=False)
async def get_audio(request: Request, filename: str) -> FileResponse:
    """Serve a stored recording; paths escaping the audio directory are 404."""
    candidate = await asyncio.to_thread(
        _resolve_audio, request.app.state.settings.audio_dir, filename
    )
    if candidate is None:
        raise HTTPException(status_code=404, detail="Audio not found")
    return FileResponse(str(candidate))
