"""ffmpeg/ffprobe-backed duration fix-up for uploaded recordings.

# ─── DESIGN ────────────────────────────────────────────────────────────
#
# MediaRecorder output (WebM/Ogg) is written as a stream, so the container
# header usually says "duration unknown".  Stream-copying it through ffmpeg
# writes a fresh header with the real duration:
#
#   ffmpeg -y -i <in> -map 0 -c copy <tmp>     (remux only, no re-encode)
#   ffprobe -show_entries format=duration <tmp>
#
# The remuxed file is written next to the original and swapped in with
# ``os.replace`` only after ffprobe returned a usable duration, so the
# original is never touched on failure.
#
# Tool detection happens at call time (``shutil.which``), so the recorder
# keeps accepting uploads on hosts without ffmpeg; it just keeps the
# client's duration estimate.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path

import structlog

from story_recorder.interfaces.transcoder import ITranscoder
from story_recorder.utils.errors import TranscodeError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT_SECONDS = 30.0


class FFmpegTranscoder(ITranscoder):
    """Remuxes audio with ffmpeg and measures it with ffprobe.

    Parameters
    ----------
    ffmpeg_path:
        Name or path of the ffmpeg binary.
    ffprobe_path:
        Name or path of the ffprobe binary.
    timeout_seconds:
        Upper bound for each subprocess; a hung tool is killed.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._ffmpeg = ffmpeg_path
        self._ffprobe = ffprobe_path
        self._timeout = timeout_seconds

    def get_provider_name(self) -> str:
        return "ffmpeg"

    def is_available(self) -> bool:
        return bool(shutil.which(self._ffmpeg) and shutil.which(self._ffprobe))

    async def fix(self, audio_path: str | Path) -> float | None:
        source = Path(audio_path)
        remuxed = source.with_name(f"{source.stem}.remux{source.suffix}")
        try:
            if not self.is_available():
                raise TranscodeError("ffmpeg/ffprobe not found on PATH", component="ffmpeg")
            await self._remux(source, remuxed)
            duration = await self._probe_duration(remuxed)
            await asyncio.to_thread(os.replace, remuxed, source)
        except TranscodeError as exc:
            logger.warning("transcode_failed", path=str(source), error=str(exc))
            await asyncio.to_thread(remuxed.unlink, missing_ok=True)
            return None
        except OSError as exc:
            logger.warning(
                "transcode_replace_failed",
                path=str(source),
                errno=exc.errno,
                error=str(exc),
            )
            await asyncio.to_thread(remuxed.unlink, missing_ok=True)
            return None

        logger.info("transcode_fixed", path=str(source), duration=duration)
        return duration

    # ── Subprocess helpers ────────────────────────────────────────────

    async def _remux(self, source: Path, target: Path) -> None:
        await self._run(
            [self._ffmpeg, "-y", "-v", "error", "-i", str(source), "-map", "0", "-c", "copy", str(target)],
            tool="ffmpeg",
        )
        if not target.exists() or target.stat().st_size == 0:
            raise TranscodeError("ffmpeg produced no output", component="ffmpeg")

    async def _probe_duration(self, path: Path) -> float:
        stdout = await self._run(
            [
                self._ffprobe,
                "-v", "error",
                "-show_entries", "format=duration",
                "-of", "default=noprint_wrappers=1:nokey=1",
                str(path),
            ],
            tool="ffprobe",
        )
        text = stdout.decode("utf-8", errors="replace").strip()
        try:
            duration = float(text)
        except ValueError as exc:
            raise TranscodeError(f"unparseable duration {text[:50]!r}", component="ffprobe") from exc
        # ffprobe prints "N/A" for unknown, but guard against nan/inf/0 too.
        if not (duration > 0 and duration != float("inf")):
            raise TranscodeError(f"unusable duration {duration!r}", component="ffprobe")
        return round(duration, 3)

    async def _run(self, cmd: list[str], tool: str) -> bytes:
        """Run ``cmd`` with a timeout; return stdout or raise TranscodeError."""
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise TranscodeError(f"could not start {tool}: {exc}", component=tool) from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise TranscodeError(f"{tool} timed out after {self._timeout}s", component=tool) from exc

        if proc.returncode != 0:
            raise TranscodeError(
                f"{tool} exited with {proc.returncode}: {stderr.decode(errors='replace')[:300]}",
                component=tool,
            )
        return stdout


class NullTranscoder(ITranscoder):
    """Transcoder used when fix-up is disabled; always keeps the estimate."""

    def get_provider_name(self) -> str:
        return "none"

    def is_available(self) -> bool:
        return False

    async def fix(self, audio_path: str | Path) -> float | None:
        return None
