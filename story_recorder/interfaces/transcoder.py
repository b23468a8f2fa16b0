"""Abstract base class for the audio remux / duration-fix adapter.

Browsers record audio incrementally, so the container header of an uploaded
WebM/Ogg file often carries no (or a wrong) duration.  A transcoder rewrites
the container without re-encoding and reports the real duration.

Concrete implementations (story_recorder/providers/transcode/):
    FFmpegTranscoder -- ffmpeg stream copy + ffprobe duration probe
    NullTranscoder   -- always reports failure (transcoding disabled)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class ITranscoder(ABC):
    """Contract for fixing container-level duration metadata in place."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this transcoder."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return True if the underlying tool can be used right now."""

    @abstractmethod
    async def fix(self, audio_path: str | Path) -> float | None:
        """Remux ``audio_path`` in place and return its measured duration.

        Must never raise and never corrupt the input: on any failure the
        original file is left untouched and ``None`` is returned, so the
        caller can fall back to the client's estimate.
        """
