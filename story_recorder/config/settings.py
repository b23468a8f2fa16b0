"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# pydantic-settings reads configuration from two sources (in priority order):
#
#   1. **Environment variables** - e.g. ADMIN_PASSWORD=s3cret
#   2. **.env file** - key=value lines in the project root .env file
#
# Field ``admin_password`` maps to env var ``ADMIN_PASSWORD`` automatically.
# Defaults apply when neither source sets a value.
#
# Static catalog data (categories, allowed extensions, id width) lives in
# config/config.yaml and is read by ``load_config()``; the two never overlap.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Story Recorder application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Storage ===
    # Holds counter.json, stories.json, audios/ and the temp/ upload spool.
    data_dir: str = "stories"

    # === Admin ===
    # Empty = admin API disabled (every request is rejected with 401).
    admin_password: str = ""

    # === Transcoding ===
    transcode_enabled: bool = True
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    transcode_timeout_seconds: float = 30.0

    # === Upload handling ===
    max_upload_mb: int = 50
    relocate_retries: int = 3
    relocate_backoff_seconds: float = 0.1

    # === App Config ===
    cors_origins: list[str] = ["*"]
    app_host: str = "0.0.0.0"
    app_port: int = 3000
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)

    @property
    def counter_file(self) -> Path:
        return self.data_path / "counter.json"

    @property
    def metadata_file(self) -> Path:
        return self.data_path / "stories.json"

    @property
    def audio_dir(self) -> Path:
        return self.data_path / "audios"

    @property
    def temp_dir(self) -> Path:
        return self.data_path / "temp"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024
