"""FastAPI application entry point for the Story Recorder.

Wires the JSON stores, the transcoder and the two services together,
registers middleware and routes, and serves the recorder/admin frontend
as static files when a ``frontend/`` directory is present.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from story_recorder.api.admin_routes import router as admin_router
from story_recorder.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from story_recorder.api.routes import router as api_router
from story_recorder.config import Settings, load_config
from story_recorder.interfaces.transcoder import ITranscoder
from story_recorder.providers.counter.json_counter_store import JsonCounterStore
from story_recorder.providers.metadata.json_metadata_store import JsonMetadataStore
from story_recorder.providers.transcode.ffmpeg_transcoder import (
    FFmpegTranscoder,
    NullTranscoder,
)
from story_recorder.services.admin_service import AdminService
from story_recorder.services.upload_service import UploadService
from story_recorder.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_FRONTEND_DIR = Path(__file__).resolve().parent.parent / "frontend"

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# DI assembly
# ---------------------------------------------------------------------------


def _build_transcoder(app_settings: Settings) -> ITranscoder:
    if not app_settings.transcode_enabled:
        return NullTranscoder()
    transcoder = FFmpegTranscoder(
        ffmpeg_path=app_settings.ffmpeg_path,
        ffprobe_path=app_settings.ffprobe_path,
        timeout_seconds=app_settings.transcode_timeout_seconds,
    )
    if not transcoder.is_available():
        _logger.warning(
            "transcoder_unavailable",
            ffmpeg=app_settings.ffmpeg_path,
            ffprobe=app_settings.ffprobe_path,
            message="Client duration estimates will be stored as-is",
        )
    return transcoder


def build_components(app_settings: Settings, app_config: dict) -> dict[str, Any]:
    """Construct every store and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    stories_cfg = app_config["stories"]
    upload_cfg = app_config["upload"]
    categories = stories_cfg["categories"]

    counter_store = JsonCounterStore(app_settings.counter_file)
    metadata_store = JsonMetadataStore(app_settings.metadata_file)
    transcoder = _build_transcoder(app_settings)

    upload_service = UploadService(
        counter_store=counter_store,
        metadata_store=metadata_store,
        transcoder=transcoder,
        data_dir=app_settings.data_path,
        categories=categories,
        id_width=stories_cfg["id_width"],
        allowed_extensions=upload_cfg["allowed_extensions"],
        default_extension=upload_cfg["default_extension"],
        relocate_retries=app_settings.relocate_retries,
        relocate_backoff_seconds=app_settings.relocate_backoff_seconds,
    )
    admin_service = AdminService(
        metadata_store=metadata_store,
        data_dir=app_settings.data_path,
        categories=categories,
    )

    return {
        "counter_store": counter_store,
        "metadata_store": metadata_store,
        "transcoder": transcoder,
        "upload_service": upload_service,
        "admin_service": admin_service,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Create the data layout and validate both stores on startup."""
    app_settings: Settings = application.state.settings
    app_settings.audio_dir.mkdir(parents=True, exist_ok=True)
    app_settings.temp_dir.mkdir(parents=True, exist_ok=True)

    await application.state.counter_store.initialize()
    await application.state.metadata_store.initialize()

    _logger.info(
        "app_startup",
        environment=app_settings.app_env,
        data_dir=str(app_settings.data_path),
        transcoder=application.state.transcoder.get_provider_name(),
        admin_enabled=bool(app_settings.admin_password),
    )

    yield

    _logger.info("app_shutdown")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    app_settings: Settings | None = None,
    app_config: dict | None = None,
    components: dict[str, Any] | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    app_settings:
        Settings to use; read from the environment when omitted.
    app_config:
        Resolved YAML config; loaded via ``load_config`` when omitted.
    components:
        Pre-built stores and services (tests inject fakes here).
    """
    app_settings = app_settings or Settings()
    app_config = app_config or load_config()
    components = components or build_components(app_settings, app_config)

    application = FastAPI(
        title="Story Recorder API",
        version=str(app_config.get("app", {}).get("version", "0.1.0")),
        description=(
            "Record short audio stories in the browser, store them with a "
            "sequential id, and browse, like or delete them from the admin view."
        ),
        lifespan=_lifespan,
    )

    application.state.settings = app_settings
    application.state.config = app_config
    for key, value in components.items():
        setattr(application.state, key, value)

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_settings.cors_origins)

    # -- API routes --
    application.include_router(api_router)
    application.include_router(admin_router)

    # -- Frontend static files (recorder at /, admin at /admin/) --
    if _FRONTEND_DIR.is_dir():
        application.mount(
            "/",
            StaticFiles(directory=str(_FRONTEND_DIR), html=True),
            name="frontend",
        )

    return application


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def run() -> None:
    """Start the server with uvicorn (``story-recorder`` console script)."""
    settings = Settings()
    configure_logging(
        log_level=settings.log_level,
        json_output=(settings.app_env == "production"),
    )
    uvicorn.run(
        "story_recorder.main:create_app",
        factory=True,
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
        log_config=None,
        access_log=False,
    )


if __name__ == "__main__":
    run()
