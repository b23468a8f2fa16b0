"""Story Recorder API layer - routes, schemas, auth, and middleware."""

from story_recorder.api.admin_routes import router as admin_router
from story_recorder.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from story_recorder.api.routes import router
from story_recorder.api.schemas import (
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
    LikeResponse,
    UploadResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "admin_router",
    "DeleteResponse",
    "ErrorResponse",
    "HealthResponse",
    "LikeResponse",
    "UploadResponse",
]
