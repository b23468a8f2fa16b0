"""HTTP plumbing shared by the public and admin routers.

``create_app`` stacks two middlewares around every route::

    app.add_middleware(ErrorHandlingMiddleware)   # inner
    app.add_middleware(RequestLoggingMiddleware)  # outer

The outer one therefore logs the status the client actually received,
including the JSON errors the inner one builds.  FastAPI's own
``HTTPException`` responses (404 audio, 401 admin) are produced inside
the router and pass through both untouched.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from story_recorder.api.schemas import ErrorResponse
from story_recorder.utils.errors import StoryRecorderError
from story_recorder.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# Shown instead of internal details for every 5xx.
_GENERIC_FAILURE = "Something went wrong on our side. Please try again."


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    allowed_origins:
        Explicit list of allowed origins.  Defaults to ``["*"]``.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Credentials can't be combined with a wildcard origin.
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One ``http_request`` event per request.

    Server failures log at error level and client rejections at warning,
    so a failed upload stands out from the steady stream of audio fetches.
    The declared ``content-length`` is included because upload size is the
    usual suspect when a recording is refused.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            if status_code >= 500:
                emit = _logger.error
            elif status_code >= 400:
                emit = _logger.warning
            else:
                emit = _logger.info
            emit(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status_code,
                content_length=request.headers.get("content-length"),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn exceptions escaping a route into ``ErrorResponse`` JSON.

    Upload rejections (4xx) carry their own message.  Server-side failures,
    whether a ``StoryRecorderError`` or anything unexpected, are logged in
    full and answered with the generic ``internal_failure`` body, so paths
    and errno values never reach the recorder page.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except StoryRecorderError as exc:
            status_code = exc.http_status
            if status_code >= 500:
                _logger.error(
                    "application_error",
                    error_type=type(exc).__name__,
                    message=exc.message,
                    component=exc.component,
                    path=str(request.url.path),
                )
                body = ErrorResponse(error="internal_failure", detail=_GENERIC_FAILURE)
            else:
                body = ErrorResponse(error=exc.error_code, detail=exc.message)
            return JSONResponse(
                status_code=status_code,
                content=body.model_dump(),
            )
        except Exception:
            _logger.exception("unhandled_error", path=str(request.url.path))
            body = ErrorResponse(error="internal_failure", detail=_GENERIC_FAILURE)
            return JSONResponse(status_code=500, content=body.model_dump())
