"""Shared-secret guard for the admin API.

The admin client sends the configured password verbatim in the
``Authorization`` header on every request.  There are no sessions and no
users: one secret, checked per request.

The comparison uses ``hmac.compare_digest`` so the response time doesn't
reveal how much of a guess was right.  With no password configured the
admin API is closed, not open.
"""

from __future__ import annotations

import hmac

import structlog
from fastapi import HTTPException, Request

logger = structlog.get_logger(logger_name=__name__)

ADMIN_HEADER = "Authorization"


def secrets_match(provided: str, expected: str) -> bool:
    """Constant-time equality for the shared secret (empty never matches)."""
    if not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


async def require_admin(request: Request) -> None:
    """FastAPI dependency: raise 401 unless the admin secret was presented."""
    settings = request.app.state.settings
    expected = settings.admin_password
    if not expected:
        logger.warning("admin_password_not_configured", path=str(request.url.path))

    provided = request.headers.get(ADMIN_HEADER, "")
    if not secrets_match(provided, expected):
        raise HTTPException(status_code=401, detail="Unauthorized")
