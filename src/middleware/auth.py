"""Admin API key check for the triage endpoints.

The key is sent as ``X-Admin-API-Key`` and compared in constant time
against ``ADMIN_API_KEY``.  Without a configured key, development mode lets
requests through (with a warning) and production refuses them.
"""

from __future__ import annotations

import hmac

import structlog
from fastapi import HTTPException, Request, Security
from fastapi.security import APIKeyHeader

from config.settings import settings

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

ADMIN_KEY_HEADER = "X-Admin-API-Key"

_api_key_header = APIKeyHeader(name=ADMIN_KEY_HEADER, auto_error=False)


def _caller(request: Request) -> dict[str, str]:
    return {
        "path": request.url.path,
        "client_ip": request.client.host if request.client else "unknown",
    }


def keys_match(presented: str, configured: str) -> bool:
    return hmac.compare_digest(presented.encode(), configured.encode())


async def require_admin_api_key(
    request: Request,
    api_key: str | None = Security(_api_key_header),
) -> str:
    """Dependency for admin routers; returns the accepted key.

    Raises 401 when the header is missing, 403 when it is wrong and 503
    when production has no key configured.
    """
    configured = settings.admin_api_key
    if not configured:
        if settings.is_production:
            logger.error("auth.admin_key_missing_in_production", **_caller(request))
            raise HTTPException(status_code=503, detail="Admin authentication is not configured.")
        logger.warning("auth.admin_key_not_configured", **_caller(request))
        return ""

    if not api_key:
        logger.warning("auth.admin_key_absent", **_caller(request))
        raise HTTPException(
            status_code=401,
            detail=f"Missing {ADMIN_KEY_HEADER} header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not keys_match(api_key, configured):
        logger.warning("auth.admin_key_rejected", **_caller(request))
        raise HTTPException(status_code=403, detail="Invalid API key.")

    return api_key
