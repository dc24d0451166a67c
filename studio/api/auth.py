"""Stream Route Authentication - Operator API key for the /streams router.

Every broadcast-control route (initialize, start, pause, stop, commands,
subtitles, chat, participants) carries verify_api_key as a router-level
dependency. Operators present the key in the X-API-Key header.

/healthz, /readyz and /metrics are mounted outside the stream router and
never reach this check. A development deployment without a configured
key runs open.
"""

import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from studio.config.settings import get_settings
from studio.observability.logging import get_logger

logger = get_logger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def _constant_time_compare(a: str, b: str) -> bool:
    return secrets.compare_digest(a.encode(), b.encode())


def _reject(request: Request, reason: str, detail: str) -> HTTPException:
    logger.warning(
        "stream_request_rejected",
        reason=reason,
        method=request.method,
        path=request.url.path,
        session_id=request.path_params.get("session_id"),
        client_ip=request.client.host if request.client else "unknown",
    )
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "ApiKey"},
    )


async def verify_api_key(
    request: Request,
    api_key: str | None = Depends(api_key_header),
) -> None:
    """Admit a stream-control request only with the operator key.

    Raises:
        HTTPException: 401 when the key is missing or wrong
    """
    settings = get_settings()

    if not settings.auth_enabled:
        return

    if not settings.api_key:
        if settings.environment == "development":
            logger.debug("stream_auth_open", path=request.url.path)
            return
        # Auth on without a key configured: nothing can match
        raise _reject(request, "no_operator_key_configured", "Invalid API key")

    if not api_key:
        raise _reject(request, "missing_api_key", "Missing API key")

    if not _constant_time_compare(api_key, settings.api_key):
        raise _reject(request, "invalid_api_key", "Invalid API key")
