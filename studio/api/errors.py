"""Mapping from domain errors to HTTP responses."""

from fastapi import Request
from fastapi.responses import JSONResponse

from studio.exceptions import (
    AgentCommandError,
    AvatarError,
    FeatureDisabledError,
    InvalidConfigError,
    RecognizerBusyError,
    SessionLimitError,
    SessionNotFoundError,
    SessionStateError,
    StudioError,
    SynthesisError,
    TransportError,
    UnknownGestureError,
)
from studio.observability.logging import get_logger

logger = get_logger(__name__)

# First match wins
_STATUS_TABLE: tuple[tuple[type[StudioError], int], ...] = (
    (SessionNotFoundError, 404),
    (SessionLimitError, 503),
    (SessionStateError, 409),
    (FeatureDisabledError, 409),
    (RecognizerBusyError, 409),
    (InvalidConfigError, 422),
    (UnknownGestureError, 422),
    (AgentCommandError, 502),
    (AvatarError, 502),
    (TransportError, 502),
    (SynthesisError, 502),
)


def http_status_for(exc: StudioError) -> int:
    """HTTP status code for a domain error."""
    for error_type, code in _STATUS_TABLE:
        if isinstance(exc, error_type):
            return code
    return 500


async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
    """Render a StudioError as JSON."""
    code = http_status_for(exc)
    log = logger.warning if code < 500 or code == 503 else logger.error
    log(
        "request_failed",
        path=request.url.path,
        method=request.method,
        status_code=code,
        error=exc.to_dict(),
    )
    return JSONResponse(status_code=code, content={"error": exc.to_dict()})
