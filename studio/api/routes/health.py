"""Health check endpoints.

- /healthz: Liveness probe (is the process alive?)
- /readyz: Readiness probe (is the service ready to accept traffic?)
- /metrics: Prometheus metrics endpoint
"""

from typing import Any

from fastapi import APIRouter, Request, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=dict[str, str])
async def healthz() -> dict[str, str]:
    """Liveness probe.

    Returns 200 if the process is alive.
    """
    return {"status": "alive"}


@router.get("/readyz")
async def readyz(request: Request, response: Response) -> dict[str, Any]:
    """Readiness probe.

    Returns 503 until the session manager is up.
    """
    manager = getattr(request.app.state, "session_manager", None)
    ready = bool(getattr(request.app.state, "ready", False)) and manager is not None

    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready"}

    return {
        "status": "ready",
        "active_sessions": manager.active_count,
        "available_slots": manager.available_slots,
    }


@router.get("/metrics")
async def metrics(request: Request) -> Response:
    """Prometheus scrape endpoint."""
    settings = getattr(request.app.state, "settings", None)
    if settings is not None and not settings.metrics_enabled:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
