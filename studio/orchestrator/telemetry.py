"""Live Telemetry - Viewer count and connection quality while live.

A MetricsSource proposes the next sample from the current status; the
TelemetryTicker feeds samples to the session on a fixed interval. The
session clamps and applies them, and only while live.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from studio.config.constants import STUDIO
from studio.observability.logging import get_logger
from studio.orchestrator.models import SessionStatus

logger = get_logger(__name__)


@dataclass(frozen=True)
class TelemetrySample:
    """One telemetry reading."""

    viewer_count: int
    connection_quality: int


def clamp_quality(value: int) -> int:
    """Clamp connection quality to its valid range."""
    return max(STUDIO.QUALITY_MIN, min(STUDIO.QUALITY_MAX, value))


def clamp_viewers(value: int) -> int:
    """Viewer counts never go negative."""
    return max(0, value)


class MetricsSource(Protocol):
    """Produces telemetry samples.

    Real deployments read the transport's stats; the random walk below
    simulates them.
    """

    def sample(self, status: SessionStatus) -> TelemetrySample:
        """Next sample given the current status."""
        ...


class RandomWalkMetrics:
    """Simulated audience: bounded random walk on viewers and quality."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def sample(self, status: SessionStatus) -> TelemetrySample:
        viewers = status.viewer_count + self._rng.randint(
            STUDIO.VIEWER_STEP_MIN, STUDIO.VIEWER_STEP_MAX
        )
        quality = status.connection_quality + self._rng.randint(
            STUDIO.QUALITY_STEP_MIN, STUDIO.QUALITY_STEP_MAX
        )
        return TelemetrySample(
            viewer_count=clamp_viewers(viewers),
            connection_quality=clamp_quality(quality),
        )


TickCallback = Callable[[], Awaitable[None]]


class TelemetryTicker:
    """Calls on_tick every interval until stopped.

    Usage:
        ticker = TelemetryTicker(session_id, session.apply_telemetry)
        ticker.start()
        ...
        ticker.stop()  # no tick runs after this returns
    """

    def __init__(
        self,
        session_id: str,
        on_tick: TickCallback,
        interval_s: float = STUDIO.TELEMETRY_INTERVAL_S,
    ) -> None:
        self._session_id = session_id
        self._on_tick = on_tick
        self._interval_s = interval_s
        self._running = False
        self._task: asyncio.Task | None = None
        self._ticks = 0

    def start(self) -> None:
        """Start ticking. No-op when already running."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())

    def stop(self) -> None:
        """Stop ticking."""
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None

    async def _loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self._interval_s)

                if not self._running:
                    break

                self._ticks += 1
                await self._on_tick()

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.warning(
                    "telemetry_tick_error",
                    session_id=self._session_id,
                    error=str(e),
                )
                continue

    @property
    def is_running(self) -> bool:
        """Whether the ticker is running."""
        return self._running

    @property
    def ticks(self) -> int:
        """Ticks delivered so far."""
        return self._ticks
