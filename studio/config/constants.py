"""Studio Constants - Fixed contract values for the orchestration core.

These are behavioral contracts, not deployment knobs. Deployment knobs
live in settings.py.
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class StudioConstants:
    """Immutable orchestration contract values."""

    # Subtitles
    SUBTITLE_HISTORY_LIMIT: Final[int] = 5  # Most recent subtitle ids kept per session

    # Telemetry random walk
    VIEWER_STEP_MIN: Final[int] = -2
    VIEWER_STEP_MAX: Final[int] = 3
    QUALITY_STEP_MIN: Final[int] = -10
    QUALITY_STEP_MAX: Final[int] = 10
    QUALITY_MIN: Final[int] = 60  # Connection quality floor (percent)
    QUALITY_MAX: Final[int] = 100  # Connection quality ceiling (percent)
    QUALITY_INITIAL: Final[int] = 85
    TELEMETRY_INTERVAL_S: Final[float] = 3.0

    # Default broadcast quality descriptor
    DEFAULT_RESOLUTION: Final[str] = "1080p"
    DEFAULT_BITRATE_KBPS: Final[int] = 2500
    DEFAULT_FPS: Final[int] = 30
    DEFAULT_LATENCY_MS: Final[int] = 100

    # Lifecycle
    MAX_CONCURRENT_SESSIONS: Final[int] = 100
    STATE_HISTORY_LIMIT: Final[int] = 100
    RELEASE_TIMEOUT_S: Final[float] = 5.0  # Budget for releasing all bindings
    RETAINED_TERMINAL_SESSIONS: Final[int] = 32  # Ended/errored sessions kept for lookups

    # Synthesis
    UTTERANCE_HISTORY_LIMIT: Final[int] = 16  # Recent utterances kept per synthesizer


# Singleton instance for import convenience
STUDIO = StudioConstants()
