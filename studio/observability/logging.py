"""Structured Logging - JSON logs with session correlation.

Provides structured logging for:
- Session lifecycle events (initialize, start, pause, stop, failure)
- State transitions
- Feature binding and release
- Avatar commands

All session logs include session_id for correlation.
"""

import logging
import sys
from typing import Any

import structlog


def stdlib_level_name(level: str) -> str:
    """Standard library level name for a configured level (WARN -> WARNING)."""
    name = level.upper()
    return "WARNING" if name == "WARN" else name


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON; else human-readable
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    level_name = stdlib_level_name(level)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name),
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


# -----------------------------------------------------------------------------
# Event-specific logging functions
# -----------------------------------------------------------------------------


class SessionLogger:
    """Logger for session lifecycle events."""

    def __init__(self, session_id: str) -> None:
        self._session_id = session_id
        self._log = get_logger("session").bind(session_id=session_id)

    def session_initialized(self, metadata: dict[str, Any] | None = None) -> None:
        """Log session initialization."""
        self._log.info(
            "session_initialized",
            event_type="session.initialized",
            **(metadata or {}),
        )

    def session_live(self, url: str | None) -> None:
        """Log session going live."""
        self._log.info(
            "session_live",
            event_type="session.live",
            url=url,
        )

    def session_paused(self, duration_s: float) -> None:
        """Log session pause."""
        self._log.info(
            "session_paused",
            event_type="session.paused",
            duration_s=duration_s,
        )

    def session_ended(self, reason: str, duration_s: float) -> None:
        """Log session end."""
        self._log.info(
            "session_ended",
            event_type="session.ended",
            reason=reason,
            duration_s=duration_s,
        )

    def session_failed(self, stage: str, error: str) -> None:
        """Log an unrecoverable collaborator failure."""
        self._log.error(
            "session_failed",
            event_type="session.failed",
            stage=stage,
            error=error,
        )

    def state_change(
        self,
        old_state: str,
        new_state: str,
        reason: str,
    ) -> None:
        """Log state transition."""
        self._log.info(
            "state_change",
            event_type="session.state_change",
            old_state=old_state,
            new_state=new_state,
            reason=reason,
        )

    def settings_updated(self, fields: list[str]) -> None:
        """Log a pre-live settings update."""
        self._log.info(
            "settings_updated",
            event_type="session.settings_updated",
            fields=fields,
        )


class FeatureLogger:
    """Logger for feature wiring events."""

    def __init__(self, session_id: str) -> None:
        self._session_id = session_id
        self._log = get_logger("features").bind(session_id=session_id)

    def bound(self, feature: str) -> None:
        """Log a collaborator binding."""
        self._log.debug(
            "feature_bound",
            event_type="feature.bound",
            feature=feature,
        )

    def released(
        self,
        handlers_count: int,
        failed: list[str],
        elapsed_ms: float,
    ) -> None:
        """Log release of all bindings."""
        log = self._log.warning if failed else self._log.info
        log(
            "features_released",
            event_type="feature.released",
            handlers_count=handlers_count,
            failed=failed,
            elapsed_ms=elapsed_ms,
        )

    def release_failed(self, binding: str, error: str) -> None:
        """Log a single release handler failure."""
        self._log.warning(
            "feature_release_failed",
            event_type="feature.release_failed",
            binding=binding,
            error=error,
        )

    def release_timeout(self, pending: list[str], elapsed_ms: float) -> None:
        """Log release handlers abandoned after the timeout."""
        self._log.warning(
            "feature_release_timeout",
            event_type="feature.release_timeout",
            pending=pending,
            elapsed_ms=elapsed_ms,
        )


class CommandLogger:
    """Logger for avatar command events."""

    def __init__(self, session_id: str) -> None:
        self._session_id = session_id
        self._log = get_logger("commands").bind(session_id=session_id)

    def gesture(self, gesture_id: str, animation: str) -> None:
        """Log gesture dispatch."""
        self._log.info(
            "gesture_triggered",
            event_type="command.gesture",
            gesture_id=gesture_id,
            animation=animation,
        )

    def expression(self, expression_id: str) -> None:
        """Log expression dispatch."""
        self._log.info(
            "expression_updated",
            event_type="command.expression",
            expression_id=expression_id,
        )

    def voice_command(self, action: str, success: bool) -> None:
        """Log voice command resolution."""
        self._log.info(
            "voice_command",
            event_type="command.voice",
            action=action,
            success=success,
        )


def init_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Initialize logging with defaults.

    Call this once at application startup.
    """
    configure_logging(level=level, json_format=json_format)
