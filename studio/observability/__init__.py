"""Observability module - structured logging and Prometheus metrics."""

from studio.observability.logging import (
    CommandLogger,
    FeatureLogger,
    SessionLogger,
    configure_logging,
    get_logger,
    init_logging,
)

__all__ = [
    "CommandLogger",
    "FeatureLogger",
    "SessionLogger",
    "configure_logging",
    "get_logger",
    "init_logging",
]
