"""Prometheus Metrics - Studio observability.

Exports:
- Session lifecycle counts
- Collaborator failure counts
- Avatar command counts
- Subtitle and synthesis activity
- Live session / viewer gauges
"""

from prometheus_client import Counter, Gauge, Histogram

# -----------------------------------------------------------------------------
# Counters
# -----------------------------------------------------------------------------

SESSIONS_INITIALIZED = Counter(
    "studio_sessions_initialized_total",
    "Total sessions initialized",
)

SESSIONS_STARTED = Counter(
    "studio_sessions_started_total",
    "Total successful publishes (start or resume)",
)

SESSIONS_ENDED = Counter(
    "studio_sessions_ended_total",
    "Total sessions ended",
    ["reason"],  # normal, shutdown, error
)

COLLABORATOR_FAILURES = Counter(
    "studio_collaborator_failures_total",
    "Collaborator failures that drove a session to error",
    ["stage"],  # avatar, transport, provision
)

GESTURES_TRIGGERED = Counter(
    "studio_gestures_triggered_total",
    "Gestures dispatched to avatar agents",
    ["gesture"],
)

EXPRESSIONS_UPDATED = Counter(
    "studio_expressions_updated_total",
    "Expression updates dispatched to avatar agents",
)

VOICE_COMMANDS = Counter(
    "studio_voice_commands_total",
    "Voice commands processed",
    ["action"],  # gesture, expression, unknown, error
)

SUBTITLE_LINES = Counter(
    "studio_subtitle_lines_total",
    "Subtitle lines received from recognizers",
    ["kind"],  # interim, final
)

SYNTHESIS_FALLBACKS = Counter(
    "studio_synthesis_fallbacks_total",
    "Synthesis requests served by the fallback backend",
)

# -----------------------------------------------------------------------------
# Histograms
# -----------------------------------------------------------------------------

PUBLISH_LATENCY = Histogram(
    "studio_publish_latency_seconds",
    "Transport publish latency",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# -----------------------------------------------------------------------------
# Gauges
# -----------------------------------------------------------------------------

LIVE_SESSIONS = Gauge(
    "studio_live_sessions",
    "Sessions currently live",
)

VIEWERS = Gauge(
    "studio_viewers",
    "Viewer count per live session",
    ["session_id"],
)


# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def record_session_initialized() -> None:
    """Record session initialization."""
    SESSIONS_INITIALIZED.inc()


def record_session_live(publish_latency_s: float) -> None:
    """Record a successful publish."""
    SESSIONS_STARTED.inc()
    LIVE_SESSIONS.inc()
    PUBLISH_LATENCY.observe(publish_latency_s)


def record_session_left_live() -> None:
    """Record a session leaving the live state."""
    LIVE_SESSIONS.dec()


def record_session_end(session_id: str, reason: str = "normal") -> None:
    """Record session end."""
    SESSIONS_ENDED.labels(reason=reason).inc()
    try:
        VIEWERS.remove(session_id)
    except KeyError:
        pass


def record_collaborator_failure(stage: str) -> None:
    """Record a structural collaborator failure."""
    COLLABORATOR_FAILURES.labels(stage=stage).inc()


def record_gesture(gesture_id: str) -> None:
    """Record gesture dispatch."""
    GESTURES_TRIGGERED.labels(gesture=gesture_id).inc()


def record_expression() -> None:
    """Record expression dispatch."""
    EXPRESSIONS_UPDATED.inc()


def record_voice_command(action: str) -> None:
    """Record voice command resolution."""
    VOICE_COMMANDS.labels(action=action).inc()


def record_subtitle_line(is_interim: bool) -> None:
    """Record a subtitle line."""
    SUBTITLE_LINES.labels(kind="interim" if is_interim else "final").inc()


def record_synthesis_fallback() -> None:
    """Record synthesis served by fallback backend."""
    SYNTHESIS_FALLBACKS.inc()


def update_viewers(session_id: str, viewer_count: int) -> None:
    """Update viewer gauge for a session."""
    VIEWERS.labels(session_id=session_id).set(viewer_count)
