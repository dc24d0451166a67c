"""Orchestrator module - Broadcast session lifecycle and control.

Provides:
- SessionStateMachine: 5-state broadcast FSM
- Session data model: SessionConfig, SessionStatus, FeatureFlags, ...

Session and SessionManager live in studio.orchestrator.session, which
depends on the collaborator adapters and is imported from there.
"""

from studio.orchestrator.models import (
    CommandResult,
    FeatureFlags,
    Participant,
    ParticipantRole,
    SessionConfig,
    SessionStatus,
    StreamQuality,
    SubtitleLine,
    SubtitleOptions,
    Visibility,
    VoiceProfile,
    VoiceProvider,
    VoiceSettings,
)
from studio.orchestrator.state_machine import SessionState, SessionStateMachine

__all__ = [
    # State machine
    "SessionState",
    "SessionStateMachine",
    # Data model
    "CommandResult",
    "FeatureFlags",
    "Participant",
    "ParticipantRole",
    "SessionConfig",
    "SessionStatus",
    "StreamQuality",
    "SubtitleLine",
    "SubtitleOptions",
    "Visibility",
    "VoiceProfile",
    "VoiceProvider",
    "VoiceSettings",
]
