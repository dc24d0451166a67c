"""Avatar Studio - Session orchestration for avatar-hosted live broadcasts."""

__version__ = "0.3.0"

# Export exception hierarchy for easy importing
from studio.exceptions import (
    StudioError,
    SessionError,
    SessionNotFoundError,
    SessionLimitError,
    FeatureDisabledError,
    SessionStateError,
    InvalidTransitionError,
    SessionTerminatedError,
    SessionNotLiveError,
    ConfigurationError,
    InvalidConfigError,
    CommandError,
    AgentCommandError,
    UnknownGestureError,
    AvatarError,
    AvatarNotFoundError,
    AvatarResolutionError,
    TransportError,
    TransportFailureError,
    SpeechError,
    RecognizerBusyError,
    SynthesisError,
    SynthesisBackendError,
)

__all__ = [
    "__version__",
    # Base
    "StudioError",
    # Session
    "SessionError",
    "SessionNotFoundError",
    "SessionLimitError",
    "FeatureDisabledError",
    "SessionStateError",
    "InvalidTransitionError",
    "SessionTerminatedError",
    "SessionNotLiveError",
    # Configuration
    "ConfigurationError",
    "InvalidConfigError",
    # Commands
    "CommandError",
    "AgentCommandError",
    "UnknownGestureError",
    # Avatar
    "AvatarError",
    "AvatarNotFoundError",
    "AvatarResolutionError",
    # Transport
    "TransportError",
    "TransportFailureError",
    # Speech
    "SpeechError",
    "RecognizerBusyError",
    # Synthesis
    "SynthesisError",
    "SynthesisBackendError",
]
