"""Avatar Studio Exception Hierarchy.

Structured exception classes shared by the orchestrator, the collaborator
adapters and the HTTP layer.

Hierarchy:
    StudioError (base)
    ├── SessionError
    │   ├── SessionNotFoundError
    │   ├── SessionLimitError
    │   ├── FeatureDisabledError
    │   └── SessionStateError
    │       ├── InvalidTransitionError
    │       ├── SessionTerminatedError
    │       └── SessionNotLiveError
    ├── ConfigurationError
    │   └── InvalidConfigError
    ├── CommandError
    │   └── UnknownGestureError
    ├── AvatarError
    │   ├── AvatarNotFoundError
    │   └── AvatarResolutionError
    ├── TransportError
    │   └── TransportFailureError
    ├── SpeechError
    │   └── RecognizerBusyError
    └── SynthesisError
        └── SynthesisBackendError
"""

from typing import Any


class StudioError(Exception):
    """Base exception for all Avatar Studio errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the caller may retry
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Session Errors
# =============================================================================


class SessionError(StudioError):
    """Base exception for session-related errors."""

    def __init__(
        self,
        message: str,
        session_id: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        details = details or {}
        if session_id:
            details["session_id"] = session_id
        super().__init__(message, details, recoverable)
        self.session_id = session_id


class SessionNotFoundError(SessionError):
    """Raised when a session id is not in the registry."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            message=f"Session not found: {session_id}",
            session_id=session_id,
        )


class SessionLimitError(SessionError):
    """Raised when the process-wide session limit is reached."""

    def __init__(self, max_sessions: int, current_sessions: int) -> None:
        super().__init__(
            message=f"Session limit reached: {current_sessions}/{max_sessions}",
            details={
                "max_sessions": max_sessions,
                "current_sessions": current_sessions,
            },
            recoverable=True,  # Can retry when a session ends
        )


class FeatureDisabledError(SessionError):
    """Raised when an operation needs a feature the session was not built with."""

    def __init__(self, session_id: str, feature: str) -> None:
        super().__init__(
            message=f"Feature '{feature}' is not enabled for this session",
            session_id=session_id,
            details={"feature": feature},
        )
        self.feature = feature


class SessionStateError(SessionError):
    """Raised when an operation is illegal for the current lifecycle state."""

    def __init__(
        self,
        message: str,
        session_id: str | None = None,
        current_state: str | None = None,
        target_state: str | None = None,
    ) -> None:
        details = {}
        if current_state:
            details["current_state"] = current_state
        if target_state:
            details["target_state"] = target_state
        super().__init__(message, session_id, details, recoverable=False)
        self.current_state = current_state
        self.target_state = target_state


class InvalidTransitionError(SessionStateError):
    """Raised for a transition the lifecycle does not allow."""

    def __init__(
        self,
        session_id: str | None,
        current_state: str,
        target_state: str | None = None,
        operation: str | None = None,
    ) -> None:
        if operation:
            message = f"Cannot {operation} while session is {current_state}"
        else:
            message = f"Invalid transition: {current_state} -> {target_state}"
        super().__init__(message, session_id, current_state, target_state)


class SessionTerminatedError(SessionStateError):
    """Raised for any operation on a session that is ended or errored."""

    def __init__(self, session_id: str | None, current_state: str) -> None:
        super().__init__(
            message=f"Session is terminated ({current_state})",
            session_id=session_id,
            current_state=current_state,
        )


class SessionNotLiveError(SessionStateError):
    """Raised when an avatar command arrives outside the live state."""

    def __init__(self, session_id: str, current_state: str) -> None:
        super().__init__(
            message=f"Session is not live ({current_state})",
            session_id=session_id,
            current_state=current_state,
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(StudioError):
    """Base exception for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when a session configuration value is invalid."""

    def __init__(
        self,
        config_key: str,
        value: Any,
        reason: str,
    ) -> None:
        super().__init__(
            message=f"Invalid configuration for {config_key}: {reason}",
            details={
                "config_key": config_key,
                "value": str(value),
                "reason": reason,
            },
            recoverable=False,
        )
        self.config_key = config_key


# =============================================================================
# Command Errors
# =============================================================================


class CommandError(StudioError):
    """Base exception for avatar command errors."""

    pass


class UnknownGestureError(CommandError):
    """Raised for a gesture id outside the canonical gesture table."""

    def __init__(self, gesture_id: str, known: list[str]) -> None:
        super().__init__(
            message=f"Unknown gesture: {gesture_id}",
            details={"gesture_id": gesture_id, "known": known},
        )
        self.gesture_id = gesture_id


class AgentCommandError(CommandError):
    """Raised when the avatar agent fails to accept a command."""

    def __init__(self, command: str, reason: str, session_id: str | None = None) -> None:
        details: dict[str, Any] = {"command": command, "reason": reason}
        if session_id:
            details["session_id"] = session_id
        super().__init__(
            message=f"Avatar agent rejected {command}: {reason}",
            details=details,
            recoverable=True,
        )
        self.command = command


# =============================================================================
# Avatar Errors
# =============================================================================


class AvatarError(StudioError):
    """Base exception for avatar catalog errors."""

    pass


class AvatarNotFoundError(AvatarError):
    """Raised by a catalog when it has no model for an avatar id."""

    def __init__(self, avatar_id: str) -> None:
        super().__init__(
            message=f"Avatar not found: {avatar_id}",
            details={"avatar_id": avatar_id},
        )
        self.avatar_id = avatar_id


class AvatarResolutionError(AvatarError):
    """Raised when a session cannot resolve its avatar."""

    def __init__(self, avatar_id: str, reason: str) -> None:
        super().__init__(
            message=f"Failed to resolve avatar {avatar_id}: {reason}",
            details={"avatar_id": avatar_id, "reason": reason},
            recoverable=True,
        )
        self.avatar_id = avatar_id


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(StudioError):
    """Base exception for transport-related errors."""

    pass


class TransportFailureError(TransportError):
    """Raised when the realtime transport cannot publish."""

    def __init__(self, reason: str, session_id: str | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if session_id:
            details["session_id"] = session_id
        super().__init__(
            message=f"Transport failure: {reason}",
            details=details,
            recoverable=False,
        )


# =============================================================================
# Speech Errors
# =============================================================================


class SpeechError(StudioError):
    """Base exception for speech recognition errors."""

    pass


class RecognizerBusyError(SpeechError):
    """Raised when a second listener is bound to an active recognizer."""

    def __init__(self) -> None:
        super().__init__(
            message="Speech recognizer already has an active subscriber",
        )


# =============================================================================
# Synthesis Errors
# =============================================================================


class SynthesisError(StudioError):
    """Base exception for voice synthesis errors."""

    pass


class SynthesisBackendError(SynthesisError):
    """Raised when a synthesis backend request fails."""

    def __init__(self, backend: str, reason: str) -> None:
        super().__init__(
            message=f"Synthesis backend {backend} failed: {reason}",
            details={"backend": backend, "reason": reason},
            recoverable=True,
        )
        self.backend = backend
