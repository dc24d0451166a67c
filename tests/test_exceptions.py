"""Tests for the exception hierarchy and its HTTP mapping."""

import pytest

from studio.api.errors import http_status_for
from studio.exceptions import (
    AgentCommandError,
    AvatarError,
    AvatarNotFoundError,
    AvatarResolutionError,
    CommandError,
    FeatureDisabledError,
    InvalidConfigError,
    InvalidTransitionError,
    RecognizerBusyError,
    SessionError,
    SessionLimitError,
    SessionNotFoundError,
    SessionNotLiveError,
    SessionStateError,
    SessionTerminatedError,
    StudioError,
    SynthesisBackendError,
    TransportFailureError,
    UnknownGestureError,
)


class TestStudioError:
    """Tests for base StudioError."""

    def test_basic_error(self):
        error = StudioError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.details == {}
        assert error.recoverable is False

    def test_error_with_details(self):
        error = StudioError("Failed", details={"key": "value"})

        assert "key" in str(error)

    def test_to_dict(self):
        error = StudioError("Test error", details={"foo": "bar"}, recoverable=True)

        assert error.to_dict() == {
            "type": "StudioError",
            "message": "Test error",
            "details": {"foo": "bar"},
            "recoverable": True,
        }


class TestSessionErrors:
    """Tests for session error details."""

    def test_not_found(self):
        error = SessionNotFoundError("session_abc")

        assert isinstance(error, SessionError)
        assert error.session_id == "session_abc"
        assert "session_abc" in error.message

    def test_limit_is_recoverable(self):
        error = SessionLimitError(max_sessions=10, current_sessions=10)

        assert error.recoverable is True
        assert error.details["max_sessions"] == 10

    def test_state_errors_share_base(self):
        for error in (
            InvalidTransitionError("s", "live", "initializing"),
            SessionTerminatedError("s", "ended"),
            SessionNotLiveError("s", "paused"),
        ):
            assert isinstance(error, SessionStateError)

    def test_transition_message_with_operation(self):
        error = InvalidTransitionError("s", "live", operation="update settings")

        assert error.message == "Cannot update settings while session is live"

    def test_feature_disabled(self):
        error = FeatureDisabledError("s", "ai_chat")

        assert error.feature == "ai_chat"
        assert error.details == {"feature": "ai_chat", "session_id": "s"}


class TestCollaboratorErrors:
    def test_avatar_errors(self):
        assert isinstance(AvatarNotFoundError("x"), AvatarError)
        assert AvatarResolutionError("x", "timeout").recoverable is True

    def test_unknown_gesture(self):
        error = UnknownGestureError("dab", ["heart", "wave"])

        assert error.details["known"] == ["heart", "wave"]

    def test_agent_command_error(self):
        error = AgentCommandError("gesture", "socket closed", session_id="s")

        assert isinstance(error, CommandError)
        assert error.recoverable is True
        assert error.details == {"command": "gesture", "reason": "socket closed", "session_id": "s"}


class TestHttpStatusMapping:
    """Tests for error -> status code mapping."""

    @pytest.mark.parametrize(
        "error,code",
        [
            (SessionNotFoundError("s"), 404),
            (SessionLimitError(1, 1), 503),
            (SessionTerminatedError("s", "ended"), 409),
            (SessionNotLiveError("s", "initializing"), 409),
            (FeatureDisabledError("s", "subtitles"), 409),
            (RecognizerBusyError(), 409),
            (InvalidConfigError("avatar_id", "", "must not be empty"), 422),
            (UnknownGestureError("dab", []), 422),
            (AgentCommandError("gesture", "socket closed"), 502),
            (AvatarResolutionError("x", "down"), 502),
            (TransportFailureError("ingest rejected"), 502),
            (SynthesisBackendError("elevenlabs", "quota"), 502),
            (StudioError("mystery"), 500),
        ],
    )
    def test_status(self, error, code):
        assert http_status_for(error) == code
