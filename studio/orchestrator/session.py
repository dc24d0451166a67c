"""Session Container - Broadcast session lifecycle and the session registry.

A Session owns one broadcast:
- State machine (FSM)
- Configuration and mutable status
- Collaborator bindings (avatar agent, transport, recognizer, synthesizer)
- Telemetry ticker while live

SessionManager owns the registry and every public operation.

Concurrency: each session has its own lock. Collaborator calls are never
awaited under it; an operation marks an in-flight future under the lock,
releases it, calls the collaborator, then re-acquires the lock to commit.
Other operations on the same session wait for the in-flight future
before taking their turn.
"""

from __future__ import annotations

import asyncio
import dataclasses
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from studio.collaborators.avatar import AvatarModel
from studio.collaborators.registry import CollaboratorRegistry
from studio.collaborators.transport import PublishRequest, RealtimeTransport
from studio.config.constants import STUDIO
from studio.exceptions import (
    AvatarError,
    AvatarResolutionError,
    FeatureDisabledError,
    InvalidConfigError,
    InvalidTransitionError,
    SessionLimitError,
    SessionNotFoundError,
    SessionNotLiveError,
    SessionTerminatedError,
    StudioError,
    TransportFailureError,
)
from studio.observability.logging import CommandLogger, SessionLogger, get_logger
from studio.observability.metrics import (
    record_collaborator_failure,
    record_session_end,
    record_session_initialized,
    record_session_left_live,
    record_session_live,
    record_voice_command,
    update_viewers,
)
from studio.orchestrator.commands import (
    UNRECOGNIZED_MESSAGE,
    CommandKind,
    VoiceCommandInterpreter,
)
from studio.orchestrator.features import FeatureBindings, FeatureOrchestrator
from studio.orchestrator.gestures import GestureRouter, resolve_gesture
from studio.orchestrator.models import (
    UPDATABLE_FIELDS,
    CommandResult,
    Participant,
    ParticipantRole,
    SessionConfig,
    SessionStatus,
    SubtitleLine,
    SubtitleOptions,
    VoiceProfile,
    coerce_visibility,
    utc_now,
)
from studio.orchestrator.state_machine import SessionState, SessionStateMachine, StateTransition
from studio.orchestrator.telemetry import (
    MetricsSource,
    TelemetryTicker,
    clamp_quality,
    clamp_viewers,
)

logger = get_logger(__name__)


class Session:
    """Broadcast session container.

    Sessions are created by SessionManager.initialize_stream(); callers
    never drive them directly.
    """

    def __init__(
        self,
        session_id: str,
        config: SessionConfig,
        metrics: MetricsSource,
    ) -> None:
        self._session_id = session_id
        self.config = config
        self.status = SessionStatus()
        self.participants: dict[str, Participant] = {}
        self.created_at = utc_now()
        self.updated_at = self.created_at

        self._state_machine = SessionStateMachine(session_id)
        self._state_machine.on_state_change(self._on_state_change)
        self._log = SessionLogger(session_id)

        # Exclusivity
        self.lock = asyncio.Lock()
        self._inflight: asyncio.Future | None = None

        # Collaborators (set during initialization)
        self.avatar: AvatarModel | None = None
        self.transport: RealtimeTransport | None = None
        self.bindings: FeatureBindings | None = None
        self.published = False

        # Live timing
        self._live_since: float | None = None
        self._live_accumulated_s = 0.0
        self._metrics = metrics
        self._ticker: TelemetryTicker | None = None

    @property
    def session_id(self) -> str:
        """Session identifier."""
        return self._session_id

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state_machine.state

    @property
    def state_machine(self) -> SessionStateMachine:
        return self._state_machine

    @property
    def log(self) -> SessionLogger:
        return self._log

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[None]:
        """Hold the session lock once no operation is in flight."""
        while True:
            await self.lock.acquire()
            inflight = self._inflight
            if inflight is None or inflight.done():
                break
            self.lock.release()
            await asyncio.wait([inflight])
        try:
            yield
        finally:
            self.lock.release()

    def begin_operation(self) -> asyncio.Future:
        """Mark an operation in flight. Call while holding the lock."""
        future = asyncio.get_running_loop().create_future()
        self._inflight = future
        return future

    @property
    def is_idle(self) -> bool:
        """True when no operation is in flight and the lock is free."""
        inflight = self._inflight
        return not self.lock.locked() and (inflight is None or inflight.done())

    def end_operation(self, future: asyncio.Future) -> None:
        """Clear the in-flight marker and wake waiters."""
        if self._inflight is future:
            self._inflight = None
        if not future.done():
            future.set_result(None)

    async def transition(
        self,
        new_state: SessionState,
        reason: str,
        metadata: dict | None = None,
    ) -> StateTransition:
        """Apply a state transition and mirror it into the status."""
        transition = await self._state_machine.transition_to(new_state, reason, metadata)
        self.status.state = new_state
        self.touch()
        return transition

    def _on_state_change(self, transition: StateTransition) -> None:
        self._log.state_change(
            transition.old_state.value,
            transition.new_state.value,
            transition.reason,
        )

    def touch(self) -> None:
        self.updated_at = utc_now()

    # -------------------------------------------------------------------------
    # Live timing and telemetry
    # -------------------------------------------------------------------------

    def mark_live(self) -> None:
        self._live_since = time.monotonic()

    def fold_duration(self) -> None:
        """Add the current live stretch to the accumulated duration."""
        if self._live_since is not None:
            self._live_accumulated_s += time.monotonic() - self._live_since
            self._live_since = None
        self.status.duration_s = self._live_accumulated_s

    def refresh_duration(self) -> None:
        if self._live_since is not None and self.state is SessionState.LIVE:
            self.status.duration_s = self._live_accumulated_s + (
                time.monotonic() - self._live_since
            )

    def start_ticker(self, interval_s: float) -> None:
        self._ticker = TelemetryTicker(self._session_id, self.apply_telemetry, interval_s)
        self._ticker.start()

    def stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None

    @property
    def ticker_running(self) -> bool:
        return self._ticker is not None and self._ticker.is_running

    async def apply_telemetry(self) -> None:
        """Pull a sample and apply it while live."""
        async with self.lock:
            if self.state is not SessionState.LIVE:
                return
            sample = self._metrics.sample(self.status)
            self.status.viewer_count = clamp_viewers(sample.viewer_count)
            self.status.connection_quality = clamp_quality(sample.connection_quality)
            self.refresh_duration()
        update_viewers(self._session_id, self.status.viewer_count)

    def snapshot(self) -> SessionStatus:
        """Status copy with the duration brought up to date."""
        self.refresh_duration()
        return self.status.snapshot()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "session_id": self._session_id,
            "state": self.state.value,
            "config": self.config.to_dict(),
            "status": self.snapshot().to_dict(),
            "participants": [p.to_dict() for p in self.participants.values()],
            "avatar": self.avatar.name if self.avatar else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class SessionManager:
    """Registry and operations for broadcast sessions.

    Provides:
    - Session initialization, start, pause, stop
    - Pre-live settings updates
    - Avatar expression/gesture commands and voice commands
    - Subtitle and voice feature control
    - Concurrent session limits

    Usage:
        manager = SessionManager(build_registry(settings))

        session = await manager.initialize_stream(config)
        await manager.start_stream(session.session_id)
        await manager.trigger_avatar_gesture(session.session_id, "wave")
        await manager.stop_stream(session.session_id)
    """

    def __init__(
        self,
        registry: CollaboratorRegistry | None = None,
        max_sessions: int = STUDIO.MAX_CONCURRENT_SESSIONS,
        telemetry_interval_s: float = STUDIO.TELEMETRY_INTERVAL_S,
        release_timeout_s: float = STUDIO.RELEASE_TIMEOUT_S,
        retained_terminal_sessions: int = STUDIO.RETAINED_TERMINAL_SESSIONS,
    ) -> None:
        self._registry = registry or CollaboratorRegistry()
        self._max_sessions = max_sessions
        self._retained_terminal = retained_terminal_sessions
        self._telemetry_interval_s = telemetry_interval_s
        self._features = FeatureOrchestrator(self._registry, release_timeout_s)
        self._interpreter = VoiceCommandInterpreter()
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()

    @property
    def registry(self) -> CollaboratorRegistry:
        return self._registry

    @property
    def active_count(self) -> int:
        """Number of non-terminal sessions."""
        return sum(1 for s in self._sessions.values() if not s.state.is_terminal)

    @property
    def available_slots(self) -> int:
        """Number of available session slots."""
        return self._max_sessions - self.active_count

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    async def _register(self, config: SessionConfig) -> Session:
        async with self._lock:
            self._evict_terminal()
            active = self.active_count
            if active >= self._max_sessions:
                raise SessionLimitError(self._max_sessions, active)

            session_id = f"session_{uuid.uuid4().hex}"
            session = Session(session_id, config, self._registry.create_metrics(session_id))
            self._sessions[session_id] = session
            return session

    def _evict_terminal(self) -> None:
        """Drop the oldest ended/errored sessions beyond the retention cap."""
        terminal = [
            s for s in self._sessions.values() if s.state.is_terminal and s.is_idle
        ]
        excess = len(terminal) - self._retained_terminal
        for session in terminal[:max(excess, 0)]:
            self._sessions.pop(session.session_id, None)
            logger.debug(
                "session_evicted",
                session_id=session.session_id,
                state=session.state.value,
            )

    def get_session(self, session_id: str) -> Session:
        """Get session by ID.

        Raises:
            SessionNotFoundError: Unknown session id
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def get_status(self, session_id: str) -> SessionStatus:
        """Current status snapshot of a session."""
        return self.get_session(session_id).snapshot()

    def list_sessions(self, state: SessionState | None = None) -> list[Session]:
        """All sessions, optionally filtered by state."""
        sessions = list(self._sessions.values())
        if state is not None:
            sessions = [s for s in sessions if s.state is state]
        return sessions

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def load_avatar(self, avatar_id: str) -> AvatarModel:
        """Resolve an avatar through the catalog.

        Raises:
            AvatarResolutionError: Catalog lookup failed
        """
        try:
            return await self._registry.avatar_catalog.resolve(avatar_id)
        except AvatarResolutionError:
            raise
        except AvatarError as e:
            raise AvatarResolutionError(avatar_id, e.message) from e
        except Exception as e:
            raise AvatarResolutionError(avatar_id, str(e)) from e

    async def initialize_stream(self, config: SessionConfig | dict[str, Any]) -> Session:
        """Create a session, resolve its avatar and bind its features.

        Nothing is published; the session stays in INITIALIZING.

        Raises:
            InvalidConfigError: Local validation failed
            SessionLimitError: Too many non-terminal sessions
            AvatarResolutionError: Avatar could not be resolved
        """
        if isinstance(config, dict):
            config = SessionConfig.from_dict(config)
        config.validate()

        session = await self._register(config)
        session_id = session.session_id

        async with session.exclusive():
            operation = session.begin_operation()

        stage = "avatar"
        try:
            avatar = await self.load_avatar(config.avatar_id)

            stage = "provision"
            bindings = self._features.new_bindings(session_id)
            async with session.lock:
                session.avatar = avatar
                session.bindings = bindings
            agent = self._registry.create_agent(avatar, config.voice_profile)
            self._features.attach_agent(bindings, agent)

            transport = self._registry.create_transport(session_id)
            async with session.lock:
                session.transport = transport

            await self._features.bind(bindings, config)
        except Exception as e:
            await self._fail(session, stage, e)
            raise
        finally:
            session.end_operation(operation)

        record_session_initialized()
        session.log.session_initialized(
            {
                "avatar_id": config.avatar_id,
                "features": config.features.enabled(),
            }
        )
        return session

    async def start_stream(self, session_id: str) -> SessionStatus:
        """Publish the session and go live.

        Idempotent while live: returns the current status without a
        second publish. Concurrent starts share one publish.

        Raises:
            SessionNotFoundError: Unknown session id
            SessionTerminatedError: Session already ended or errored
            TransportFailureError: Publish failed; session is now ERROR
        """
        return await self._publish(self.get_session(session_id), operation="start")

    async def resume_stream(self, session_id: str) -> SessionStatus:
        """Re-publish a paused session."""
        return await self._publish(
            self.get_session(session_id), operation="resume", require_paused=True
        )

    async def _publish(
        self,
        session: Session,
        operation: str,
        require_paused: bool = False,
    ) -> SessionStatus:
        async with session.exclusive():
            state = session.state
            if state is SessionState.LIVE:
                return session.snapshot()
            if state.is_terminal:
                raise SessionTerminatedError(session.session_id, state.value)
            if require_paused and state is not SessionState.PAUSED:
                raise InvalidTransitionError(
                    session.session_id, state.value, operation=operation
                )
            session.state_machine.check_transition(SessionState.LIVE)

            features = session.config.features
            request = PublishRequest(
                session_id=session.session_id,
                title=session.config.title,
                visibility=session.config.visibility.value,
                recording=features.recording,
                screen_sharing=features.screen_sharing,
            )
            pending = session.begin_operation()

        try:
            started = time.perf_counter()
            try:
                result = await session.transport.publish(request)
            except Exception as e:
                await self._fail(session, "transport", e)
                if isinstance(e, TransportFailureError):
                    raise
                raise TransportFailureError(str(e), session_id=session.session_id) from e
            latency_s = time.perf_counter() - started

            async with session.lock:
                session.published = True
                session.status.url = result.url
                await session.transition(SessionState.LIVE, f"{operation}_succeeded")
                session.mark_live()
                session.start_ticker(self._telemetry_interval_s)
                status = session.snapshot()
        finally:
            session.end_operation(pending)

        record_session_live(latency_s)
        session.log.session_live(result.url)
        return status

    async def pause_stream(self, session_id: str) -> SessionStatus:
        """Suspend publishing of a live session.

        Idempotent while paused.

        Raises:
            InvalidTransitionError: Session never went live
            TransportFailureError: Unpublish failed; session is now ERROR
        """
        session = self.get_session(session_id)
        async with session.exclusive():
            state = session.state
            if state is SessionState.PAUSED:
                return session.snapshot()
            if state is not SessionState.LIVE:
                session.state_machine.check_transition(SessionState.PAUSED)

            session.stop_ticker()
            session.fold_duration()
            await session.transition(SessionState.PAUSED, "paused_by_caller")
            pending = session.begin_operation()

        record_session_left_live()
        try:
            try:
                await session.transport.unpublish()
            except Exception as e:
                await self._fail(session, "transport", e)
                raise TransportFailureError(str(e), session_id=session_id) from e

            async with session.lock:
                session.published = False
                status = session.snapshot()
        finally:
            session.end_operation(pending)

        session.log.session_paused(status.duration_s)
        return status

    async def stop_stream(self, session_id: str, reason: str = "normal") -> SessionStatus:
        """End a session and release its bindings.

        A no-op on a session that is already ENDED or ERROR.

        Raises:
            SessionNotFoundError: Unknown session id
        """
        session = self.get_session(session_id)
        async with session.exclusive():
            if session.state.is_terminal:
                return session.snapshot()

            was_live = session.state is SessionState.LIVE
            session.stop_ticker()
            session.fold_duration()
            await session.transition(SessionState.ENDED, reason)
            published = session.published
            pending = session.begin_operation()

        try:
            if published:
                try:
                    await session.transport.unpublish()
                except Exception as e:
                    logger.warning(
                        "unpublish_failed",
                        session_id=session_id,
                        error=str(e),
                    )
                session.published = False

            if session.bindings is not None:
                await self._features.release(session.bindings)
        finally:
            session.end_operation(pending)

        if was_live:
            record_session_left_live()
        record_session_end(session_id, reason)
        session.log.session_ended(reason, session.status.duration_s)
        status = session.snapshot()
        self._evict_terminal()
        return status

    async def end_all_sessions(self, reason: str = "shutdown") -> int:
        """Stop every non-terminal session.

        Returns:
            Number of sessions stopped
        """
        async with self._lock:
            targets = [s.session_id for s in self._sessions.values() if not s.state.is_terminal]

        results = await asyncio.gather(
            *(self.stop_stream(session_id, reason) for session_id in targets),
            return_exceptions=True,
        )
        for session_id, result in zip(targets, results):
            if isinstance(result, BaseException):
                logger.error("session_stop_failed", session_id=session_id, error=str(result))
        return len(targets)

    async def _fail(self, session: Session, stage: str, error: BaseException) -> None:
        """Drive a session to ERROR after a structural failure and release it."""
        async with session.lock:
            was_live = session.state is SessionState.LIVE
            session.stop_ticker()
            session.fold_duration()
            if session.state.is_terminal:
                return
            await session.transition(
                SessionState.ERROR, f"{stage}_failed", {"error": str(error)}
            )

        if was_live:
            record_session_left_live()
        record_collaborator_failure(stage)
        record_session_end(session.session_id, "error")
        session.log.session_failed(stage, str(error))

        if session.bindings is not None:
            await self._features.release(session.bindings)

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    async def update_stream_settings(
        self, session_id: str, partial: dict[str, Any]
    ) -> SessionConfig:
        """Merge settings into a session that has not gone live.

        Only title, description, visibility and voice_profile may change.

        Raises:
            InvalidConfigError: Unknown or immutable field, or bad value
            InvalidTransitionError: Session is live or paused
            SessionTerminatedError: Session already ended or errored
        """
        changes = self._coerce_settings(partial)
        session = self.get_session(session_id)

        async with session.exclusive():
            state = session.state
            if state.is_terminal:
                raise SessionTerminatedError(session_id, state.value)
            if state is not SessionState.INITIALIZING:
                raise InvalidTransitionError(
                    session_id, state.value, operation="update settings"
                )

            config = dataclasses.replace(session.config, **changes)
            config.validate()
            session.config = config
            session.touch()

            bindings = session.bindings
            if "voice_profile" in changes and bindings and bindings.synthesizer:
                bindings.synthesizer.set_profile(config.voice_profile)

        session.log.settings_updated(sorted(changes))
        return config

    @staticmethod
    def _coerce_settings(partial: dict[str, Any]) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        for key, value in partial.items():
            if key in ("avatar_id", "features"):
                raise InvalidConfigError(key, value, "cannot be changed after initialization")
            if key not in UPDATABLE_FIELDS:
                raise InvalidConfigError(key, value, "unknown setting")

            if key == "visibility":
                value = coerce_visibility(value)
            elif key == "voice_profile" and isinstance(value, dict):
                value = VoiceProfile.from_dict(value)
            elif key in ("title", "description") and not isinstance(value, str):
                raise InvalidConfigError(key, value, "must be a string")
            changes[key] = value
        return changes

    # -------------------------------------------------------------------------
    # Avatar commands
    # -------------------------------------------------------------------------

    async def update_avatar_expression(self, session_id: str, expression_id: str) -> None:
        """Set the avatar's expression.

        Raises:
            SessionNotLiveError: Session is not live
            FeatureDisabledError: gesture_control is off
        """
        session = self.get_session(session_id)
        async with session.exclusive():
            router = self._live_router(session)
            pending = session.begin_operation()
        try:
            await router.update_expression(expression_id)
        finally:
            session.end_operation(pending)

    async def trigger_avatar_gesture(self, session_id: str, gesture_id: str) -> str:
        """Play a gesture and return its animation name.

        The gesture id is checked before anything else, in every state.

        Raises:
            UnknownGestureError: gesture_id is not in the gesture table
            SessionNotLiveError: Session is not live
            FeatureDisabledError: gesture_control is off
        """
        resolve_gesture(gesture_id)
        session = self.get_session(session_id)
        async with session.exclusive():
            router = self._live_router(session)
            pending = session.begin_operation()
        try:
            return await router.trigger_gesture(gesture_id)
        finally:
            session.end_operation(pending)

    @staticmethod
    def _live_router(session: Session) -> GestureRouter:
        if session.state is not SessionState.LIVE:
            raise SessionNotLiveError(session.session_id, session.state.value)
        bindings = session.bindings
        if bindings is None or bindings.router is None:
            raise FeatureDisabledError(session.session_id, "gesture_control")
        return bindings.router

    async def process_voice_command(self, session_id: str, text: str) -> CommandResult:
        """Interpret free text and dispatch it as an avatar command.

        Never raises: unrecognized text and routing failures come back
        as unsuccessful results.
        """
        command = self._interpreter.interpret(text)
        if command is None:
            result = CommandResult(success=False, action="unknown", error=UNRECOGNIZED_MESSAGE)
        else:
            try:
                if command.kind is CommandKind.GESTURE:
                    animation = await self.trigger_avatar_gesture(session_id, command.target)
                    data = {"gesture": command.target, "animation": animation}
                else:
                    await self.update_avatar_expression(session_id, command.target)
                    data = {"expression": command.target}
                result = CommandResult(success=True, action=command.kind.value, data=data)
            except StudioError as e:
                result = CommandResult(success=False, action="error", error=e.message)
            except Exception as e:
                logger.error("voice_command_failed", session_id=session_id, error=str(e))
                result = CommandResult(success=False, action="error", error=str(e))

        record_voice_command(result.action)
        CommandLogger(session_id).voice_command(result.action, result.success)
        return result

    # -------------------------------------------------------------------------
    # Features
    # -------------------------------------------------------------------------

    async def enable_subtitles(
        self, session_id: str, options: SubtitleOptions | None = None
    ) -> None:
        """Bind a recognizer for subtitles. No-op when already bound.

        Raises:
            SessionNotFoundError: Unknown session id
            SessionTerminatedError: Session already ended or errored
            RecognizerBusyError: Recognizer refused the subscription
        """
        session = self.get_session(session_id)
        async with session.exclusive():
            self._require_active(session)
            bindings = session.bindings
            if bindings.has_subtitles:
                return
            pending = session.begin_operation()

        try:
            try:
                await self._features.bind_subtitles(bindings, options or SubtitleOptions())
            except Exception:
                await self._features.unbind_subtitles(bindings)
                raise

            async with session.lock:
                self._set_feature(session, subtitles=True)
        finally:
            session.end_operation(pending)

    async def disable_subtitles(self, session_id: str) -> None:
        """Stop subtitle recognition. No-op when not bound."""
        session = self.get_session(session_id)
        async with session.exclusive():
            self._require_active(session)
            bindings = session.bindings
            if not bindings.has_subtitles:
                return
            pending = session.begin_operation()

        try:
            await self._features.unbind_subtitles(bindings)
            async with session.lock:
                self._set_feature(session, subtitles=False)
        finally:
            session.end_operation(pending)

    def get_subtitles(self, session_id: str) -> list[SubtitleLine]:
        """Most recent subtitle lines, oldest first."""
        session = self.get_session(session_id)
        if session.bindings is None:
            return []
        return session.bindings.subtitles.lines

    async def speak(self, session_id: str, text: str) -> None:
        """Queue text for the avatar's voice without waiting for audio.

        Raises:
            FeatureDisabledError: voice_synthesis is off
        """
        session = self.get_session(session_id)
        async with session.exclusive():
            self._require_active(session)
            synthesizer = session.bindings.synthesizer
            if synthesizer is None:
                raise FeatureDisabledError(session_id, "voice_synthesis")
            synthesizer.speak(text)

    async def generate_ai_response(self, session_id: str, user_input: str) -> str:
        """Answer a chat message through the configured responder.

        Raises:
            FeatureDisabledError: ai_chat is off
        """
        session = self.get_session(session_id)
        async with session.exclusive():
            self._require_active(session)
            if not session.config.features.ai_chat:
                raise FeatureDisabledError(session_id, "ai_chat")
        return await self._registry.responder(user_input)

    @staticmethod
    def _require_active(session: Session) -> None:
        if session.state.is_terminal:
            raise SessionTerminatedError(session.session_id, session.state.value)

    @staticmethod
    def _set_feature(session: Session, **flags: bool) -> None:
        features = dataclasses.replace(session.config.features, **flags)
        session.config = dataclasses.replace(session.config, features=features)
        session.touch()

    # -------------------------------------------------------------------------
    # Participants
    # -------------------------------------------------------------------------

    async def add_participant(
        self,
        session_id: str,
        name: str,
        role: ParticipantRole = ParticipantRole.VIEWER,
    ) -> Participant:
        """Attach a participant to a session."""
        session = self.get_session(session_id)
        async with session.exclusive():
            self._require_active(session)
            participant = Participant(id=f"participant_{uuid.uuid4().hex[:12]}", name=name, role=role)
            session.participants[participant.id] = participant
            session.touch()
        return participant

    async def remove_participant(self, session_id: str, participant_id: str) -> bool:
        """Detach a participant.

        Returns:
            True if the participant was attached
        """
        session = self.get_session(session_id)
        async with session.exclusive():
            participant = session.participants.pop(participant_id, None)
            if participant is None:
                return False
            participant.is_active = False
            session.touch()
            return True
