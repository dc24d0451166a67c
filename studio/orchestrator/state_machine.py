"""Session State Machine - Broadcast lifecycle FSM.

States:
- INITIALIZING: Collaborators bound, nothing published yet
- LIVE: Transport publishing, telemetry running
- PAUSED: Publish suspended, session resumable
- ENDED: Stopped by the caller (terminal)
- ERROR: Unrecoverable collaborator failure (terminal)

Terminal states accept no further transitions.
"""

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

from studio.config.constants import STUDIO
from studio.exceptions import InvalidTransitionError, SessionTerminatedError
from studio.observability.logging import get_logger

logger = get_logger(__name__)


class SessionState(Enum):
    """Broadcast session lifecycle state."""

    INITIALIZING = "initializing"
    LIVE = "live"
    PAUSED = "paused"
    ENDED = "ended"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transitions are accepted."""
        return self in TERMINAL_STATES


TERMINAL_STATES: frozenset[SessionState] = frozenset({SessionState.ENDED, SessionState.ERROR})

# Valid state transitions
VALID_TRANSITIONS: dict[SessionState, set[SessionState]] = {
    SessionState.INITIALIZING: {SessionState.LIVE, SessionState.ENDED, SessionState.ERROR},
    SessionState.LIVE: {SessionState.PAUSED, SessionState.ENDED, SessionState.ERROR},
    SessionState.PAUSED: {SessionState.LIVE, SessionState.ENDED, SessionState.ERROR},
    SessionState.ENDED: set(),
    SessionState.ERROR: set(),
}


@dataclass
class StateTransition:
    """Record of a state transition."""

    old_state: SessionState
    new_state: SessionState
    at: datetime
    reason: str
    metadata: dict = field(default_factory=dict)


StateChangeCallback = Callable[[StateTransition], None]
AsyncStateChangeCallback = Callable[[StateTransition], asyncio.Future]


class SessionStateMachine:
    """Lifecycle FSM for one broadcast session.

    The state machine itself is not locked; callers apply transitions
    while holding the owning session's lock.

    Usage:
        fsm = SessionStateMachine(session_id="session-123")
        fsm.on_state_change(handle_state_change)

        await fsm.transition_to(SessionState.LIVE, "publish_succeeded")
    """

    def __init__(self, session_id: str) -> None:
        self._session_id = session_id
        self._state = SessionState.INITIALIZING
        self._entered_at = time.monotonic()

        self._on_change_callbacks: list[StateChangeCallback | AsyncStateChangeCallback] = []

        self._history: list[StateTransition] = []
        self._max_history = STUDIO.STATE_HISTORY_LIMIT

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def session_id(self) -> str:
        """Session identifier."""
        return self._session_id

    @property
    def is_terminal(self) -> bool:
        """Whether the session reached ENDED or ERROR."""
        return self._state.is_terminal

    def on_state_change(
        self, callback: StateChangeCallback | AsyncStateChangeCallback
    ) -> None:
        """Register callback for any state change."""
        self._on_change_callbacks.append(callback)

    def can_transition(self, new_state: SessionState) -> bool:
        """Whether new_state is reachable from the current state."""
        return new_state in VALID_TRANSITIONS[self._state]

    def check_transition(self, new_state: SessionState) -> None:
        """Raise if new_state is not reachable from the current state.

        Raises:
            SessionTerminatedError: Current state is terminal
            InvalidTransitionError: Transition not in VALID_TRANSITIONS
        """
        if self._state.is_terminal:
            raise SessionTerminatedError(self._session_id, self._state.value)
        if not self.can_transition(new_state):
            raise InvalidTransitionError(
                self._session_id, self._state.value, new_state.value
            )

    async def transition_to(
        self,
        new_state: SessionState,
        reason: str = "",
        metadata: dict | None = None,
    ) -> StateTransition:
        """Transition to a new state.

        Args:
            new_state: Target state
            reason: Reason for transition
            metadata: Additional context

        Returns:
            The applied StateTransition

        Raises:
            SessionTerminatedError: Current state is terminal
            InvalidTransitionError: Transition is not allowed
        """
        self.check_transition(new_state)

        transition = StateTransition(
            old_state=self._state,
            new_state=new_state,
            at=datetime.now().astimezone(),
            reason=reason,
            metadata=metadata or {},
        )

        self._state = new_state
        self._entered_at = time.monotonic()

        await self._call_callbacks(self._on_change_callbacks, transition)

        self._history.append(transition)
        if len(self._history) > self._max_history:
            self._history.pop(0)

        return transition

    async def _call_callbacks(
        self,
        callbacks: list[Callable],
        transition: StateTransition,
    ) -> None:
        """Call list of callbacks with transition."""
        for callback in callbacks:
            try:
                if inspect.iscoroutinefunction(callback):
                    await callback(transition)
                else:
                    callback(transition)
            except Exception as e:
                # Observers never block a committed transition
                logger.warning(
                    "state_callback_error",
                    session_id=self._session_id,
                    callback=getattr(callback, "__name__", str(callback)),
                    error=str(e),
                )

    @property
    def history(self) -> list[StateTransition]:
        """Transition history (most recent last)."""
        return self._history.copy()

    def get_state_duration_s(self) -> float:
        """Seconds spent in the current state."""
        return time.monotonic() - self._entered_at
