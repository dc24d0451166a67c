"""Gesture / Expression Router - Avatar puppet commands.

Gestures are short-lived animations from a fixed table; expressions are
persistent and forwarded as-is. Commands are handed to the avatar agent
and never wait for playback.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from studio.collaborators.transport import AvatarAgent
from studio.exceptions import AgentCommandError, UnknownGestureError
from studio.observability.logging import CommandLogger
from studio.observability.metrics import record_expression, record_gesture

GESTURE_ANIMATIONS: Mapping[str, str] = MappingProxyType(
    {
        "wave": "greeting",
        "thumbs-up": "approval",
        "heart": "love",
        "excited": "enthusiasm",
        "smile": "joy",
    }
)


def resolve_gesture(gesture_id: str) -> str:
    """Map a gesture id to its animation.

    Raises:
        UnknownGestureError: gesture_id is not in the table
    """
    try:
        return GESTURE_ANIMATIONS[gesture_id]
    except KeyError:
        raise UnknownGestureError(gesture_id, sorted(GESTURE_ANIMATIONS)) from None


class GestureRouter:
    """Routes expression and gesture commands to one avatar agent.

    State checks belong to the session manager; the router only resolves
    and dispatches.
    """

    def __init__(self, session_id: str, agent: AvatarAgent) -> None:
        self._session_id = session_id
        self._agent = agent
        self._log = CommandLogger(session_id)
        self._current_expression: str | None = None

    @property
    def current_expression(self) -> str | None:
        """Last expression dispatched."""
        return self._current_expression

    async def update_expression(self, expression_id: str) -> None:
        try:
            await self._agent.update_expression(expression_id)
        except Exception as e:
            raise AgentCommandError("expression", str(e), self._session_id) from e
        self._current_expression = expression_id
        self._log.expression(expression_id)
        record_expression()

    async def trigger_gesture(self, gesture_id: str) -> str:
        """Dispatch a gesture and return the animation played.

        Raises:
            UnknownGestureError: gesture_id is not in the table
            AgentCommandError: The avatar agent failed
        """
        animation = resolve_gesture(gesture_id)
        try:
            await self._agent.trigger_gesture(animation)
        except Exception as e:
            raise AgentCommandError("gesture", str(e), self._session_id) from e
        self._log.gesture(gesture_id, animation)
        record_gesture(gesture_id)
        return animation
