"""Realtime Transport - Broadcast publishing and the avatar agent.

The transport owns the audio/video connection and the livestream
publish/unpublish operation. The avatar agent is the remote puppet that
receives expression and gesture commands. Both are external
collaborators; the simulated implementations here stand in for a real
media SDK behind the same interfaces.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Protocol

from studio.collaborators.avatar import AvatarModel
from studio.exceptions import TransportFailureError
from studio.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PublishRequest:
    """What the transport needs to go live."""

    session_id: str
    title: str
    visibility: str
    recording: bool = False
    screen_sharing: bool = False


@dataclass(frozen=True)
class PublishResult:
    """Transport answer to a successful publish."""

    url: str
    stream_id: str = ""


class RealtimeTransport(Protocol):
    """Protocol for realtime broadcast transports.

    Usage:
        transport = registry.create_transport(session_id)
        result = await transport.publish(request)
        ...
        await transport.unpublish()
    """

    async def publish(self, request: PublishRequest) -> PublishResult:
        """Start publishing the livestream.

        Raises:
            TransportFailureError: Publish could not be established
        """
        ...

    async def unpublish(self) -> None:
        """Stop publishing."""
        ...


class AvatarAgent(Protocol):
    """Protocol for the avatar puppet attached to a session.

    Commands are accepted and queued; they never wait for playback.
    """

    async def update_expression(self, expression: str) -> None:
        """Set a persistent expression."""
        ...

    async def trigger_gesture(self, animation: str) -> None:
        """Play a short-lived animation."""
        ...

    async def release(self) -> None:
        """Detach from the avatar."""
        ...


class SimulatedTransport:
    """In-process transport that hands out predictable URLs."""

    def __init__(
        self,
        session_id: str,
        base_url: str = "https://stream.local/live",
        publish_delay_s: float = 0.0,
    ) -> None:
        self._session_id = session_id
        self._base_url = base_url.rstrip("/")
        self._publish_delay_s = publish_delay_s
        self._published = False
        self.publish_calls = 0
        self.unpublish_calls = 0
        self.fail_next_publish: str | None = None

    @property
    def is_published(self) -> bool:
        """Whether the stream is currently published."""
        return self._published

    async def publish(self, request: PublishRequest) -> PublishResult:
        self.publish_calls += 1
        if self._publish_delay_s:
            await asyncio.sleep(self._publish_delay_s)

        if self.fail_next_publish is not None:
            reason, self.fail_next_publish = self.fail_next_publish, None
            raise TransportFailureError(reason, session_id=request.session_id)

        self._published = True
        url = f"{self._base_url}/{request.session_id}"
        logger.info(
            "transport_published",
            session_id=request.session_id,
            url=url,
            recording=request.recording,
            screen_sharing=request.screen_sharing,
        )
        return PublishResult(url=url, stream_id=f"stream-{request.session_id}")

    async def unpublish(self) -> None:
        self.unpublish_calls += 1
        self._published = False
        logger.info("transport_unpublished", session_id=self._session_id)


@dataclass
class SimulatedAvatarAgent:
    """Avatar agent that records the commands it receives."""

    avatar: AvatarModel
    voice_id: str = ""
    expressions: list[str] = field(default_factory=list)
    gestures: list[str] = field(default_factory=list)
    released: bool = False

    async def update_expression(self, expression: str) -> None:
        self.expressions.append(expression)
        logger.debug("agent_expression", avatar_id=self.avatar.id, expression=expression)

    async def trigger_gesture(self, animation: str) -> None:
        self.gestures.append(animation)
        logger.debug("agent_gesture", avatar_id=self.avatar.id, animation=animation)

    async def release(self) -> None:
        self.released = True
