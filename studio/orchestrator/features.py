"""Feature Orchestrator - Per-session collaborator wiring.

Binds the collaborators selected by a session's feature flags:
- subtitles: recognizer subscription feeding a SubtitleHistory
- voice_synthesis: VoiceSynthesizer carrying the session's voice profile
- gesture_control: GestureRouter against the avatar agent
- recording / screen_sharing: passed to the transport as capabilities

Every binding registers its release handler as soon as it exists, so a
failed initialization or a stop releases exactly what was bound.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field

from studio.collaborators.registry import CollaboratorRegistry
from studio.collaborators.speech import SpeechRecognizer, SubscriptionHandle
from studio.collaborators.synthesis import VoiceSynthesizer
from studio.collaborators.transport import AvatarAgent
from studio.config.constants import STUDIO
from studio.exceptions import RecognizerBusyError
from studio.observability.logging import FeatureLogger
from studio.observability.metrics import record_subtitle_line
from studio.orchestrator.gestures import GestureRouter
from studio.orchestrator.models import SessionConfig, SubtitleLine, SubtitleOptions
from studio.orchestrator.release import ReleaseController, ReleaseReport

RECOGNIZER = "recognizer"
SYNTHESIZER = "synthesizer"
AVATAR_AGENT = "avatar_agent"


class SubtitleHistory:
    """Most recent subtitle lines, keyed by line id.

    A final line replaces the interim line with the same id in place; a
    later interim line never replaces a final one. Only the newest
    `limit` ids are kept.
    """

    def __init__(self, limit: int = STUDIO.SUBTITLE_HISTORY_LIMIT) -> None:
        self._limit = limit
        self._lines: OrderedDict[str, SubtitleLine] = OrderedDict()

    def ingest(self, line: SubtitleLine) -> None:
        record_subtitle_line(line.is_interim)

        existing = self._lines.get(line.id)
        if existing is not None:
            if line.is_interim and not existing.is_interim:
                return
            self._lines[line.id] = line
            return

        self._lines[line.id] = line
        while len(self._lines) > self._limit:
            self._lines.popitem(last=False)

    @property
    def lines(self) -> list[SubtitleLine]:
        """Lines oldest first."""
        return list(self._lines.values())

    def clear(self) -> None:
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)


@dataclass
class FeatureBindings:
    """Collaborators currently bound to one session."""

    session_id: str
    release: ReleaseController
    agent: AvatarAgent | None = None
    recognizer: SpeechRecognizer | None = None
    subscription: SubscriptionHandle | None = None
    synthesizer: VoiceSynthesizer | None = None
    router: GestureRouter | None = None
    subtitles: SubtitleHistory = field(default_factory=SubtitleHistory)

    @property
    def has_subtitles(self) -> bool:
        return self.subscription is not None and self.subscription.active


class FeatureOrchestrator:
    """Binds and releases feature collaborators.

    Usage:
        orchestrator = FeatureOrchestrator(registry)
        bindings = orchestrator.new_bindings(session_id)
        orchestrator.attach_agent(bindings, agent)
        await orchestrator.bind(bindings, config)
        ...
        await orchestrator.release(bindings)
    """

    def __init__(
        self,
        registry: CollaboratorRegistry,
        release_timeout_s: float = STUDIO.RELEASE_TIMEOUT_S,
    ) -> None:
        self._registry = registry
        self._release_timeout_s = release_timeout_s

    def new_bindings(self, session_id: str) -> FeatureBindings:
        """Empty bindings with their own release controller."""
        return FeatureBindings(
            session_id=session_id,
            release=ReleaseController(session_id, timeout_s=self._release_timeout_s),
        )

    def attach_agent(self, bindings: FeatureBindings, agent: AvatarAgent) -> None:
        """Take ownership of the avatar agent and register its release."""
        bindings.agent = agent
        bindings.release.register(AVATAR_AGENT, agent.release)
        FeatureLogger(bindings.session_id).bound(AVATAR_AGENT)

    async def bind(
        self,
        bindings: FeatureBindings,
        config: SessionConfig,
        agent: AvatarAgent | None = None,
    ) -> None:
        """Bind every collaborator the feature flags select.

        The agent is attached here unless attach_agent() already did.
        Raises whatever a collaborator raises; bindings made before the
        failure stay registered for release.
        """
        log = FeatureLogger(bindings.session_id)
        features = config.features

        if agent is not None:
            self.attach_agent(bindings, agent)
        agent = bindings.agent
        if agent is None:
            raise ValueError("bind() needs an avatar agent")

        if features.voice_synthesis:
            synthesizer = self._registry.create_synthesizer(
                bindings.session_id, config.voice_profile
            )
            bindings.synthesizer = synthesizer
            bindings.release.register(SYNTHESIZER, synthesizer.close)
            log.bound(SYNTHESIZER)

        if features.gesture_control:
            bindings.router = GestureRouter(bindings.session_id, agent)
            log.bound("gesture_router")

        if features.subtitles:
            await self.bind_subtitles(bindings, SubtitleOptions())

    async def bind_subtitles(
        self, bindings: FeatureBindings, options: SubtitleOptions
    ) -> None:
        """Subscribe a recognizer to the session's subtitle history.

        Raises:
            RecognizerBusyError: The recognizer already has a subscriber
        """
        recognizer = self._registry.create_recognizer(bindings.session_id)
        bindings.release.register(RECOGNIZER, recognizer.stop)

        try:
            subscription = await recognizer.start(bindings.subtitles.ingest, options)
        except RecognizerBusyError:
            # The active subscriber belongs to someone else
            bindings.release.unregister(RECOGNIZER)
            raise

        bindings.recognizer = recognizer
        bindings.subscription = subscription
        FeatureLogger(bindings.session_id).bound(RECOGNIZER)

    async def unbind_subtitles(self, bindings: FeatureBindings) -> None:
        """Cancel the subtitle subscription and stop the recognizer."""
        if bindings.subscription is not None:
            bindings.subscription.cancel()
        await bindings.release.release_one(RECOGNIZER)
        bindings.subscription = None
        bindings.recognizer = None

    async def release(self, bindings: FeatureBindings) -> ReleaseReport:
        """Release every binding concurrently."""
        if bindings.subscription is not None:
            bindings.subscription.cancel()
        report = await bindings.release.release()
        bindings.router = None
        return report
