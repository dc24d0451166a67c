"""Collaborator Registry - Explicit wiring of external collaborators.

Built once at startup from Settings and handed to the SessionManager.
Every per-session collaborator is created through a factory here, so
tests swap any of them without patching module state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable

from studio.collaborators.avatar import (
    AvatarCatalog,
    AvatarModel,
    HttpAvatarCatalog,
    StaticAvatarCatalog,
)
from studio.collaborators.speech import ManualRecognizer, ScriptedRecognizer, SpeechRecognizer
from studio.collaborators.synthesis import (
    ElevenLabsBackend,
    SilentBackend,
    SynthesisBackend,
    VoiceSynthesizer,
)
from studio.collaborators.transport import (
    AvatarAgent,
    RealtimeTransport,
    SimulatedAvatarAgent,
    SimulatedTransport,
)
from studio.config.settings import Settings
from studio.observability.logging import get_logger
from studio.orchestrator.models import VoiceProfile
from studio.orchestrator.telemetry import MetricsSource, RandomWalkMetrics

logger = get_logger(__name__)

TransportFactory = Callable[[str], RealtimeTransport]
AgentFactory = Callable[[AvatarModel, VoiceProfile], AvatarAgent]
RecognizerFactory = Callable[[str], SpeechRecognizer]
SynthesizerFactory = Callable[[str, VoiceProfile], VoiceSynthesizer]
MetricsFactory = Callable[[str], MetricsSource]
Responder = Callable[[str], Awaitable[str]]


async def echo_responder(user_input: str) -> str:
    """Placeholder AI chat responder."""
    return f"AI response to: {user_input}"


def _silent_synthesizer(session_id: str, profile: VoiceProfile) -> VoiceSynthesizer:
    return VoiceSynthesizer(session_id, primary=SilentBackend(), profile=profile)


def _simulated_agent(avatar: AvatarModel, profile: VoiceProfile) -> AvatarAgent:
    return SimulatedAvatarAgent(avatar=avatar, voice_id=profile.voice_id)


@dataclass
class CollaboratorRegistry:
    """Catalog plus per-session collaborator factories."""

    avatar_catalog: AvatarCatalog = field(default_factory=StaticAvatarCatalog)
    transport_factory: TransportFactory = SimulatedTransport
    agent_factory: AgentFactory = _simulated_agent
    recognizer_factory: RecognizerFactory = lambda session_id: ManualRecognizer()
    synthesizer_factory: SynthesizerFactory = _silent_synthesizer
    metrics_factory: MetricsFactory = lambda session_id: RandomWalkMetrics()
    responder: Responder = echo_responder

    def create_transport(self, session_id: str) -> RealtimeTransport:
        return self.transport_factory(session_id)

    def create_agent(self, avatar: AvatarModel, profile: VoiceProfile) -> AvatarAgent:
        return self.agent_factory(avatar, profile)

    def create_recognizer(self, session_id: str) -> SpeechRecognizer:
        return self.recognizer_factory(session_id)

    def create_synthesizer(self, session_id: str, profile: VoiceProfile) -> VoiceSynthesizer:
        return self.synthesizer_factory(session_id, profile)

    def create_metrics(self, session_id: str) -> MetricsSource:
        return self.metrics_factory(session_id)


def _synthesis_backend(settings: Settings) -> SynthesisBackend:
    if settings.synthesis_engine == "elevenlabs":
        return ElevenLabsBackend(
            api_key=settings.elevenlabs_api_key,
            base_url=settings.elevenlabs_base_url,
            model_id=settings.elevenlabs_model_id,
        )
    return SilentBackend()


def build_registry(settings: Settings) -> CollaboratorRegistry:
    """Create the collaborator registry selected by settings.

    Args:
        settings: Application settings

    Returns:
        Registry for a SessionManager
    """
    if settings.avatar_catalog == "http":
        catalog: AvatarCatalog = HttpAvatarCatalog(
            base_url=settings.avatar_catalog_url,
            api_key=settings.avatar_api_key,
        )
    else:
        catalog = StaticAvatarCatalog()

    if settings.recognizer_engine == "scripted":
        recognizer_factory: RecognizerFactory = lambda session_id: ScriptedRecognizer()
    else:
        recognizer_factory = lambda session_id: ManualRecognizer()

    def transport_factory(session_id: str) -> RealtimeTransport:
        return SimulatedTransport(session_id, base_url=settings.stream_publish_base_url)

    def synthesizer_factory(session_id: str, profile: VoiceProfile) -> VoiceSynthesizer:
        return VoiceSynthesizer(
            session_id, primary=_synthesis_backend(settings), profile=profile
        )

    logger.info(
        "collaborators_configured",
        avatar_catalog=settings.avatar_catalog,
        recognizer=settings.recognizer_engine,
        synthesis=settings.synthesis_engine,
    )

    return CollaboratorRegistry(
        avatar_catalog=catalog,
        transport_factory=transport_factory,
        recognizer_factory=recognizer_factory,
        synthesizer_factory=synthesizer_factory,
    )
