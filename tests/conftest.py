"""Pytest configuration and shared fixtures."""

import os
import random
from typing import Generator

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing settings
os.environ.update({
    "ENVIRONMENT": "development",
    "MAX_CONCURRENT_SESSIONS": "5",
    "AUTH_ENABLED": "false",
    "AVATAR_CATALOG": "static",
    "RECOGNIZER_ENGINE": "manual",
    "SYNTHESIS_ENGINE": "silent",
})

from studio.collaborators.avatar import AvatarModel, StaticAvatarCatalog  # noqa: E402
from studio.collaborators.registry import CollaboratorRegistry  # noqa: E402
from studio.collaborators.speech import ManualRecognizer  # noqa: E402
from studio.collaborators.synthesis import SilentBackend, VoiceSynthesizer  # noqa: E402
from studio.collaborators.transport import SimulatedAvatarAgent, SimulatedTransport  # noqa: E402
from studio.orchestrator.models import FeatureFlags, SessionConfig, VoiceProfile  # noqa: E402
from studio.orchestrator.session import SessionManager  # noqa: E402
from studio.orchestrator.telemetry import RandomWalkMetrics  # noqa: E402


class FakeCollaborators:
    """Simulated collaborators that remember what they created."""

    def __init__(self, publish_delay_s: float = 0.0) -> None:
        self.publish_delay_s = publish_delay_s
        self.transports: dict[str, SimulatedTransport] = {}
        self.recognizers: dict[str, ManualRecognizer] = {}
        self.synthesizers: dict[str, VoiceSynthesizer] = {}
        self.agents: list[SimulatedAvatarAgent] = []

    def transport(self, session_id: str) -> SimulatedTransport:
        transport = SimulatedTransport(session_id, publish_delay_s=self.publish_delay_s)
        self.transports[session_id] = transport
        return transport

    def agent(self, avatar: AvatarModel, profile: VoiceProfile) -> SimulatedAvatarAgent:
        agent = SimulatedAvatarAgent(avatar=avatar, voice_id=profile.voice_id)
        self.agents.append(agent)
        return agent

    def recognizer(self, session_id: str) -> ManualRecognizer:
        recognizer = ManualRecognizer()
        self.recognizers[session_id] = recognizer
        return recognizer

    def synthesizer(self, session_id: str, profile: VoiceProfile) -> VoiceSynthesizer:
        synthesizer = VoiceSynthesizer(session_id, primary=SilentBackend(), profile=profile)
        self.synthesizers[session_id] = synthesizer
        return synthesizer

    def registry(self, **overrides) -> CollaboratorRegistry:
        factories = dict(
            avatar_catalog=StaticAvatarCatalog(),
            transport_factory=self.transport,
            agent_factory=self.agent,
            recognizer_factory=self.recognizer,
            synthesizer_factory=self.synthesizer,
            metrics_factory=lambda session_id: RandomWalkMetrics(random.Random(7)),
        )
        factories.update(overrides)
        return CollaboratorRegistry(**factories)


def make_config(avatar_id: str = "professional-female", **features: bool) -> SessionConfig:
    """Session config with the given feature overrides."""
    return SessionConfig(
        avatar_id=avatar_id,
        title="Quantum Physics 101",
        description="Wave-particle duality",
        features=FeatureFlags(**features),
    )


@pytest.fixture
def collaborators() -> FakeCollaborators:
    """Provide recording collaborators."""
    return FakeCollaborators()


@pytest.fixture
def manager(collaborators: FakeCollaborators) -> SessionManager:
    """Session manager whose telemetry never ticks on its own."""
    return SessionManager(
        registry=collaborators.registry(),
        max_sessions=5,
        telemetry_interval_s=3600.0,
        release_timeout_s=1.0,
    )


@pytest.fixture
def config() -> SessionConfig:
    """Default session config."""
    return make_config()


@pytest.fixture
def test_settings():
    """Provide test settings instance."""
    from studio.config.settings import Settings

    return Settings(
        _env_file=None,
        environment="development",
        max_concurrent_sessions=5,
        auth_enabled=False,
        recognizer_engine="manual",
        synthesis_engine="silent",
        telemetry_interval_s=60.0,
    )


@pytest.fixture
def client(test_settings) -> Generator[TestClient, None, None]:
    """Provide FastAPI test client."""
    from studio.main import create_app

    app = create_app(settings=test_settings)
    with TestClient(app) as c:
        yield c
