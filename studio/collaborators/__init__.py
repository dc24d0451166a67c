"""Collaborators module - External systems the orchestrator drives.

Provides:
- AvatarCatalog: avatar id -> model descriptor
- RealtimeTransport / AvatarAgent: publishing and avatar puppeting
- SpeechRecognizer: subtitle line source
- VoiceSynthesizer: avatar voice
- CollaboratorRegistry: explicit wiring passed to the SessionManager
"""

from studio.collaborators.avatar import (
    AvatarCatalog,
    AvatarModel,
    HttpAvatarCatalog,
    StaticAvatarCatalog,
)
from studio.collaborators.registry import CollaboratorRegistry, build_registry
from studio.collaborators.speech import (
    ManualRecognizer,
    ScriptedRecognizer,
    SpeechRecognizer,
    SubscriptionHandle,
)
from studio.collaborators.synthesis import (
    ElevenLabsBackend,
    SilentBackend,
    VoiceSynthesizer,
)
from studio.collaborators.transport import (
    AvatarAgent,
    PublishRequest,
    PublishResult,
    RealtimeTransport,
    SimulatedAvatarAgent,
    SimulatedTransport,
)

__all__ = [
    # Avatar catalog
    "AvatarCatalog",
    "AvatarModel",
    "HttpAvatarCatalog",
    "StaticAvatarCatalog",
    # Transport
    "AvatarAgent",
    "PublishRequest",
    "PublishResult",
    "RealtimeTransport",
    "SimulatedAvatarAgent",
    "SimulatedTransport",
    # Speech
    "ManualRecognizer",
    "ScriptedRecognizer",
    "SpeechRecognizer",
    "SubscriptionHandle",
    # Synthesis
    "ElevenLabsBackend",
    "SilentBackend",
    "VoiceSynthesizer",
    # Wiring
    "CollaboratorRegistry",
    "build_registry",
]
