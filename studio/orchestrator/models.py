"""Session Data Model - Configuration, status and transient records.

SessionConfig and its parts are validated locally before any
collaborator is contacted; validation failures raise InvalidConfigError.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from studio.config.constants import STUDIO
from studio.exceptions import InvalidConfigError
from studio.orchestrator.state_machine import SessionState


def utc_now() -> datetime:
    """Current UTC time."""
    return datetime.now(timezone.utc)


class Visibility(Enum):
    """Who can find and watch a broadcast."""

    PUBLIC = "public"
    PRIVATE = "private"
    UNLISTED = "unlisted"


class VoiceProvider(Enum):
    """Voice synthesis provider tag."""

    ELEVENLABS = "elevenlabs"
    BROWSER = "browser"
    AZURE = "azure"


class ParticipantRole(Enum):
    """Participant role within a broadcast."""

    HOST = "host"
    MODERATOR = "moderator"
    VIEWER = "viewer"


@dataclass(frozen=True)
class FeatureFlags:
    """Per-session feature switches, read at initialization."""

    subtitles: bool = True
    ai_chat: bool = False
    gesture_control: bool = True
    voice_synthesis: bool = True
    screen_sharing: bool = False
    recording: bool = False

    def enabled(self) -> list[str]:
        """Names of enabled features."""
        return [f.name for f in fields(self) if getattr(self, f.name)]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeatureFlags":
        """Create from dictionary, rejecting unknown flags."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfigError("features", sorted(unknown), "unknown feature flag")
        for name, value in data.items():
            if not isinstance(value, bool):
                raise InvalidConfigError(f"features.{name}", value, "must be true or false")
        return cls(**data)


@dataclass(frozen=True)
class VoiceSettings:
    """Delivery parameters of a synthesized voice.

    stability and clarity are fractions in [0, 1]; speed and pitch are
    positive multipliers.
    """

    stability: float = 0.5
    clarity: float = 0.75
    speed: float = 1.0
    pitch: float = 1.0

    def validate(self) -> None:
        """Raise InvalidConfigError if any value is out of range."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidConfigError(
                    f"voice_profile.settings.{f.name}", value, "must be a number"
                )
            if not math.isfinite(value):
                raise InvalidConfigError(
                    f"voice_profile.settings.{f.name}", value, "must be finite"
                )
        for name in ("stability", "clarity"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidConfigError(
                    f"voice_profile.settings.{name}", value, "must be within [0, 1]"
                )
        for name in ("speed", "pitch"):
            value = getattr(self, name)
            if value <= 0.0:
                raise InvalidConfigError(
                    f"voice_profile.settings.{name}", value, "must be a positive multiplier"
                )


@dataclass(frozen=True)
class VoiceProfile:
    """Voice identity and delivery used for synthesis."""

    voice_id: str = "Aria"
    provider: VoiceProvider = VoiceProvider.ELEVENLABS
    settings: VoiceSettings = field(default_factory=VoiceSettings)

    def validate(self) -> None:
        """Raise InvalidConfigError on an unusable profile."""
        if not self.voice_id:
            raise InvalidConfigError("voice_profile.voice_id", self.voice_id, "must not be empty")
        if not isinstance(self.provider, VoiceProvider):
            raise InvalidConfigError(
                "voice_profile.provider", self.provider, "unknown provider"
            )
        self.settings.validate()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "voice_id": self.voice_id,
            "provider": self.provider.value,
            "settings": asdict(self.settings),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VoiceProfile":
        """Create from dictionary."""
        provider = data.get("provider", VoiceProvider.ELEVENLABS.value)
        try:
            provider = VoiceProvider(provider)
        except ValueError:
            raise InvalidConfigError("voice_profile.provider", provider, "unknown provider")
        try:
            settings = VoiceSettings(**data.get("settings", {}))
        except TypeError as e:
            raise InvalidConfigError("voice_profile.settings", data.get("settings"), str(e))
        return cls(
            voice_id=data.get("voice_id", "Aria"),
            provider=provider,
            settings=settings,
        )


@dataclass(frozen=True)
class SessionConfig:
    """Broadcast configuration supplied at initialization."""

    avatar_id: str
    title: str = ""
    description: str = ""
    visibility: Visibility = Visibility.PUBLIC
    voice_profile: VoiceProfile = field(default_factory=VoiceProfile)
    features: FeatureFlags = field(default_factory=FeatureFlags)

    def validate(self) -> None:
        """Raise InvalidConfigError if the config cannot start a session."""
        if not isinstance(self.avatar_id, str) or not self.avatar_id.strip():
            raise InvalidConfigError("avatar_id", self.avatar_id, "must not be empty")
        if not isinstance(self.visibility, Visibility):
            raise InvalidConfigError(
                "visibility",
                self.visibility,
                "must be one of public, private, unlisted",
            )
        self.voice_profile.validate()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "avatar_id": self.avatar_id,
            "title": self.title,
            "description": self.description,
            "visibility": self.visibility.value,
            "voice_profile": self.voice_profile.to_dict(),
            "features": asdict(self.features),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionConfig":
        """Create from dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                raise InvalidConfigError(key, data[key], "unknown setting")

        voice_profile = data.get("voice_profile") or VoiceProfile()
        if isinstance(voice_profile, dict):
            voice_profile = VoiceProfile.from_dict(voice_profile)

        features = data.get("features") or FeatureFlags()
        if isinstance(features, dict):
            features = FeatureFlags.from_dict(features)

        return cls(
            avatar_id=data.get("avatar_id", ""),
            title=data.get("title", ""),
            description=data.get("description", ""),
            visibility=coerce_visibility(data.get("visibility", Visibility.PUBLIC)),
            voice_profile=voice_profile,
            features=features,
        )


# Fields update_stream_settings may change before a session goes live
UPDATABLE_FIELDS = frozenset({"title", "description", "visibility", "voice_profile"})


def coerce_visibility(value: Any) -> Visibility:
    """Accept a Visibility or its string value."""
    if isinstance(value, Visibility):
        return value
    try:
        return Visibility(value)
    except ValueError:
        raise InvalidConfigError(
            "visibility", value, "must be one of public, private, unlisted"
        )


@dataclass(frozen=True)
class StreamQuality:
    """Broadcast encoding descriptor."""

    resolution: str = STUDIO.DEFAULT_RESOLUTION
    bitrate: int = STUDIO.DEFAULT_BITRATE_KBPS
    fps: int = STUDIO.DEFAULT_FPS
    latency: int = STUDIO.DEFAULT_LATENCY_MS


@dataclass
class SessionStatus:
    """Mutable runtime status of a session."""

    state: SessionState = SessionState.INITIALIZING
    viewer_count: int = 0
    duration_s: float = 0.0
    quality: StreamQuality = field(default_factory=StreamQuality)
    connection_quality: int = STUDIO.QUALITY_INITIAL
    url: str | None = None

    def snapshot(self) -> "SessionStatus":
        """Copy safe to hand to callers."""
        return SessionStatus(
            state=self.state,
            viewer_count=self.viewer_count,
            duration_s=self.duration_s,
            quality=self.quality,
            connection_quality=self.connection_quality,
            url=self.url,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["state"] = self.state.value
        return data


@dataclass
class Participant:
    """A person attached to a broadcast."""

    id: str
    name: str
    role: ParticipantRole = ParticipantRole.VIEWER
    joined_at: datetime = field(default_factory=utc_now)
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "joined_at": self.joined_at.isoformat(),
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class SubtitleLine:
    """One transcript unit from a speech recognizer."""

    id: str
    text: str
    timestamp: float
    confidence: float = 0.8
    is_interim: bool = False


@dataclass(frozen=True)
class SubtitleOptions:
    """Recognizer options for subtitles."""

    language: str = "en-US"
    provider: str = "browser"  # browser, whisper, azure
    real_time: bool = True
    confidence: float = 0.8


@dataclass
class CommandResult:
    """Outcome of a voice command."""

    success: bool
    action: str
    data: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "success": self.success,
            "action": self.action,
            "data": self.data,
            "error": self.error,
        }
