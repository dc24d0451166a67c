"""Application Settings - Environment-based configuration.

Uses Pydantic Settings for validation and type coercion.

Conditional variables are required only when the backend that needs
them is selected.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from studio.config.constants import STUDIO


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API bind host")
    api_port: int = Field(default=8090, ge=1024, le=65535, description="API port")
    log_level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment name"
    )

    # Authentication
    api_key: str | None = Field(
        default=None, description="API key required in the X-API-Key header"
    )
    auth_enabled: bool = Field(default=True, description="Enforce API key checks")

    # Session Configuration
    max_concurrent_sessions: int = Field(
        default=10,
        ge=1,
        le=STUDIO.MAX_CONCURRENT_SESSIONS,
        description="Maximum non-terminal sessions per process",
    )
    telemetry_interval_s: float = Field(
        default=STUDIO.TELEMETRY_INTERVAL_S,
        gt=0,
        le=60,
        description="Seconds between telemetry ticks while live",
    )
    release_timeout_s: float = Field(
        default=STUDIO.RELEASE_TIMEOUT_S,
        gt=0,
        le=60,
        description="Budget for releasing collaborator bindings on stop",
    )
    retained_terminal_sessions: int = Field(
        default=STUDIO.RETAINED_TERMINAL_SESSIONS,
        ge=0,
        description="Ended or errored sessions kept for status lookups",
    )

    # Realtime transport
    stream_publish_base_url: str = Field(
        default="https://stream.local/live",
        description="Base URL handed out by the simulated transport",
    )

    # Avatar catalog
    avatar_catalog: Literal["static", "http"] = Field(
        default="static", description="Avatar catalog backend"
    )
    avatar_catalog_url: str = Field(
        default="https://models.readyplayer.me/v1",
        description="Avatar catalog HTTP base URL",
    )
    avatar_api_key: str | None = Field(
        default=None, description="Avatar catalog API key"
    )

    # Speech recognition
    recognizer_engine: Literal["scripted", "manual"] = Field(
        default="scripted", description="Speech recognizer used for subtitles"
    )

    # Voice synthesis
    synthesis_engine: Literal["elevenlabs", "silent"] = Field(
        default="silent", description="Primary voice synthesis backend"
    )
    elevenlabs_api_key: str | None = Field(
        default=None, description="ElevenLabs API key"
    )
    elevenlabs_base_url: str = Field(
        default="https://api.elevenlabs.io/v1",
        description="ElevenLabs API base URL",
    )
    elevenlabs_model_id: str = Field(
        default="eleven_multilingual_v2", description="ElevenLabs model id"
    )

    # Observability
    metrics_enabled: bool = Field(default=True, description="Enable Prometheus metrics")

    def model_post_init(self, __context) -> None:
        """Validate conditional requirements after model creation."""
        if self.environment == "production" and self.auth_enabled and not self.api_key:
            raise ValueError("api_key is required in production when auth_enabled=true")
        if self.synthesis_engine == "elevenlabs" and not self.elevenlabs_api_key:
            raise ValueError(
                "elevenlabs_api_key is required when synthesis_engine=elevenlabs"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
