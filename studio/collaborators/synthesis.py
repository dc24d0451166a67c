"""Voice Synthesis - Text-to-speech for the avatar's voice.

Backend selection is done via configuration only. The VoiceSynthesizer
bound to a session is blind to which backend is used: a failing primary
request is logged and served by the fallback backend, never surfaced to
the session.

Usage:
    synthesizer = VoiceSynthesizer(
        session_id,
        primary=ElevenLabsBackend(api_key="..."),
        profile=config.voice_profile,
    )
    synthesizer.speak("Welcome back")  # fire-and-forget

    await synthesizer.close()
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass

import httpx

from studio.config.constants import STUDIO
from studio.exceptions import SynthesisBackendError
from studio.observability.logging import get_logger
from studio.observability.metrics import record_synthesis_fallback
from studio.orchestrator.models import VoiceProfile

logger = get_logger(__name__)


@dataclass
class SynthesisResult:
    """Audio produced for one utterance."""

    text: str
    audio: bytes
    backend: str
    voice_id: str


class SynthesisBackend(ABC):
    """Canonical interface for synthesis backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name identifier."""
        ...

    @abstractmethod
    async def synthesize(self, text: str, profile: VoiceProfile) -> bytes:
        """Synthesize text with a voice profile.

        Raises:
            SynthesisBackendError: Backend request failed
        """
        ...

    async def aclose(self) -> None:
        """Release backend resources."""


class SilentBackend(SynthesisBackend):
    """Backend producing silence. Used as the fallback and in development."""

    def __init__(self, sample_rate: int = 24000, ms_per_char: int = 60) -> None:
        self._sample_rate = sample_rate
        self._ms_per_char = ms_per_char

    @property
    def name(self) -> str:
        return "silent"

    async def synthesize(self, text: str, profile: VoiceProfile) -> bytes:
        duration_ms = len(text) * self._ms_per_char / max(profile.settings.speed, 0.1)
        samples = int(self._sample_rate * duration_ms / 1000)
        return b"\x00\x00" * samples


class ElevenLabsBackend(SynthesisBackend):
    """ElevenLabs text-to-speech over its REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.elevenlabs.io/v1",
        model_id: str = "eleven_multilingual_v2",
        timeout_s: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model_id = model_id
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    @property
    def name(self) -> str:
        return "elevenlabs"

    async def synthesize(self, text: str, profile: VoiceProfile) -> bytes:
        settings = profile.settings
        payload = {
            "text": text,
            "model_id": self._model_id,
            "voice_settings": {
                "stability": settings.stability,
                "similarity_boost": settings.clarity,
                "speed": settings.speed,
            },
        }
        headers = {
            "xi-api-key": self._api_key,
            "Content-Type": "application/json",
            "Accept": "audio/mpeg",
        }

        try:
            response = await self._client.post(
                f"{self._base_url}/text-to-speech/{profile.voice_id}",
                json=payload,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise SynthesisBackendError(self.name, str(e)) from e

        if response.status_code != 200:
            raise SynthesisBackendError(
                self.name, f"HTTP {response.status_code}: {response.text[:200]}"
            )
        return response.content

    async def aclose(self) -> None:
        await self._client.aclose()


class VoiceSynthesizer:
    """Per-session synthesizer with primary -> fallback selection."""

    def __init__(
        self,
        session_id: str,
        primary: SynthesisBackend,
        profile: VoiceProfile | None = None,
        fallback: SynthesisBackend | None = None,
        history_limit: int = STUDIO.UTTERANCE_HISTORY_LIMIT,
    ) -> None:
        self._session_id = session_id
        self._primary = primary
        self._fallback = fallback or SilentBackend()
        self._profile = profile or VoiceProfile()
        self._pending: set[asyncio.Task] = set()
        self._closed = False
        self.utterances: deque[SynthesisResult] = deque(maxlen=history_limit)

    @property
    def profile(self) -> VoiceProfile:
        """Voice profile used for new utterances."""
        return self._profile

    def set_profile(self, profile: VoiceProfile) -> None:
        """Replace the voice profile for subsequent utterances."""
        self._profile = profile
        logger.debug(
            "synthesis_profile_updated",
            session_id=self._session_id,
            voice_id=profile.voice_id,
        )

    @property
    def backend_name(self) -> str:
        """Primary backend name."""
        return self._primary.name

    @property
    def pending(self) -> int:
        """Utterances scheduled but not yet synthesized."""
        return len(self._pending)

    def speak(self, text: str) -> asyncio.Task:
        """Schedule synthesis of text and return immediately."""
        if self._closed:
            raise RuntimeError("synthesizer is closed")
        task = asyncio.create_task(self.synthesize(text))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def synthesize(self, text: str) -> SynthesisResult:
        """Synthesize text now, falling back on primary failure."""
        profile = self._profile
        try:
            audio = await self._primary.synthesize(text, profile)
            backend = self._primary.name
        except Exception as e:
            logger.warning(
                "synthesis_primary_failed",
                session_id=self._session_id,
                backend=self._primary.name,
                error=str(e),
            )
            record_synthesis_fallback()
            audio = await self._fallback.synthesize(text, profile)
            backend = self._fallback.name

        result = SynthesisResult(
            text=text, audio=audio, backend=backend, voice_id=profile.voice_id
        )
        self.utterances.append(result)
        return result

    async def close(self) -> None:
        """Cancel pending utterances and release backends."""
        self._closed = True
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()
        await self._primary.aclose()
