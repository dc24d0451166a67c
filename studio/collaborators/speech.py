"""Speech Recognition - Subtitle line sources.

Recognizers accept a single subscriber at a time. start() returns a
SubscriptionHandle; once the handle is cancelled the subscriber receives
no further lines, even from a line already being emitted elsewhere.

Implementations:
- ManualRecognizer: lines pushed by the caller (tests, external bridges)
- ScriptedRecognizer: simulated lecture that emits canned phrases
"""

from __future__ import annotations

import asyncio
import random
import time
import uuid
from abc import ABC, abstractmethod
from typing import Callable, Protocol

from studio.exceptions import RecognizerBusyError
from studio.observability.logging import get_logger
from studio.orchestrator.models import SubtitleLine, SubtitleOptions

logger = get_logger(__name__)

LineCallback = Callable[[SubtitleLine], None]


class SubscriptionHandle:
    """Cancellable subscription to a recognizer."""

    def __init__(self, on_line: LineCallback, on_cancel: Callable[[], None] | None = None) -> None:
        self._on_line = on_line
        self._on_cancel = on_cancel
        self._active = True

    @property
    def active(self) -> bool:
        """Whether lines are still delivered."""
        return self._active

    def deliver(self, line: SubtitleLine) -> bool:
        """Pass a line to the subscriber if still active."""
        if not self._active:
            return False
        self._on_line(line)
        return True

    def cancel(self) -> None:
        """Stop delivery. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        if self._on_cancel is not None:
            self._on_cancel()


class SpeechRecognizer(Protocol):
    """Protocol for speech recognizers.

    Usage:
        recognizer = registry.create_recognizer(session_id)
        handle = await recognizer.start(history.ingest, SubtitleOptions())
        ...
        handle.cancel()
        await recognizer.stop()
    """

    async def start(self, on_line: LineCallback, options: SubtitleOptions) -> SubscriptionHandle:
        """Begin recognition and subscribe on_line.

        Raises:
            RecognizerBusyError: A subscription is already active
        """
        ...

    async def stop(self) -> None:
        """Stop recognition. Safe when never started."""
        ...


class BaseSpeechRecognizer(ABC):
    """Base class enforcing the single-subscriber rule."""

    def __init__(self) -> None:
        self._handle: SubscriptionHandle | None = None
        self._options: SubtitleOptions | None = None

    async def start(self, on_line: LineCallback, options: SubtitleOptions) -> SubscriptionHandle:
        if self._handle is not None and self._handle.active:
            raise RecognizerBusyError()

        self._options = options
        self._handle = SubscriptionHandle(on_line, on_cancel=self._on_cancelled)
        await self._begin()
        return self._handle

    async def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        await self._end()

    def _on_cancelled(self) -> None:
        """Hook run when the subscriber cancels its handle."""
        self._end_nowait()

    def _emit(self, line: SubtitleLine) -> None:
        """Deliver a line to the active subscriber, if any."""
        handle = self._handle
        if handle is None:
            return
        try:
            handle.deliver(line)
        except Exception as e:
            logger.warning(
                "subtitle_callback_error",
                line_id=line.id,
                error=str(e),
            )

    @property
    def is_listening(self) -> bool:
        """Whether a subscriber is active."""
        return self._handle is not None and self._handle.active

    @property
    def options(self) -> SubtitleOptions | None:
        """Options of the current subscription."""
        return self._options

    @abstractmethod
    async def _begin(self) -> None:
        """Start producing lines."""
        ...

    @abstractmethod
    async def _end(self) -> None:
        """Stop producing lines."""
        ...

    def _end_nowait(self) -> None:
        """Stop producing lines without awaiting."""


class ManualRecognizer(BaseSpeechRecognizer):
    """Recognizer fed explicitly through push()."""

    async def _begin(self) -> None:
        pass

    async def _end(self) -> None:
        pass

    def push(
        self,
        text: str,
        line_id: str | None = None,
        is_interim: bool = False,
        confidence: float | None = None,
    ) -> SubtitleLine:
        """Emit a line to the current subscriber."""
        if confidence is None:
            confidence = self._options.confidence if self._options else 0.8
        line = SubtitleLine(
            id=line_id or uuid.uuid4().hex,
            text=text,
            timestamp=time.time(),
            confidence=confidence,
            is_interim=is_interim,
        )
        self._emit(line)
        return line


LECTURE_PHRASES: tuple[str, ...] = (
    "Welcome to today's lesson on quantum physics.",
    "Let's explore the fascinating world of wave-particle duality.",
    "This concept revolutionized our understanding of nature.",
    "Questions are welcome in the chat at any time.",
    "Now let's look at some practical applications.",
)


class ScriptedRecognizer(BaseSpeechRecognizer):
    """Simulated recognizer cycling through canned lecture phrases.

    Each phrase is emitted first as an interim line (its first half) and
    then as a final line with the same id.
    """

    def __init__(
        self,
        phrases: tuple[str, ...] = LECTURE_PHRASES,
        interval_s: tuple[float, float] = (8.0, 12.0),
        rng: random.Random | None = None,
    ) -> None:
        super().__init__()
        self._phrases = phrases
        self._interval_s = interval_s
        self._rng = rng or random.Random()
        self._task: asyncio.Task | None = None

    async def _begin(self) -> None:
        self._task = asyncio.create_task(self._loop())

    async def _end(self) -> None:
        self._end_nowait()

    def _end_nowait(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _loop(self) -> None:
        index = 0
        while True:
            try:
                await asyncio.sleep(self._rng.uniform(*self._interval_s))
                phrase = self._phrases[index % len(self._phrases)]
                index += 1

                line_id = uuid.uuid4().hex
                words = phrase.split()
                confidence = self._options.confidence if self._options else 0.8
                self._emit(
                    SubtitleLine(
                        id=line_id,
                        text=" ".join(words[: max(1, len(words) // 2)]),
                        timestamp=time.time(),
                        confidence=confidence,
                        is_interim=True,
                    )
                )
                self._emit(
                    SubtitleLine(
                        id=line_id,
                        text=phrase,
                        timestamp=time.time(),
                        confidence=confidence,
                        is_interim=False,
                    )
                )
            except asyncio.CancelledError:
                break
