"""Binding Release - Order-independent cleanup of collaborator bindings.

Every collaborator binding registers a release handler the moment it
exists. Releasing runs all handlers concurrently; a handler that fails
or overruns the timeout is logged and never prevents the others from
running.
"""

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from studio.config.constants import STUDIO
from studio.observability.logging import FeatureLogger

ReleaseHandler = Callable[[], None]
AsyncReleaseHandler = Callable[[], Awaitable[None]]


@dataclass
class ReleaseReport:
    """Outcome of a release pass."""

    released: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    timed_out: list[str] = field(default_factory=list)
    elapsed_ms: float = 0.0

    @property
    def clean(self) -> bool:
        """Whether every handler completed without error."""
        return not self.failed and not self.timed_out


class ReleaseController:
    """Collects release handlers and runs them once.

    Usage:
        controller = ReleaseController(session_id="session-123")

        controller.register("recognizer", subscription.cancel)
        controller.register("synthesizer", synthesizer.close)

        report = await controller.release()
    """

    def __init__(self, session_id: str, timeout_s: float | None = None) -> None:
        self._session_id = session_id
        self._timeout_s = timeout_s if timeout_s is not None else STUDIO.RELEASE_TIMEOUT_S
        self._handlers: dict[str, ReleaseHandler | AsyncReleaseHandler] = {}
        self._released = False
        self._log = FeatureLogger(session_id)

    def register(self, name: str, handler: ReleaseHandler | AsyncReleaseHandler) -> None:
        """Register a release handler under a binding name.

        Registering after release runs nothing; the binding must be
        released by the caller.
        """
        self._handlers[name] = handler

    def unregister(self, name: str) -> ReleaseHandler | AsyncReleaseHandler | None:
        """Remove and return a handler without running it."""
        return self._handlers.pop(name, None)

    def has(self, name: str) -> bool:
        """Whether a binding with this name is registered."""
        return name in self._handlers

    @property
    def names(self) -> list[str]:
        """Registered binding names."""
        return list(self._handlers)

    @property
    def is_released(self) -> bool:
        """Whether release() already ran."""
        return self._released

    async def release_one(self, name: str) -> bool:
        """Run and remove a single handler.

        Returns:
            True if a handler was registered and completed without error
        """
        handler = self._handlers.pop(name, None)
        if handler is None:
            return False
        try:
            await _invoke(handler)
        except Exception as e:
            self._log.release_failed(name, str(e))
            return False
        return True

    async def release(self) -> ReleaseReport:
        """Run every registered handler concurrently.

        Subsequent calls are no-ops returning an empty report.
        """
        report = ReleaseReport()
        if self._released:
            return report
        self._released = True

        handlers, self._handlers = self._handlers, {}
        if not handlers:
            return report

        start = time.perf_counter()
        tasks = {
            asyncio.create_task(_invoke(handler)): name
            for name, handler in handlers.items()
        }

        try:
            done, pending = await asyncio.wait(
                tasks,
                timeout=self._timeout_s,
                return_when=asyncio.ALL_COMPLETED,
            )
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

        for task in pending:
            task.cancel()
            report.timed_out.append(tasks[task])

        for task in done:
            name = tasks[task]
            error = task.exception()
            if error is None:
                report.released.append(name)
            else:
                report.failed.append(name)
                self._log.release_failed(name, str(error))

        report.elapsed_ms = (time.perf_counter() - start) * 1000
        if report.timed_out:
            self._log.release_timeout(report.timed_out, report.elapsed_ms)
        self._log.released(
            handlers_count=len(handlers),
            failed=report.failed + report.timed_out,
            elapsed_ms=report.elapsed_ms,
        )
        return report


async def _invoke(handler: ReleaseHandler | AsyncReleaseHandler) -> None:
    result = handler()
    if inspect.isawaitable(result):
        await result
