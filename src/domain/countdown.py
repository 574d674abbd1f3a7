"""
Resend countdown - Cancellable one-second ticker for the OTP resend cooldown.

The countdown runs as a single asyncio task that sleeps one tick per
iteration and decrements the remaining seconds until zero. Every start or
cancel bumps a generation token; a tick from an older generation never
decrements, so a task that has been cancelled but not yet collected cannot
mutate the counter.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)

DEFAULT_COUNTDOWN_SECONDS = 15


class ResendCountdown:
    """Whole-second countdown that gates OTP resends."""

    def __init__(self, initial_seconds: int = DEFAULT_COUNTDOWN_SECONDS, tick_seconds: float = 1.0) -> None:
        self._initial_seconds = initial_seconds
        self._tick_seconds = tick_seconds
        self._remaining = initial_seconds
        self._generation = 0
        self._active_task: asyncio.Task[None] | None = None

    @property
    def initial_seconds(self) -> int:
        return self._initial_seconds

    @property
    def remaining(self) -> int:
        """Whole seconds left before a resend is allowed."""
        return self._remaining

    @property
    def can_resend(self) -> bool:
        return self._remaining <= 0

    @property
    def is_running(self) -> bool:
        return self._active_task is not None and not self._active_task.done()

    @property
    def formatted(self) -> str:
        """Remaining time as MM:SS."""
        minutes, seconds = divmod(self._remaining, 60)
        return f"{minutes:02d}:{seconds:02d}"

    def start(self) -> None:
        """
        Start a fresh countdown from the initial value.

        Any running countdown is cancelled first; a stale one is never resumed.
        Must be called from within a running event loop.
        """
        self.cancel()
        self._remaining = self._initial_seconds
        self._active_task = asyncio.create_task(self._run(self._generation))

    def cancel(self) -> None:
        """Stop decrementing. The remaining value is left as is."""
        self._generation += 1
        if self._active_task is not None and not self._active_task.done():
            self._active_task.cancel()
        self._active_task = None

    async def _run(self, generation: int) -> None:
        try:
            while self._remaining > 0:
                await asyncio.sleep(self._tick_seconds)
                if generation != self._generation:
                    return
                self._remaining = max(0, self._remaining - 1)
        except asyncio.CancelledError:
            pass
        else:
            if generation == self._generation:
                logger.debug("Resend countdown finished")
