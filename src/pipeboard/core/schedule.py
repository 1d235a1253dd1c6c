"""
Cancellable, execution-keyed timers for the progressive stage display.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from pipeboard.schemas.config import DEFAULT_STAGE_DELAYS

logger = logging.getLogger(__name__)

StepCallback = Callable[[], None]


class StageSchedule:
    """Schedules the stage advances of one execution on the event loop.

    Steps are chained: only the next step has a live timer, armed with
    ``loop.call_at`` against the time ``start`` was called, so steps fire in
    order and without drift even when delays are equal. Every timer is bound
    to an execution token; once the schedule is cancelled or restarted for
    another token, a step of the old token that still reaches the loop does
    nothing.

    Args:
        delays: Seconds after ``start`` at which each step fires.
        loop: Event loop to schedule on; the running loop by default.
    """

    def __init__(
        self,
        delays: Sequence[float] = DEFAULT_STAGE_DELAYS,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._delays = tuple(delays)
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._token: str | None = None
        self._steps: list[StepCallback] = []
        self._base = 0.0

    @property
    def delays(self) -> tuple[float, ...]:
        return self._delays

    @property
    def active_token(self) -> str | None:
        return self._token

    @property
    def pending(self) -> int:
        """Number of steps that have not fired yet."""
        return len(self._steps)

    def start(self, token: str, steps: Sequence[StepCallback]) -> None:
        """Schedule one callback per delay for the given execution.

        Any steps still pending from a previous token are cancelled first.

        Raises:
            ValueError: If the number of steps does not match the delays.
        """
        if len(steps) != len(self._delays):
            raise ValueError(f"Expected {len(self._delays)} steps, got {len(steps)}")
        self.cancel()

        loop = self._loop or asyncio.get_running_loop()
        self._loop = loop
        self._token = token
        self._steps = list(steps)
        self._base = loop.time()
        self._arm(token)

    def cancel(self) -> int:
        """Cancel every pending step.

        Returns:
            The number of steps that were still pending.
        """
        cancelled = len(self._steps)
        if self._handle is not None:
            self._handle.cancel()
        if cancelled:
            logger.debug(
                "Cancelled %d pending stage step(s) for %s", cancelled, self._token
            )
        self._handle = None
        self._token = None
        self._steps = []
        return cancelled

    def _arm(self, token: str) -> None:
        assert self._loop is not None
        index = len(self._delays) - len(self._steps)
        when = self._base + self._delays[index]
        self._handle = self._loop.call_at(when, self._fire, token)

    def _fire(self, token: str) -> None:
        if token != self._token or not self._steps:
            return
        step = self._steps.pop(0)
        self._handle = None
        if self._steps:
            self._arm(token)
        else:
            self._token = None
        step()
