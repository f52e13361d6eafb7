"""Timer registry — per-correspondent inactivity timer pairs."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

TimerAction = Callable[[str, int], Awaitable[None]]


@dataclass
class TimerPair:
    """Handle returned by :meth:`TimerRegistry.arm`."""

    key: str
    generation: int
    warning: asyncio.TimerHandle
    reset: asyncio.TimerHandle

    def cancel(self) -> None:
        self.warning.cancel()
        self.reset.cancel()


class TimerRegistry:
    """Arms a (warning, reset) pair of delayed actions per key.

    Arming always cancels the key's previous pair first, so at most one
    pair is armed per key.  Each pair carries a generation stamp that is
    passed to the action; actions should confirm with :meth:`is_current`
    before mutating anything, since a pair can be replaced between the
    moment it fires and the moment its action runs.
    """

    def __init__(self, warning_delay: float, reset_delay: float) -> None:
        self.warning_delay = warning_delay
        self.reset_delay = reset_delay
        self._pairs: dict[str, TimerPair] = {}
        self._generations = itertools.count(1)
        self._tasks: set[asyncio.Task] = set()

    def arm(self, key: str, on_warning: TimerAction, on_reset: TimerAction) -> TimerPair:
        """Replace *key*'s timers with a fresh pair counted from now."""
        self.cancel(key)
        loop = asyncio.get_running_loop()
        generation = next(self._generations)
        pair = TimerPair(
            key=key,
            generation=generation,
            warning=loop.call_later(self.warning_delay, self._fire, key, generation, on_warning),
            reset=loop.call_later(
                self.warning_delay + self.reset_delay, self._fire, key, generation, on_reset
            ),
        )
        self._pairs[key] = pair
        return pair

    def cancel(self, key: str) -> None:
        pair = self._pairs.pop(key, None)
        if pair is not None:
            pair.cancel()

    def cancel_all(self) -> None:
        for pair in self._pairs.values():
            pair.cancel()
        count = len(self._pairs)
        self._pairs.clear()
        if count:
            logger.info("Cancelled %d armed timer pair(s)", count)

    def current(self, key: str) -> TimerPair | None:
        return self._pairs.get(key)

    def is_current(self, key: str, generation: int) -> bool:
        pair = self._pairs.get(key)
        return pair is not None and pair.generation == generation

    def is_armed(self, key: str) -> bool:
        return key in self._pairs

    @property
    def armed_count(self) -> int:
        return len(self._pairs)

    async def wait_idle(self) -> None:
        """Wait for timer actions that are already running."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _fire(self, key: str, generation: int, action: TimerAction) -> None:
        if not self.is_current(key, generation):
            return
        task = asyncio.get_running_loop().create_task(action(key, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
