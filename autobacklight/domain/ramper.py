from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from .models import ControllerConfig

logger = logging.getLogger(__name__)

WriteFn = Callable[[int], Awaitable[None]]
PauseFn = Callable[[float], Awaitable[bool]]  # returns True when a stop was requested


async def _sleep(seconds: float) -> bool:
    await asyncio.sleep(seconds)
    return False


class Ramper:
    """
    Moves brightness to a target in bounded, paced steps.

    Each step changes the level by at most `ramp_step`; the last step lands
    exactly on the target. Increase and decrease use the same step size.
    """

    def __init__(self, config: ControllerConfig) -> None:
        self._cfg = config

    def plan(self, current: int, target: int) -> list[int]:
        if current == target:
            return []
        if not self._cfg.ramp:
            return [target]

        step = self._cfg.ramp_step if target > current else -self._cfg.ramp_step
        levels = []
        level = current
        while level != target:
            level += step
            # Clamp the final step so we never overshoot
            if (step > 0 and level > target) or (step < 0 and level < target):
                level = target
            levels.append(level)
        return levels

    async def apply(
        self,
        current: int,
        target: int,
        write: WriteFn,
        pause: PauseFn = _sleep,
    ) -> list[int]:
        """
        Write each planned level, pausing `ramp_interval` after every write.

        Returns the levels actually written (or, in dry-run, the levels that
        would have been written). Stops early if `pause` reports a stop.
        """
        levels = self.plan(current, target)
        if self._cfg.dry_run:
            logger.info("dry-run: ramp %d -> %d via %s", current, target, levels)
            return levels

        written: list[int] = []
        for level in levels:
            await write(level)
            written.append(level)
            if await pause(self._cfg.ramp_interval):
                logger.info("Ramp interrupted at %d (target %d)", level, target)
                break

        logger.debug("Ramp %d -> %d done in %d writes", current, target, len(written))
        return written
