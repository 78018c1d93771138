"""Single-flight and cooldown discipline around browser start runs."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional, Protocol

from pydantic import BaseModel

from ..constants import MESSAGES
from ..models.status import StartResult

logger = logging.getLogger(__name__)

Reply = Callable[[str], Awaitable[None]]
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StartRunner(Protocol):
    async def run_start(self) -> StartResult: ...


class CoordinatorState(BaseModel):
    """Process-wide start state. Only the coordinator mutates it."""

    locked: bool = False
    locked_at: Optional[datetime] = None
    running: bool = False
    cooldown_until: Optional[datetime] = None

    def cooldown_active(self, now: datetime) -> bool:
        return self.cooldown_until is not None and now < self.cooldown_until

    def reject_reason(self, now: datetime) -> Optional[str]:
        """Return "locked" or "cooldown" if a new run may not start."""
        if self.locked:
            return "locked"
        if self.running or self.cooldown_active(now):
            return "cooldown"
        return None

    def begin_run(self, now: datetime) -> Optional[str]:
        """Transition Idle -> Running. Returns the rejection reason on failure."""
        reason = self.reject_reason(now)
        if reason is None:
            self.running = True
        return reason

    def finish_run(self, now: datetime, cooldown: timedelta, challenge: bool):
        """Transition Running -> Idle, or Locked when a challenge was hit."""
        self.running = False
        self.cooldown_until = now + cooldown
        if challenge:
            self.locked = True
            self.locked_at = now

    def clear_cooldown(self, deadline: datetime) -> bool:
        """Clear the cooldown that ends at deadline. A newer one is left alone."""
        if self.cooldown_until is not None and self.cooldown_until == deadline:
            self.cooldown_until = None
            return True
        return False

    def unlock(self) -> bool:
        was_locked = self.locked
        self.locked = False
        self.locked_at = None
        return was_locked


class StartCoordinator:
    """Lets at most one start run execute and spaces runs by a cooldown.

    A run that hits a bot challenge locks the coordinator. The lock stays
    until unlock() is called, unless lock_release_seconds is positive, in
    which case a timer releases it.
    """

    def __init__(
        self,
        runner: StartRunner,
        cooldown_seconds: float,
        lock_release_seconds: float = 0,
        state: Optional[CoordinatorState] = None,
        clock: Clock = utcnow,
    ):
        self.runner = runner
        self.cooldown = timedelta(seconds=cooldown_seconds)
        self.lock_release_seconds = lock_release_seconds
        self.state = state if state is not None else CoordinatorState()
        self._clock = clock
        self._timers: set[asyncio.Task] = set()

    async def request_start(self, reply: Optional[Reply] = None) -> StartResult:
        """Start the server unless locked, running or cooling down.

        Args:
            reply: Optional callable used for the progress message and for
                   the "available again" message when the cooldown ends.
        """
        reason = self.state.begin_run(self._clock())
        if reason is not None:
            return self._rejection(reason)

        challenge = False
        try:
            if reply:
                await _safe_reply(reply, MESSAGES["start_attempt"])
            result = await self.runner.run_start()
            challenge = result.state == "challenge_detected"
        finally:
            self.state.finish_run(self._clock(), self.cooldown, challenge)
            self._schedule(self._expire_cooldown(self.state.cooldown_until, reply))
            if challenge:
                logger.warning("Start command locked after challenge detection.")
                if self.lock_release_seconds > 0:
                    self._schedule(self._release_lock())

        logger.info(f"Start request finished with state '{result.state}'")
        return result

    def unlock(self) -> bool:
        """Operator reset of the sticky lock. Returns whether it was locked."""
        was_locked = self.state.unlock()
        if was_locked:
            logger.info("Start command unlocked.")
        return was_locked

    def _rejection(self, reason: str) -> StartResult:
        if reason == "locked":
            return StartResult(state="locked", message=MESSAGES["start_locked"])
        if self.state.running:
            return StartResult(state="cooldown", message=MESSAGES["start_busy"])
        minutes = max(1, round(self.cooldown.total_seconds() / 60))
        return StartResult(
            state="cooldown",
            message=MESSAGES["start_cooldown"].format(minutes=minutes),
        )

    def _schedule(self, coro: Awaitable[None]):
        task = asyncio.ensure_future(coro)
        self._timers.add(task)
        task.add_done_callback(self._timers.discard)

    async def _expire_cooldown(self, deadline: datetime, reply: Optional[Reply]):
        await asyncio.sleep(self.cooldown.total_seconds())
        if self.state.clear_cooldown(deadline) and reply:
            await _safe_reply(reply, MESSAGES["start_available"])

    async def _release_lock(self):
        await asyncio.sleep(self.lock_release_seconds)
        if self.state.unlock():
            logger.info(f"Start command lock released after {self.lock_release_seconds:.0f}s.")

    async def wait_timers(self):
        """Wait for pending cooldown/unlock timers. Used on shutdown and in tests."""
        if self._timers:
            await asyncio.gather(*list(self._timers), return_exceptions=True)


async def _safe_reply(reply: Reply, text: str):
    try:
        await reply(text)
    except Exception as e:
        logger.warning(f"Failed to deliver reply '{text[:40]}': {e}")
