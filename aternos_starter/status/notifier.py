"""Periodic status polling with edge-triggered subscriber notifications."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol

from ..models.session import Subscriber
from ..models.status import ServerStatus
from .formatting import format_status
from .probe import StatusProbe

logger = logging.getLogger(__name__)

SendFn = Callable[[int, str], Awaitable[None]]


class Registry(Protocol):
    async def list_enabled(self) -> list[Subscriber]: ...


class StatusChangeNotifier:
    """Polls the server and tells subscribers when reachability flips.

    The previous reachability starts as None (unknown), so the first poll
    after startup always notifies.
    """

    def __init__(
        self,
        probe: StatusProbe,
        registry: Registry,
        send: SendFn,
        host: str,
        port: int,
        interval: float,
        timeout: float,
        max_retries: int = 1,
    ):
        self.probe = probe
        self.registry = registry
        self.send = send
        self.host = host
        self.port = port
        self.interval = interval
        self.timeout = timeout
        self.max_retries = max_retries
        self.previous: Optional[bool] = None
        self.last_status: Optional[ServerStatus] = None

    async def poll_once(self) -> int:
        """Probe once and notify on change. Returns the number of messages sent."""
        status = await self.probe.probe(self.host, self.port, self.timeout, self.max_retries)
        self.last_status = status
        if status.reachable == self.previous:
            return 0

        logger.info(
            f"Server reachability changed: {self.previous} -> {status.reachable}"
        )
        self.previous = status.reachable
        return await self._fan_out(format_status(status))

    async def _fan_out(self, message: str) -> int:
        delivered = 0
        for subscriber in await self.registry.list_enabled():
            try:
                await self.send(subscriber.chat_id, message)
                delivered += 1
            except Exception as e:
                logger.error(f"Failed to notify chat {subscriber.chat_id}: {e}")
        logger.info(f"Status change delivered to {delivered} subscriber(s)")
        return delivered

    async def run_forever(self):
        """Poll every interval seconds until cancelled. Polls never overlap."""
        logger.info(f"Monitoring {self.host}:{self.port} every {self.interval:.0f}s")
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.poll_once()
            except Exception as e:
                logger.error(f"Status poll failed: {e}", exc_info=True)
