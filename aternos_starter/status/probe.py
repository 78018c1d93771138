"""Bounded-retry status probe for the Minecraft server."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from mcstatus.status_response import JavaStatusResponse

from ..errors import ProbeError
from ..models.status import ServerStatus
from .query import query_status

logger = logging.getLogger(__name__)

QueryFn = Callable[[str, int, float], Awaitable[JavaStatusResponse]]


def parse_status(response: JavaStatusResponse) -> ServerStatus:
    """Map an mcstatus response onto ServerStatus."""
    return ServerStatus(
        reachable=True,
        players_online=response.players.online,
        players_max=response.players.max,
        version=response.version.name,
        motd=response.motd.to_plain().strip(),
        latency_ms=round(response.latency, 1),
    )


class StatusProbe:
    """Queries server status, retrying transport failures a bounded number of times."""

    def __init__(self, query: QueryFn = query_status):
        self._query = query

    async def probe(self, host: str, port: int, timeout: float, max_retries: int = 1) -> ServerStatus:
        attempts = max(0, max_retries) + 1
        last_error = ""
        for attempt in range(1, attempts + 1):
            try:
                return parse_status(await self._query(host, port, timeout))
            except ProbeError as e:
                last_error = str(e)
                if not e.retryable:
                    logger.warning(f"Status of {host}:{port} is malformed: {e}")
                    break
                logger.info(f"Status query {attempt}/{attempts} for {host}:{port} failed: {e}")
        return ServerStatus(reachable=False, error=last_error)
