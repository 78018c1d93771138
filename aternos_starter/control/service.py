"""Operator control HTTP service.

Runs on localhost next to the bot and exposes the start coordinator and
status notifier to the operator.

Endpoints:
    GET  /state   - Coordinator state, last observed reachability, subscriber counts
    GET  /status  - Fresh status probe
    POST /unlock  - Clear the sticky challenge lock
"""

from __future__ import annotations

import logging
from typing import Optional

from aiohttp import web

from ..constants import MESSAGES
from ..database.repository import SubscriberRepository
from ..session_manager.coordinator import StartCoordinator
from ..status.notifier import StatusChangeNotifier

logger = logging.getLogger(__name__)


# ── HTTP Handlers ────────────────────────────────────────────────────────────


async def handle_state(request: web.Request) -> web.Response:
    coordinator: StartCoordinator = request.app["coordinator"]
    notifier: StatusChangeNotifier = request.app["notifier"]
    registry: Optional[SubscriberRepository] = request.app["registry"]

    last_status = notifier.last_status
    return web.json_response({
        "coordinator": coordinator.state.model_dump(mode="json"),
        "last_reachable": notifier.previous,
        "last_status": last_status.model_dump(mode="json") if last_status else None,
        "subscribers": await registry.count() if registry else None,
    })


async def handle_status(request: web.Request) -> web.Response:
    notifier: StatusChangeNotifier = request.app["notifier"]
    status = await notifier.probe.probe(
        notifier.host, notifier.port, notifier.timeout, notifier.max_retries
    )
    return web.json_response(status.model_dump(mode="json"))


async def handle_unlock(request: web.Request) -> web.Response:
    coordinator: StartCoordinator = request.app["coordinator"]
    was_locked = coordinator.unlock()
    message = MESSAGES["unlocked"] if was_locked else "The /startserver command was not locked."
    return web.json_response({"unlocked": was_locked, "message": message})


# ── App Factory ──────────────────────────────────────────────────────────────


def create_app(
    coordinator: StartCoordinator,
    notifier: StatusChangeNotifier,
    registry: Optional[SubscriberRepository] = None,
) -> web.Application:
    app = web.Application()
    app["coordinator"] = coordinator
    app["notifier"] = notifier
    app["registry"] = registry

    app.router.add_get("/state", handle_state)
    app.router.add_get("/status", handle_status)
    app.router.add_post("/unlock", handle_unlock)

    return app


async def start_service(app: web.Application, host: str, port: int) -> Optional[web.AppRunner]:
    """Serve app on host:port. Returns None when the port is already taken."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    try:
        await site.start()
    except OSError as e:
        logger.warning(f"Control service not started on {host}:{port}: {e}")
        await runner.cleanup()
        return None
    logger.info(f"Control service started on {host}:{port}")
    return runner
