"""Telegram bot entry point for the Aternos starter.

Commands:
- /startserver: launch the browser automation that presses "start" on Aternos
- /status: query the Minecraft server right now
- /ip: show the server address
- /notify [on|off]: subscribe this chat to status change notifications
- /help: list the commands

The status notifier and the operator control service run as background
tasks for the lifetime of the bot.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional

import aiosqlite
from aiohttp import web
from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import Application, CommandHandler, ContextTypes

from .config import (
    CONTROL_HOST,
    CONTROL_PORT,
    DB_PATH,
    LOCK_RELEASE_AFTER,
    MC_SERVER_HOST,
    MC_SERVER_PORT,
    POLL_INTERVAL,
    PROBE_RETRIES,
    PROBE_TIMEOUT,
    SESSION_PATH,
    START_COOLDOWN,
    TELEGRAM_BOT_TOKEN,
    configure_logging,
    ensure_dirs,
)
from .constants import HELP_TEXT, MESSAGES
from .control.service import create_app, start_service
from .database.repository import SubscriberRepository, open_registry
from .session_manager.browser import create_automation
from .session_manager.coordinator import StartCoordinator
from .status.formatting import format_status_reply
from .status.notifier import StatusChangeNotifier
from .status.probe import StatusProbe

logger = logging.getLogger("aternos_starter.bot")


class BotServices:
    """Wires the core components together for one bot process."""

    def __init__(self, application: Application):
        self.application = application
        self.probe = StatusProbe()
        self.coordinator = StartCoordinator(
            create_automation(SESSION_PATH),
            cooldown_seconds=START_COOLDOWN,
            lock_release_seconds=LOCK_RELEASE_AFTER,
        )
        self.db: Optional[aiosqlite.Connection] = None
        self.registry: Optional[SubscriberRepository] = None
        self.notifier: Optional[StatusChangeNotifier] = None
        self._monitor: Optional[asyncio.Task] = None
        self._control: Optional[web.AppRunner] = None

    async def setup(self):
        """Open the registry, start the status monitor and the control service."""
        ensure_dirs()
        self.db, self.registry = await open_registry(str(DB_PATH))
        self.notifier = StatusChangeNotifier(
            self.probe,
            self.registry,
            self.send_markdown,
            host=MC_SERVER_HOST,
            port=MC_SERVER_PORT,
            interval=POLL_INTERVAL,
            timeout=PROBE_TIMEOUT,
            max_retries=PROBE_RETRIES,
        )
        self._monitor = asyncio.create_task(self.notifier.run_forever())
        self._control = await start_service(
            create_app(self.coordinator, self.notifier, self.registry), CONTROL_HOST, CONTROL_PORT
        )

    async def cleanup(self):
        if self._monitor:
            self._monitor.cancel()
            try:
                await self._monitor
            except asyncio.CancelledError:
                pass
        if self._control:
            await self._control.cleanup()
        if self.db:
            await self.db.close()

    async def send_markdown(self, chat_id: int, text: str):
        await self.application.bot.send_message(chat_id, text, parse_mode=ParseMode.MARKDOWN)

    async def current_status(self):
        return await self.probe.probe(MC_SERVER_HOST, MC_SERVER_PORT, PROBE_TIMEOUT, PROBE_RETRIES)


def _services(context: ContextTypes.DEFAULT_TYPE) -> BotServices:
    return context.application.bot_data["services"]


# ── Command Handlers ─────────────────────────────────────────────────────────


async def cmd_startserver(update: Update, context: ContextTypes.DEFAULT_TYPE):
    services = _services(context)
    chat_id = update.effective_chat.id

    async def reply(text: str):
        await context.bot.send_message(chat_id, text)

    result = await services.coordinator.request_start(reply=reply)
    await update.effective_message.reply_text(result.message)


async def cmd_status(update: Update, context: ContextTypes.DEFAULT_TYPE):
    status = await _services(context).current_status()
    text = format_status_reply(status)
    if status.reachable:
        await update.effective_message.reply_text(text, parse_mode=ParseMode.MARKDOWN)
    else:
        await update.effective_message.reply_text(text)


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE):
    minutes = max(1, round(START_COOLDOWN / 60))
    await update.effective_message.reply_text(HELP_TEXT.format(cooldown=minutes))


async def cmd_ip(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.effective_message.reply_text(
        MESSAGES["address"].format(host=MC_SERVER_HOST, port=MC_SERVER_PORT)
    )


async def cmd_notify(update: Update, context: ContextTypes.DEFAULT_TYPE):
    registry = _services(context).registry
    chat_id = update.effective_chat.id
    arg = context.args[0].lower() if context.args else ""

    if arg in ("on", "off"):
        enabled = arg == "on"
    elif arg:
        await update.effective_message.reply_text("Usage: /notify [on|off]")
        return
    else:
        current = await registry.get(chat_id)
        enabled = not (current and current.notifications_enabled)

    await registry.set_notifications(chat_id, enabled)
    await update.effective_message.reply_text(MESSAGES["notify_on" if enabled else "notify_off"])


# ── Application Lifecycle ────────────────────────────────────────────────────


async def post_init(application: Application):
    services = BotServices(application)
    await services.setup()
    application.bot_data["services"] = services
    logger.info("Bot services started.")


async def post_shutdown(application: Application):
    services: Optional[BotServices] = application.bot_data.get("services")
    if services:
        await services.cleanup()
    logger.info("Bot services stopped.")


def build_application(token: str) -> Application:
    application = (
        Application.builder()
        .token(token)
        .concurrent_updates(True)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )
    application.add_handler(CommandHandler("startserver", cmd_startserver))
    application.add_handler(CommandHandler("status", cmd_status))
    application.add_handler(CommandHandler("help", cmd_help))
    application.add_handler(CommandHandler("ip", cmd_ip))
    application.add_handler(CommandHandler("notify", cmd_notify))
    return application


# ── Entry Point ──────────────────────────────────────────────────────────────


def main() -> int:
    """Run the bot with long polling."""
    configure_logging()
    if not TELEGRAM_BOT_TOKEN:
        logger.error("TELEGRAM_BOT_TOKEN is not set.")
        return 1

    logger.info("Starting Aternos starter bot...")
    build_application(TELEGRAM_BOT_TOKEN).run_polling(allowed_updates=Update.ALL_TYPES)
    return 0


if __name__ == "__main__":
    sys.exit(main())
