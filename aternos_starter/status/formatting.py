"""Chat renderings of ServerStatus."""

from __future__ import annotations

from typing import Optional

from telegram.helpers import escape_markdown

from ..models.status import ServerStatus


def _md(value: Optional[str], default: str) -> str:
    return escape_markdown(value, version=1) if value else default


def format_status(status: ServerStatus) -> str:
    """Markdown status card used by /status and by change notifications."""
    if not status.reachable:
        return f"❌ *Server is Offline!*\n- *Error:* {_md(status.error, 'unknown')}"
    return "\n".join([
        "🌐 *Server is Online!*",
        f"- *Players:* {status.players}",
        f"- *Version:* {_md(status.version, 'unknown')}",
        f"- *MOTD:* {_md(status.motd, '-')}",
    ])


def format_status_reply(status: ServerStatus) -> str:
    """Plain-text variant for offline /status replies, Markdown card otherwise."""
    if status.reachable:
        return format_status(status)
    return f"❌ The server is Offline. Unable to retrieve status. Error: {status.error}"
