"""Pydantic models for server status and start outcomes."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel

StartState = Literal[
    "started",
    "navigation_timeout",
    "challenge_detected",
    "element_not_found",
    "error",
    "locked",
    "cooldown",
]

REJECTION_STATES = ("locked", "cooldown")


class ServerStatus(BaseModel):
    """Result of a single status probe. Never persisted."""

    reachable: bool = False
    players_online: Optional[int] = None
    players_max: Optional[int] = None
    version: Optional[str] = None
    motd: Optional[str] = None
    latency_ms: Optional[float] = None
    error: Optional[str] = None

    @property
    def players(self) -> Optional[str]:
        if self.players_online is None or self.players_max is None:
            return None
        return f"{self.players_online}/{self.players_max}"


class StartResult(BaseModel):
    """Outcome of a start request, either from the browser run or a rejection."""

    state: StartState
    message: str
    challenge_type: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.state not in REJECTION_STATES

    @property
    def ok(self) -> bool:
        return self.state == "started"
