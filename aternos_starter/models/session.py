"""Pydantic models for persisted browser cookies and subscriber preferences."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class Cookie(BaseModel):
    """One browser cookie, stored in the shape Playwright produces and accepts."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    value: str
    domain: str
    path: str = "/"
    expires: float = -1  # -1 marks a session cookie
    http_only: bool = Field(default=False, alias="httpOnly")
    secure: bool = False
    same_site: Optional[Literal["Strict", "Lax", "None"]] = Field(default=None, alias="sameSite")

    def to_playwright(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


SessionCookies = TypeAdapter(list[Cookie])


class Subscriber(BaseModel):
    """A chat that can receive server status notifications."""

    chat_id: int
    notifications_enabled: bool = False
    updated_at: Optional[str] = None
