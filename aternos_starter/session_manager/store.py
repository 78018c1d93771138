"""Cookie persistence so automation runs can skip the interactive login."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..errors import PersistenceError
from ..models.session import Cookie, SessionCookies

logger = logging.getLogger(__name__)


class SessionStore:
    """Reads and writes the browser session as a JSON array of cookies."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[list[Cookie]]:
        """Return the stored cookies, or None to start unauthenticated."""
        if not self.path.exists():
            return None
        try:
            return self._read()
        except PersistenceError as e:
            logger.warning(f"Ignoring stored session: {e}")
            return None

    def save(self, cookies: list[Cookie]) -> None:
        """Overwrite the stored session. Failures are logged, never raised."""
        try:
            self._write(cookies)
        except PersistenceError as e:
            logger.error(f"Failed to save session: {e}")

    def _read(self) -> list[Cookie]:
        try:
            raw = self.path.read_text(encoding="utf-8")
            return SessionCookies.validate_python(json.loads(raw))
        except (OSError, ValueError, ValidationError) as e:
            raise PersistenceError(f"{self.path}: {e}") from e

    def _write(self, cookies: list[Cookie]):
        payload = [c.to_playwright() for c in cookies]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"{self.path}: {e}") from e
        logger.info(f"Saved {len(cookies)} cookies to {self.path}")
