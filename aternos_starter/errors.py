"""Exception hierarchy for the start workflow and the status probe."""

from __future__ import annotations

from typing import Optional


class AutomationError(Exception):
    """A browser automation run could not complete."""

    state = "error"


class NavigationTimeout(AutomationError):
    """The server list did not render within the allowed time."""

    state = "navigation_timeout"


class ChallengeDetected(AutomationError):
    """The panel presented a bot-verification challenge."""

    state = "challenge_detected"

    def __init__(self, challenge_type: str):
        super().__init__(f"{challenge_type} challenge detected")
        self.challenge_type = challenge_type


class ElementNotFound(AutomationError):
    """A required control was missing from the rendered page."""

    state = "element_not_found"

    def __init__(self, selector: str, cause: Optional[Exception] = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Element '{selector}' not found{detail}")
        self.selector = selector


class ProbeError(Exception):
    """A status query failed."""

    retryable = True


class TransportError(ProbeError):
    """Connection, DNS or timeout failure while querying the server."""


class StatusProtocolError(ProbeError):
    """The server sent bytes that do not decode as a status response."""


class MalformedResponse(ProbeError):
    """The status response decoded but carries no player section."""

    retryable = False


class PersistenceError(Exception):
    """The session file could not be read or written."""
