"""Camoufox browser automation: launch, restore cookies, press start on Aternos."""

from __future__ import annotations

import asyncio
import logging
import random
from pathlib import Path
from typing import Optional

from camoufox.async_api import AsyncCamoufox
from playwright.async_api import BrowserContext, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config import BROWSER_HEADLESS, SERVER_LIST_TIMEOUT, START_SETTLE
from ..constants import ATERNOS_SERVERS_URL, FINGERPRINT_OS_CHOICES, MESSAGES, SELECTORS
from ..errors import AutomationError, ChallengeDetected, ElementNotFound, NavigationTimeout
from ..models.session import Cookie, SessionCookies
from ..models.status import StartResult
from .challenge import detect_challenge
from .store import SessionStore

logger = logging.getLogger(__name__)


class AternosAutomation:
    """Drives one scripted browser session through the Aternos start sequence.

    Every call to run_start() launches a fresh browser with its own
    fingerprint, reuses stored cookies when available, and always closes the
    browser before returning. There is no internal retry.
    """

    def __init__(
        self,
        store: SessionStore,
        url: str = ATERNOS_SERVERS_URL,
        headless: bool = BROWSER_HEADLESS,
        server_list_timeout: int = SERVER_LIST_TIMEOUT,
        element_timeout: int = 30000,
        settle_seconds: float = START_SETTLE,
    ):
        self.store = store
        self.url = url
        self.headless = headless
        self.server_list_timeout = server_list_timeout
        self.element_timeout = element_timeout
        self.settle_seconds = settle_seconds

    async def run_start(self) -> StartResult:
        """Run the start sequence once and describe the outcome.

        Returns:
            StartResult with state "started", "navigation_timeout",
            "challenge_detected", "element_not_found" or "error".
        """
        try:
            await self._run()
        except ChallengeDetected as e:
            logger.warning(f"{e}, unable to proceed.")
            return StartResult(
                state=e.state,
                message=MESSAGES["start_challenge"],
                challenge_type=e.challenge_type,
            )
        except AutomationError as e:
            logger.error(f"Start automation failed ({e.state}): {e}")
            return StartResult(state=e.state, message=MESSAGES["start_error"].format(error=e))
        except Exception as e:
            logger.error(f"Start automation failed: {e}", exc_info=True)
            return StartResult(state="error", message=MESSAGES["start_error"].format(error=e))

        return StartResult(state="started", message=MESSAGES["start_success"])

    async def _run(self):
        cookies = self.store.load()
        fingerprint_os = random.choice(FINGERPRINT_OS_CHOICES)
        logger.info(f"Launching Camoufox (headless={self.headless}, os={fingerprint_os})...")

        async with AsyncCamoufox(
            headless=self.headless,
            humanize=True,
            os=fingerprint_os,
            i_know_what_im_doing=True,
        ) as browser:
            context = await browser.new_context(viewport={"width": 1366, "height": 768})
            try:
                await self._drive(context, cookies)
            finally:
                try:
                    await context.close()
                except Exception as e:
                    logger.warning(f"Error closing context: {e}")
        logger.info("Browser session closed.")

    async def _drive(self, context: BrowserContext, cookies: Optional[list[Cookie]]):
        if cookies:
            await context.add_cookies([c.to_playwright() for c in cookies])
            logger.info(f"Loaded {len(cookies)} pre-authenticated cookies.")

        page = await context.new_page()
        await self._open_server_list(page)

        logger.info("Server menu loaded. Clicking server menu...")
        await page.click(SELECTORS["server_list"])

        challenge_type = await detect_challenge(page)
        if challenge_type:
            raise ChallengeDetected(challenge_type)
        logger.info("Navigated to Aternos server page.")

        await self._press_start(page)

        # Heuristic: the panel's own transition is not confirmed.
        await asyncio.sleep(self.settle_seconds)
        logger.info("Server start process completed.")

        captured = SessionCookies.validate_python(await context.cookies())
        self.store.save(captured)
        logger.info("Cookies saved for the next session.")

    async def _open_server_list(self, page: Page):
        try:
            await page.goto(self.url, wait_until="domcontentloaded")
            await page.wait_for_selector(SELECTORS["server_list"], timeout=self.server_list_timeout)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(
                f"Server list did not load within {self.server_list_timeout} ms: {e}"
            ) from e

    async def _press_start(self, page: Page):
        selector = SELECTORS["start_button"]
        try:
            await page.wait_for_selector(selector, timeout=self.element_timeout)
        except PlaywrightTimeoutError as e:
            raise ElementNotFound(selector, e) from e
        await page.click(selector)
        logger.info("Clicked the start button.")


def create_automation(session_path: Path) -> AternosAutomation:
    """Build the automation with a store at the given cookie path."""
    return AternosAutomation(SessionStore(session_path))
