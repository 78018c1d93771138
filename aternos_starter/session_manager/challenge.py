"""Bot-challenge detection for the Aternos panel. Detection only, no solving."""

from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Page

from ..constants import CHALLENGE_SELECTORS, CLOUDFLARE_INDICATORS

logger = logging.getLogger(__name__)


async def detect_cloudflare(page: Page) -> bool:
    """Check if the current page shows a Cloudflare interstitial."""
    try:
        content = await page.content()
        return any(indicator in content for indicator in CLOUDFLARE_INDICATORS)
    except Exception:
        return False


async def detect_challenge_element(page: Page) -> Optional[str]:
    """Detect challenge widgets on the page.

    Returns the type of challenge found, or None.
    """
    for selector, challenge_type in CHALLENGE_SELECTORS:
        try:
            element = await page.query_selector(selector)
        except Exception:
            continue
        if element:
            logger.info(f"Detected challenge type: {challenge_type}")
            return challenge_type
    return None


async def detect_challenge(page: Page) -> Optional[str]:
    """Return the challenge type presented on the page, if any.

    Widgets are checked first so the reported type is as specific as possible;
    a bare Cloudflare interstitial is reported as "cloudflare".
    """
    challenge_type = await detect_challenge_element(page)
    if challenge_type:
        return challenge_type
    if await detect_cloudflare(page):
        logger.info("Detected Cloudflare interstitial")
        return "cloudflare"
    return None
