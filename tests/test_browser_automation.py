from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from aternos_starter.constants import FINGERPRINT_OS_CHOICES, MESSAGES, SELECTORS
from aternos_starter.models.session import Cookie
from aternos_starter.session_manager import browser as browser_module
from aternos_starter.session_manager.browser import AternosAutomation
from aternos_starter.session_manager.store import SessionStore

CAPTURED = [
    {
        "name": "ATERNOS_SESSION",
        "value": "fresh",
        "domain": ".aternos.org",
        "path": "/",
        "expires": 1893456000,
        "httpOnly": True,
        "secure": True,
        "sameSite": "Lax",
    }
]


class FakePage:
    def __init__(
        self,
        *,
        list_timeout: bool = False,
        challenge: Optional[str] = None,
        start_missing: bool = False,
        html: str = "<html><body></body></html>",
        click_error: Optional[Exception] = None,
    ):
        self.list_timeout = list_timeout
        self.challenge = challenge
        self.start_missing = start_missing
        self.html = html
        self.click_error = click_error
        self.visited: list[str] = []
        self.clicked: list[str] = []

    async def goto(self, url, **kwargs):
        self.visited.append(url)

    async def wait_for_selector(self, selector, timeout=None):
        if selector == SELECTORS["server_list"] and self.list_timeout:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        if selector == SELECTORS["start_button"] and self.start_missing:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        return object()

    async def click(self, selector):
        if self.click_error:
            raise self.click_error
        self.clicked.append(selector)

    async def query_selector(self, selector):
        return object() if selector == self.challenge else None

    async def content(self):
        return self.html


class FakeContext:
    def __init__(self, page: FakePage):
        self.page = page
        self.added: list[dict] = []
        self.closed = False

    async def add_cookies(self, cookies):
        self.added.extend(cookies)

    async def new_page(self):
        return self.page

    async def cookies(self):
        return CAPTURED

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, context: FakeContext):
        self.context = context

    async def new_context(self, **kwargs):
        return self.context


class FakeCamoufox:
    def __init__(self, browser: FakeBrowser, **kwargs):
        self.browser = browser
        self.kwargs = kwargs
        self.exited = False

    async def __aenter__(self):
        return self.browser

    async def __aexit__(self, *exc):
        self.exited = True


@pytest.fixture
def launch(monkeypatch):
    """Patch Camoufox with fakes around the given page; returns (context, launches)."""

    def _launch(page: FakePage):
        context = FakeContext(page)
        launches: list[FakeCamoufox] = []

        def factory(**kwargs):
            instance = FakeCamoufox(FakeBrowser(context), **kwargs)
            launches.append(instance)
            return instance

        monkeypatch.setattr(browser_module, "AsyncCamoufox", factory)
        return context, launches

    return _launch


def _automation(path: Path) -> AternosAutomation:
    return AternosAutomation(SessionStore(path), settle_seconds=0)


@pytest.mark.asyncio
async def test_successful_run_restores_and_saves_cookies(tmp_path, launch) -> None:
    path = tmp_path / "cookies.json"
    SessionStore(path).save([Cookie(name="ATERNOS_SESSION", value="old", domain=".aternos.org")])
    page = FakePage()
    context, launches = launch(page)

    result = await _automation(path).run_start()

    assert result.state == "started"
    assert result.message == MESSAGES["start_success"]
    assert context.added[0]["value"] == "old"
    assert page.clicked == [SELECTORS["server_list"], SELECTORS["start_button"]]
    assert json.loads(path.read_text())[0]["value"] == "fresh"
    assert context.closed and launches[0].exited
    assert launches[0].kwargs["os"] in FINGERPRINT_OS_CHOICES


@pytest.mark.asyncio
async def test_challenge_aborts_before_start(tmp_path, launch) -> None:
    path = tmp_path / "cookies.json"
    page = FakePage(challenge="#cf-challenge")
    context, launches = launch(page)

    result = await _automation(path).run_start()

    assert result.state == "challenge_detected"
    assert result.challenge_type == "cloudflare_challenge"
    assert result.message == MESSAGES["start_challenge"]
    assert SELECTORS["start_button"] not in page.clicked
    assert not path.exists()
    assert context.closed and launches[0].exited


@pytest.mark.asyncio
async def test_cloudflare_interstitial_counts_as_challenge(tmp_path, launch) -> None:
    launch(FakePage(html="<title>Just a moment...</title>"))

    result = await _automation(tmp_path / "cookies.json").run_start()

    assert result.state == "challenge_detected"
    assert result.challenge_type == "cloudflare"


@pytest.mark.asyncio
async def test_server_list_timeout_is_navigation_timeout(tmp_path, launch) -> None:
    context, launches = launch(FakePage(list_timeout=True))

    result = await _automation(tmp_path / "cookies.json").run_start()

    assert result.state == "navigation_timeout"
    assert result.message.startswith("Error starting the server:")
    assert context.closed and launches[0].exited


@pytest.mark.asyncio
async def test_missing_start_button_is_element_not_found(tmp_path, launch) -> None:
    path = tmp_path / "cookies.json"
    context, _ = launch(FakePage(start_missing=True))

    result = await _automation(path).run_start()

    assert result.state == "element_not_found"
    assert "#start" in result.message
    assert not path.exists()
    assert context.closed


@pytest.mark.asyncio
async def test_unexpected_error_is_reported_and_resources_released(tmp_path, launch) -> None:
    context, launches = launch(FakePage(click_error=RuntimeError("target closed")))

    result = await _automation(tmp_path / "cookies.json").run_start()

    assert result.state == "error"
    assert result.message == "Error starting the server: target closed"
    assert context.closed and launches[0].exited
