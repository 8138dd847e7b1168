"""
Shared pytest fixtures for Draftdash tests.

This module provides common fixtures including:
- Fake Playwright objects (browser, context, page, CDP session)
- A fake provisioner for capture service tests
- A controllable clock for staleness tests
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from draftdash.config.provider import APIConfig, BrowserbaseConfig
from draftdash.modules.browser import ProvisionedSession
from draftdash.modules.capture import CaptureService
from draftdash.modules.session import SessionRegistry

API_URL = "https://draft.premierleague.com/api/bootstrap-dynamic"


# =============================================================================
# Fake Playwright objects
# =============================================================================


class FakeCDPSession:
    """Stand-in for playwright's CDPSession with a manual event emitter."""

    def __init__(self):
        self.sent: List[str] = []
        self.handlers: Dict[str, List[Callable]] = {}
        self.detached = False

    async def send(self, method: str, params: Optional[dict] = None):
        self.sent.append(method)
        return {}

    def on(self, event: str, handler: Callable) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler: Callable) -> None:
        self.handlers.get(event, []).remove(handler)

    async def detach(self) -> None:
        self.detached = True

    def emit(self, event: str, params: Any) -> None:
        for handler in list(self.handlers.get(event, [])):
            handler(params)

    def request(self, url: str = API_URL, headers: Optional[dict] = None) -> None:
        """Emit a Network.requestWillBeSent event."""
        self.emit(
            "Network.requestWillBeSent",
            {"requestId": "1", "request": {"url": url, "method": "GET", "headers": headers or {}}},
        )


class FakePage:
    def __init__(self):
        self.goto = AsyncMock()


class FakeContext:
    def __init__(self, page: Optional[FakePage] = None):
        self.pages = [page or FakePage()]
        self.cdp = FakeCDPSession()
        self.new_cdp_session = AsyncMock(return_value=self.cdp)
        self.new_page = AsyncMock(side_effect=self._new_page)

    async def _new_page(self):
        page = FakePage()
        self.pages.append(page)
        return page


class FakeBrowser:
    def __init__(self, close_error: Optional[Exception] = None):
        self.contexts = [FakeContext()]
        self.close_calls = 0
        self._close_error = close_error

    async def close(self) -> None:
        self.close_calls += 1
        if self._close_error:
            raise self._close_error

    async def new_context(self):
        context = FakeContext()
        self.contexts.append(context)
        return context

    @property
    def context(self) -> FakeContext:
        return self.contexts[0]

    @property
    def cdp(self) -> FakeCDPSession:
        return self.contexts[0].cdp


class FakeChromium:
    def __init__(self, browser: Optional[FakeBrowser] = None, error: Optional[Exception] = None):
        self.browser = browser or FakeBrowser()
        self.error = error
        self.connected_to: List[str] = []

    async def connect_over_cdp(self, endpoint_url: str):
        self.connected_to.append(endpoint_url)
        if self.error:
            raise self.error
        return self.browser


class FakePlaywright:
    def __init__(self, chromium: Optional[FakeChromium] = None):
        self.chromium = chromium or FakeChromium()


# =============================================================================
# Provisioner / config fakes
# =============================================================================


class StaticConfigProvider:
    """ConfigProvider returning fixed values."""

    def __init__(self, api_key: Optional[str] = "bb-key", project_id: Optional[str] = "proj-1"):
        self.browserbase = BrowserbaseConfig(
            api_key=api_key,
            project_id=project_id,
            api_base="https://bb.test",
        )

    def get_browserbase_config(self) -> BrowserbaseConfig:
        return self.browserbase

    def get_api_config(self) -> APIConfig:
        return APIConfig(port=3000, host="127.0.0.1", debug=False)


@dataclass
class FakeProvisioner:
    """Provisioner handing out FakeBrowser sessions with sequential ids."""

    browsers: Dict[str, FakeBrowser] = field(default_factory=dict)
    create_error: Optional[Exception] = None
    navigate_error: Optional[Exception] = None
    released: List[str] = field(default_factory=list)
    navigated: List[str] = field(default_factory=list)
    counter: int = 0

    async def create_session(self) -> ProvisionedSession:
        if self.create_error:
            raise self.create_error
        self.counter += 1
        session_id = f"bb-session-{self.counter}"
        browser = FakeBrowser()
        self.browsers[session_id] = browser
        return ProvisionedSession(
            session_id=session_id,
            browser=browser,
            context=browser.context,
            page=browser.context.pages[0],
            viewer_url=f"https://viewer.test/{session_id}",
        )

    async def release_session(self, session_id: str, reason: str = "REQUEST_RELEASE") -> bool:
        self.released.append(session_id)
        return True

    async def navigate(self, page, url: str) -> None:
        self.navigated.append(url)
        if self.navigate_error:
            raise self.navigate_error


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    """Isolated registry with a 5 minute threshold and a fake clock."""
    return SessionRegistry(max_age_seconds=300, clock=clock)


@pytest.fixture
def provisioner():
    return FakeProvisioner()


@pytest.fixture
def capture_service(provisioner, registry):
    return CaptureService(provisioner, registry)
