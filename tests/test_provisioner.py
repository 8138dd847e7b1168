"""
Tests for the Browserbase provisioner.

The provider REST API is served by httpx.MockTransport and the CDP
connection by FakePlaywright.
"""

import json

import httpx
import pytest

from draftdash.errors import ConfigurationError, ProvisioningError
from draftdash.modules.browser import BrowserbaseProvisioner

from conftest import FakeBrowser, FakeChromium, FakePage, FakePlaywright, StaticConfigProvider


class BrowserbaseStub:
    """Minimal Browserbase API routed through MockTransport."""

    def __init__(self, create_status=201, debug_status=200, release_status=200, debug_body=None):
        self.create_status = create_status
        self.debug_status = debug_status
        self.release_status = release_status
        self.debug_body = debug_body
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST" and path == "/v1/sessions":
            if self.create_status >= 400:
                return httpx.Response(self.create_status, json={"error": "quota exceeded"})
            return httpx.Response(
                self.create_status,
                json={"id": "bb-123", "connectUrl": "wss://connect.test/bb-123", "timeout": 120},
            )
        if request.method == "GET" and path == "/v1/sessions/bb-123/debug":
            if self.debug_status >= 400:
                return httpx.Response(self.debug_status, text="boom")
            body = self.debug_body or {
                "debuggerFullscreenUrl": "https://viewer.test/bb-123",
                "debuggerUrl": "https://viewer.test/bb-123/tab",
            }
            return httpx.Response(self.debug_status, json=body)
        if request.method == "POST" and path == "/v1/sessions/bb-123":
            return httpx.Response(self.release_status, json={})
        return httpx.Response(404)

    def release_requests(self):
        return [
            r for r in self.requests if r.method == "POST" and r.url.path == "/v1/sessions/bb-123"
        ]


def make_provisioner(stub, config_provider=None, playwright=None):
    client = httpx.AsyncClient(transport=httpx.MockTransport(stub))
    return BrowserbaseProvisioner(
        config_provider or StaticConfigProvider(), playwright or FakePlaywright(), client
    )


@pytest.mark.asyncio
async def test_create_session():
    stub = BrowserbaseStub()
    playwright = FakePlaywright()
    provisioner = make_provisioner(stub, playwright=playwright)

    session = await provisioner.create_session()

    assert session.session_id == "bb-123"
    assert session.viewer_url == "https://viewer.test/bb-123"
    assert session.browser is playwright.chromium.browser
    assert session.page is session.context.pages[0]
    assert playwright.chromium.connected_to == ["wss://connect.test/bb-123"]

    create = stub.requests[0]
    assert create.headers["X-BB-API-Key"] == "bb-key"
    body = json.loads(create.content)
    assert body == {
        "projectId": "proj-1",
        "region": "us-east-1",
        "keepAlive": True,
        "timeout": 120,
        "browserSettings": {"viewport": {"width": 1280, "height": 720}},
    }


@pytest.mark.asyncio
async def test_create_session_falls_back_to_debugger_url():
    stub = BrowserbaseStub(debug_body={"debuggerUrl": "https://viewer.test/plain"})
    provisioner = make_provisioner(stub)

    session = await provisioner.create_session()

    assert session.viewer_url == "https://viewer.test/plain"


@pytest.mark.asyncio
async def test_create_session_opens_context_and_page_when_missing():
    browser = FakeBrowser()
    browser.contexts = []
    provisioner = make_provisioner(
        BrowserbaseStub(), playwright=FakePlaywright(FakeChromium(browser))
    )

    session = await provisioner.create_session()

    assert session.context is browser.contexts[0]
    assert isinstance(session.page, FakePage)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "api_key,project_id", [(None, "proj-1"), ("bb-key", None), (None, None)]
)
async def test_missing_credentials(api_key, project_id):
    stub = BrowserbaseStub()
    provisioner = make_provisioner(stub, StaticConfigProvider(api_key, project_id))

    with pytest.raises(ConfigurationError):
        await provisioner.create_session()

    assert stub.requests == []


@pytest.mark.asyncio
async def test_remote_rejection_propagates_status_and_detail():
    stub = BrowserbaseStub(create_status=429)
    provisioner = make_provisioner(stub)

    with pytest.raises(ProvisioningError) as exc_info:
        await provisioner.create_session()

    assert exc_info.value.status_code == 429
    assert exc_info.value.detail == {"error": "quota exceeded"}


@pytest.mark.asyncio
async def test_transport_failure_is_provisioning_error():
    def explode(request):
        raise httpx.ConnectError("unreachable", request=request)

    provisioner = make_provisioner(explode)

    with pytest.raises(ProvisioningError):
        await provisioner.create_session()


@pytest.mark.asyncio
async def test_debug_failure_releases_remote_session():
    stub = BrowserbaseStub(debug_status=500)
    playwright = FakePlaywright()
    provisioner = make_provisioner(stub, playwright=playwright)

    with pytest.raises(ProvisioningError) as exc_info:
        await provisioner.create_session()

    assert exc_info.value.status_code == 500
    assert len(stub.release_requests()) == 1
    assert playwright.chromium.connected_to == []


@pytest.mark.asyncio
async def test_cdp_failure_releases_remote_session():
    stub = BrowserbaseStub()
    playwright = FakePlaywright(FakeChromium(error=RuntimeError("ws closed")))
    provisioner = make_provisioner(stub, playwright=playwright)

    with pytest.raises(ProvisioningError, match="CDP connection failed"):
        await provisioner.create_session()

    assert len(stub.release_requests()) == 1


@pytest.mark.asyncio
async def test_release_session():
    stub = BrowserbaseStub()
    provisioner = make_provisioner(stub)

    assert await provisioner.release_session("bb-123") is True

    request = stub.release_requests()[0]
    assert json.loads(request.content) == {"status": "REQUEST_RELEASE", "projectId": "proj-1"}


@pytest.mark.asyncio
async def test_release_failure_is_swallowed():
    stub = BrowserbaseStub(release_status=500)
    provisioner = make_provisioner(stub)

    assert await provisioner.release_session("bb-123") is False


@pytest.mark.asyncio
async def test_release_transport_error_is_swallowed():
    def explode(request):
        raise httpx.ReadTimeout("slow", request=request)

    provisioner = make_provisioner(explode)

    assert await provisioner.release_session("bb-123") is False


@pytest.mark.asyncio
async def test_release_without_credentials_is_skipped():
    stub = BrowserbaseStub()
    provisioner = make_provisioner(stub, StaticConfigProvider(None, None))

    assert await provisioner.release_session("bb-123") is False
    assert stub.requests == []


@pytest.mark.asyncio
async def test_navigate_waits_for_dom_content_loaded():
    provisioner = make_provisioner(BrowserbaseStub())
    page = FakePage()

    await provisioner.navigate(page, "https://draft.premierleague.com/")

    page.goto.assert_awaited_once_with(
        "https://draft.premierleague.com/", wait_until="domcontentloaded"
    )


@pytest.mark.asyncio
async def test_release_on_closed_client_is_swallowed():
    http = httpx.AsyncClient(transport=httpx.MockTransport(BrowserbaseStub()))
    await http.aclose()
    provisioner = BrowserbaseProvisioner(StaticConfigProvider(), FakePlaywright(), http)

    assert await provisioner.release_session("bb-123") is False


@pytest.mark.asyncio
async def test_release_with_broken_config_provider_is_swallowed():
    class BrokenProvider(StaticConfigProvider):
        def get_browserbase_config(self):
            raise KeyError("BROWSERBASE_API_KEY")

    provisioner = make_provisioner(BrowserbaseStub(), BrokenProvider())

    assert await provisioner.release_session("bb-123") is False
