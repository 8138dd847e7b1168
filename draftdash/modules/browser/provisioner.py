"""
Remote browser provisioning through the Browserbase REST API.

This module provides:
- Session creation with a fixed viewport, keep-alive and an idle timeout
- A Playwright connection over the session's CDP endpoint
- The human-viewable live view URL
- Best-effort release of the remote session
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ...config.provider import BrowserbaseConfig, ConfigProvider
from ...errors import ConfigurationError, ProvisioningError, ReleaseError

logger = logging.getLogger(__name__)


@dataclass
class ProvisionedSession:
    """A live remote browser ready for interception."""
    session_id: str
    browser: Any
    context: Any
    page: Any
    viewer_url: str
    connect_url: Optional[str] = None


class BrowserbaseProvisioner:
    """
    Create and release remote browser sessions.

    The httpx client and the Playwright driver are injected so the provider
    API and the CDP connection can both be replaced in tests.
    """

    def __init__(
        self,
        config_provider: ConfigProvider,
        playwright: Any,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize provisioner.

        Args:
            config_provider: Source of provider credentials, read per call
            playwright: Started Playwright driver (async API)
            http_client: Optional shared httpx client
        """
        self._config_provider = config_provider
        self._playwright = playwright
        self._http = http_client or httpx.AsyncClient()
        self._owns_http = http_client is None

    def _require_config(self) -> BrowserbaseConfig:
        config = self._config_provider.get_browserbase_config()
        if not config.is_configured:
            raise ConfigurationError(
                "Browserbase credentials not configured "
                f"(missing {', '.join(config.missing_keys)})"
            )
        return config

    @staticmethod
    def _headers(config: BrowserbaseConfig) -> dict:
        return {"X-BB-API-Key": config.api_key, "Content-Type": "application/json"}

    @staticmethod
    def _error_detail(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    async def _request(self, method: str, url: str, config: BrowserbaseConfig, **kwargs) -> dict:
        try:
            response = await self._http.request(
                method,
                url,
                headers=self._headers(config),
                timeout=config.request_timeout,
                **kwargs,
            )
        except httpx.HTTPError as e:
            raise ProvisioningError(f"Browserbase request failed: {e}") from e

        if response.is_error:
            detail = self._error_detail(response)
            raise ProvisioningError(
                f"Browserbase rejected {method} {url}: {response.status_code}",
                status_code=response.status_code,
                detail=detail,
            )
        try:
            return response.json()
        except ValueError as e:
            raise ProvisioningError(
                "Browserbase returned a non-JSON response",
                status_code=response.status_code,
                detail=response.text,
            ) from e

    async def create_session(self) -> ProvisionedSession:
        """
        Provision a remote browser and connect to it.

        Returns:
            ProvisionedSession with the provider-issued id and live view URL

        Raises:
            ConfigurationError: Credentials are missing
            ProvisioningError: The provider or the CDP connection failed

        A remote session that was created before a later step failed is
        released (and any connected browser closed) before raising.
        """
        config = self._require_config()

        payload = {
            "projectId": config.project_id,
            "region": config.region,
            "keepAlive": config.keep_alive,
            "timeout": config.idle_timeout_seconds,
            "browserSettings": {
                "viewport": {
                    "width": config.viewport_width,
                    "height": config.viewport_height,
                },
            },
        }
        created = await self._request("POST", f"{config.api_base}/v1/sessions", config, json=payload)

        session_id = created.get("id")
        connect_url = created.get("connectUrl")
        if not session_id or not connect_url:
            if session_id:
                await self.release_session(session_id)
            raise ProvisioningError(
                "Browserbase session response is missing id or connectUrl", detail=created
            )
        logger.info(f"Created Browserbase session {session_id} in {config.region}")

        browser = None
        try:
            debug = await self._request(
                "GET", f"{config.api_base}/v1/sessions/{session_id}/debug", config
            )
            viewer_url = debug.get("debuggerFullscreenUrl") or debug.get("debuggerUrl")
            if not viewer_url:
                raise ProvisioningError(
                    "Browserbase debug response has no live view URL", detail=debug
                )

            try:
                browser = await self._playwright.chromium.connect_over_cdp(connect_url)
            except Exception as e:
                raise ProvisioningError(f"CDP connection failed: {e}") from e

            context = browser.contexts[0] if browser.contexts else await browser.new_context()
            page = context.pages[0] if context.pages else await context.new_page()
        except Exception:
            if browser is not None:
                try:
                    await browser.close()
                except Exception as close_error:
                    logger.debug(f"Browser close after failed provisioning: {close_error}")
            await self.release_session(session_id)
            raise

        return ProvisionedSession(
            session_id=session_id,
            browser=browser,
            context=context,
            page=page,
            viewer_url=viewer_url,
            connect_url=connect_url,
        )

    async def release_session(self, session_id: str, reason: str = "REQUEST_RELEASE") -> bool:
        """
        Ask the provider to release a session.

        Never raises; the remote session expires on its own if this fails.

        Returns:
            True if the provider accepted the release
        """
        try:
            config = self._config_provider.get_browserbase_config()
            if not config.is_configured:
                logger.warning(f"Cannot release session {session_id}: credentials not configured")
                return False

            response = await self._http.post(
                f"{config.api_base}/v1/sessions/{session_id}",
                headers=self._headers(config),
                json={"status": reason, "projectId": config.project_id},
                timeout=config.request_timeout,
            )
            if response.is_error:
                raise ReleaseError(f"{response.status_code} {response.text}")
        except ReleaseError as e:
            logger.warning(f"Failed to release Browserbase session {session_id}: {e}")
            return False
        except Exception as e:
            error = ReleaseError(f"{e.__class__.__name__}: {e}")
            logger.warning(f"Failed to release Browserbase session {session_id}: {error}")
            return False

        logger.info(f"Released Browserbase session {session_id}")
        return True

    async def navigate(self, page: Any, url: str) -> None:
        """Open the login page, waiting only for DOMContentLoaded."""
        await page.goto(url, wait_until="domcontentloaded")

    async def close(self) -> None:
        """Close the HTTP client if this provisioner created it."""
        if self._owns_http:
            await self._http.aclose()
