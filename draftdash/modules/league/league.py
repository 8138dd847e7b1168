"""
Upstream league API proxy.

Forwards a captured bearer token to the fantasy league API and relays the
JSON response. No caching. The player analysis joins three live
responses on every call.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import httpx

from .analysis import analyze_players

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-Api-Authorization"


class UpstreamError(Exception):
    """The upstream league API answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Premier League API error: {status_code} - {body}")
        self.status_code = status_code
        self.body = body


def normalize_bearer(raw: Optional[str]) -> str:
    """
    Build the Authorization header value from a pasted or captured token.

    Strips whitespace and line breaks and a leading "Bearer " in any case.

    Raises:
        ValueError: The token is empty
    """
    token = (raw or "").strip().replace("\n", "").replace("\r", "")
    parts = token.split(None, 1)
    if parts and parts[0].lower() == "bearer":
        token = parts[1].strip() if len(parts) > 1 else ""
    if not token:
        raise ValueError("Bearer token is required")
    return f"Bearer {token}"


class LeagueClient:
    def __init__(self, base_url: str, http_client: Optional[httpx.AsyncClient] = None):
        """
        Initialize league client.

        Args:
            base_url: Upstream API base, e.g. https://draft.premierleague.com/api
            http_client: Optional shared httpx client
        """
        self.base_url = base_url.rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None

    async def _get(self, path: str, bearer_token: str) -> Any:
        url = f"{self.base_url}{path}"
        headers = {AUTH_HEADER: normalize_bearer(bearer_token)}

        logger.info(f"Calling league API: {url}")
        started = time.monotonic()
        response = await self._http.get(url, headers=headers)
        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(f"League API responded {response.status_code} in {duration_ms}ms")

        if response.is_error:
            logger.error(f"League API error response: {response.text}")
            raise UpstreamError(response.status_code, response.text)

        return response.json()

    async def bootstrap_dynamic(self, bearer_token: str) -> Any:
        return await self._get("/bootstrap-dynamic", bearer_token)

    async def league_details(self, bearer_token: str, league_id: int) -> Any:
        return await self._get(f"/league/{league_id}/details", bearer_token)

    async def league_element_status(self, bearer_token: str, league_id: int) -> Any:
        return await self._get(f"/league/{league_id}/element-status", bearer_token)

    async def bootstrap_static(self, bearer_token: str) -> Any:
        return await self._get("/bootstrap-static", bearer_token)

    async def analyze_players(self, bearer_token: str, league_id: int) -> Dict[str, Any]:
        """
        Fetch bootstrap-static, element-status and league details concurrently
        and join them into a player ranking with per-team summaries.

        Raises:
            UpstreamError: Any of the three upstream calls failed
        """
        bootstrap, element_status, details = await asyncio.gather(
            self.bootstrap_static(bearer_token),
            self.league_element_status(bearer_token, league_id),
            self.league_details(bearer_token, league_id),
        )
        analysis = analyze_players(bootstrap, element_status, details)
        logger.info(
            f"Analyzed {analysis['totalPlayers']} players for league {league_id} "
            f"({analysis['ownedPlayers']} owned, {len(analysis['teamSummaries'])} teams)"
        )
        return analysis

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()
