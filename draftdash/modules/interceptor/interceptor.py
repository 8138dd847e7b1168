"""Outbound request interception via the Chrome DevTools Protocol.

Attaches a CDP session to the remote page, enables network reporting and
watches ``Network.requestWillBeSent`` for requests to the upstream API. The
first value of the target header seen for a session is handed to the sink.
"""

import logging
from typing import Any, Callable, Mapping, Optional

from ...errors import InterceptionAnomaly

logger = logging.getLogger(__name__)

REQUEST_EVENT = "Network.requestWillBeSent"

DEFAULT_URL_PATTERN = "draft.premierleague.com/api/"
DEFAULT_HEADER = "x-api-authorization"


def find_header(headers: Any, name: str) -> Optional[str]:
    """Case-insensitive header lookup. Returns None for missing or non-string values."""
    if not isinstance(headers, Mapping):
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if isinstance(key, str) and key.lower() == wanted and isinstance(value, str):
            return value
    return None


class TrafficInterceptor:
    """Capture one request header from a page's outbound traffic.

    Usage:
        interceptor = TrafficInterceptor(session_id, context, page, sink=registry.set_token)
        await interceptor.attach()

        # ... user logs in, page calls the API, sink(session_id, value) fires ...

        await interceptor.detach()
    """

    def __init__(
        self,
        session_id: str,
        context: Any,
        page: Any,
        sink: Callable[[str, str], Any],
        *,
        url_pattern: str = DEFAULT_URL_PATTERN,
        header_name: str = DEFAULT_HEADER,
    ):
        self.session_id = session_id
        self._context = context
        self._page = page
        self._sink = sink
        self.url_pattern = url_pattern
        self.header_name = header_name
        self._cdp = None
        self._listening = False
        self.captured = False
        self.matched_requests = 0

    @property
    def listening(self) -> bool:
        return self._listening

    async def attach(self):
        """Open a CDP session for the page and subscribe to outbound requests."""
        if self._listening:
            return self

        self._cdp = await self._context.new_cdp_session(self._page)
        await self._cdp.send("Network.enable")
        self._cdp.on(REQUEST_EVENT, self.on_request)
        self._listening = True
        logger.debug(f"Interceptor attached for session {self.session_id}")
        return self

    async def detach(self) -> None:
        """Unsubscribe and detach the CDP session. Never raises."""
        if self._cdp is None:
            return
        cdp, self._cdp = self._cdp, None
        if self._listening:
            try:
                cdp.remove_listener(REQUEST_EVENT, self.on_request)
            except Exception as e:
                logger.debug(f"Listener removal for session {self.session_id} failed: {e}")
            self._listening = False
        try:
            await cdp.detach()
        except Exception as e:
            # Closing the browser also tears the CDP session down.
            logger.debug(f"CDP detach for session {self.session_id} failed: {e}")

    def on_request(self, params: Any) -> None:
        """Handle one ``Network.requestWillBeSent`` event."""
        try:
            value = self.extract(params)
            if value is None or self.captured:
                return
            self._sink(self.session_id, value)
            self.captured = True
        except Exception as e:
            anomaly = InterceptionAnomaly(f"session {self.session_id}: {e}")
            logger.warning(f"Interceptor ignored malformed event: {anomaly}")

    def extract(self, params: Any) -> Optional[str]:
        """Return the target header value if the event is a matching API request."""
        if not isinstance(params, Mapping):
            raise InterceptionAnomaly(f"unexpected event payload {type(params).__name__}")

        request = params.get("request") or {}
        if not isinstance(request, Mapping):
            raise InterceptionAnomaly("event has no request object")

        url = request.get("url") or ""
        if not isinstance(url, str) or self.url_pattern not in url:
            return None

        self.matched_requests += 1
        logger.debug(f"Intercepted API request for session {self.session_id}: {url}")

        value = find_header(request.get("headers"), self.header_name)
        if not value or not value.strip():
            return None
        return value
