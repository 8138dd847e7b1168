import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    """State for one token capture attempt."""

    session_id: str
    browser: Any
    interceptor: Any = None
    token: Optional[str] = None
    created_at: float = 0.0
    captured_at: Optional[float] = None
    closed: bool = False

    @property
    def has_token(self) -> bool:
        return self.token is not None


@dataclass
class TeardownResult:
    """Outcome of a best-effort teardown. Callers are free to ignore it."""

    session_id: str
    found: bool
    browser_closed: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SessionRegistry:
    def __init__(
        self,
        max_age_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize session registry.

        Args:
            max_age_seconds: Staleness threshold used by sweep_stale (5 minutes)
            clock: Monotonic time source, injectable for tests
        """
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._sessions: Dict[str, SessionEntry] = {}

    def register(self, session_id: str, browser: Any, interceptor: Any = None) -> SessionEntry:
        """
        Register a freshly provisioned browser under its session id.

        An existing entry with the same id is overwritten; ids are issued by
        the remote browser provider and are unique.
        """
        entry = SessionEntry(
            session_id=session_id,
            browser=browser,
            interceptor=interceptor,
            created_at=self._clock(),
        )
        self._sessions[session_id] = entry
        logger.info(f"Registered capture session {session_id}")
        return entry

    def attach_interceptor(self, session_id: str, interceptor: Any) -> bool:
        """Record the interceptor so teardown can unsubscribe it."""
        entry = self._sessions.get(session_id)
        if entry is None:
            return False
        entry.interceptor = interceptor
        return True

    def set_token(self, session_id: str, token: str) -> bool:
        """
        Store a captured token. First write wins.

        Returns:
            True if the token was stored, False if the session is unknown
            or already holds a token
        """
        entry = self._sessions.get(session_id)
        if entry is None:
            logger.debug(f"Token for unknown session {session_id} ignored")
            return False
        if entry.token is not None:
            return False

        entry.token = token
        entry.captured_at = self._clock()
        logger.info(f"Token captured for session {session_id}")
        return True

    def get_token(self, session_id: str) -> Optional[str]:
        entry = self._sessions.get(session_id)
        return entry.token if entry else None

    def get(self, session_id: str) -> Optional[SessionEntry]:
        return self._sessions.get(session_id)

    def session_ids(self) -> List[str]:
        return list(self._sessions)

    def age(self, session_id: str) -> Optional[float]:
        """Seconds since registration, or None for unknown sessions."""
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        return self._clock() - entry.created_at

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    async def teardown(self, session_id: str) -> TeardownResult:
        """
        Detach the interceptor, close the browser and forget the session.

        Idempotent: unknown ids are a no-op. The entry leaves the map before
        the close is awaited, so a concurrent teardown of the same id finds
        nothing and the browser is closed exactly once.

        Close failures are reported in the result, never raised.
        """
        entry = self._sessions.pop(session_id, None)
        if entry is None:
            return TeardownResult(session_id=session_id, found=False)

        result = TeardownResult(session_id=session_id, found=True)

        if entry.interceptor is not None:
            try:
                await entry.interceptor.detach()
            except Exception as e:
                logger.debug(f"Interceptor detach failed for {session_id}: {e}")

        if entry.browser is not None and not entry.closed:
            entry.closed = True
            try:
                await entry.browser.close()
                result.browser_closed = True
            except Exception as e:
                result.error = str(e) or e.__class__.__name__
                logger.warning(f"Failed to close browser for session {session_id}: {e}")

        logger.info(f"Capture session {session_id} torn down")
        return result

    async def sweep_stale(self, max_age_seconds: Optional[float] = None) -> List[TeardownResult]:
        """
        Tear down every session older than the threshold.

        Args:
            max_age_seconds: Override for the registry default

        Returns:
            One TeardownResult per removed session
        """
        threshold = self.max_age_seconds if max_age_seconds is None else max_age_seconds
        now = self._clock()
        stale = [
            sid for sid, entry in self._sessions.items() if now - entry.created_at > threshold
        ]

        results = []
        for session_id in stale:
            results.append(await self.teardown(session_id))

        if results:
            logger.info(f"Swept {len(results)} stale capture session(s)")
        return results

    async def dispose(self) -> List[TeardownResult]:
        """Tear down every remaining session (application shutdown)."""
        results = []
        for session_id in self.session_ids():
            results.append(await self.teardown(session_id))
        return results

    def stats(self) -> dict:
        """Return session counts and the oldest session's age for health and metrics."""
        captured = sum(1 for entry in self._sessions.values() if entry.has_token)
        ages = [self.age(session_id) for session_id in self.session_ids()]
        return {
            "active": len(self._sessions),
            "captured": captured,
            "waiting": len(self._sessions) - captured,
            "oldest_age_seconds": round(max(ages), 1) if ages else 0.0,
        }
