import logging
from dataclasses import dataclass
from typing import Any, Optional

from ...errors import ProvisioningError, SessionCreationError, TokenNotFoundError
from ..interceptor import DEFAULT_HEADER, DEFAULT_URL_PATTERN, TrafficInterceptor
from ..session import SessionRegistry, TeardownResult

logger = logging.getLogger(__name__)

DEFAULT_LOGIN_URL = "https://draft.premierleague.com/"


@dataclass
class CaptureStart:
    """What the polling client needs after a successful start."""
    session_id: str
    viewer_url: str


@dataclass
class TokenStatus:
    has_token: bool
    token: Optional[str] = None


class CaptureService:
    def __init__(
        self,
        provisioner: Any,
        registry: SessionRegistry,
        *,
        login_url: str = DEFAULT_LOGIN_URL,
        url_pattern: str = DEFAULT_URL_PATTERN,
        header_name: str = DEFAULT_HEADER,
    ):
        """
        Initialize capture service.

        Args:
            provisioner: Remote browser provisioner (create/release/navigate)
            registry: Session registry owned by this service
            login_url: Page opened in the remote browser
            url_pattern: URL substring of the upstream API requests to watch
            header_name: Header carrying the bearer token
        """
        self.provisioner = provisioner
        self.registry = registry
        self.login_url = login_url
        self.url_pattern = url_pattern
        self.header_name = header_name

    async def start(self) -> CaptureStart:
        """
        Start a new capture session.

        Logic:
        1. Sweep stale sessions
        2. Provision a remote browser
        3. Register it
        4. Attach the interceptor (strictly before navigation)
        5. Navigate to the login page

        Raises:
            ConfigurationError: Provider credentials are missing
            ProvisioningError: Any provisioning step failed; resources
                acquired so far are released first
        """
        await self.sweep()

        try:
            provisioned = await self.provisioner.create_session()
        except SessionCreationError:
            raise
        except Exception as e:
            raise ProvisioningError(f"Failed to create browser session: {e}") from e

        session_id = provisioned.session_id
        self.registry.register(session_id, provisioned.browser)

        try:
            interceptor = TrafficInterceptor(
                session_id,
                provisioned.context,
                provisioned.page,
                sink=self.registry.set_token,
                url_pattern=self.url_pattern,
                header_name=self.header_name,
            )
            self.registry.attach_interceptor(session_id, interceptor)
            await interceptor.attach()
            await self.provisioner.navigate(provisioned.page, self.login_url)
        except Exception as e:
            logger.error(f"Capture session {session_id} failed during setup: {e}")
            await self.registry.teardown(session_id)
            await self.provisioner.release_session(session_id)
            raise ProvisioningError(f"Failed to prepare browser session: {e}") from e

        logger.info(f"Capture session {session_id} started")
        return CaptureStart(session_id=session_id, viewer_url=provisioned.viewer_url)

    def check(self, session_id: str) -> TokenStatus:
        """
        Report whether a token has been captured.

        Pure read; safe to call at any frequency.
        """
        token = self.registry.get_token(session_id)
        return TokenStatus(has_token=token is not None, token=token)

    async def consume(self, session_id: str) -> str:
        """
        Hand out the captured token and end the session.

        Raises:
            TokenNotFoundError: Nothing captured yet, or the session is unknown
        """
        entry = self.registry.get(session_id)
        if entry is None or not entry.has_token:
            raise TokenNotFoundError(session_id)

        token = entry.token
        logger.info(
            f"Handing out token for session {session_id} "
            f"({entry.captured_at - entry.created_at:.1f}s from start to capture)"
        )
        await self.end(session_id)
        return token

    async def end(self, session_id: str) -> TeardownResult:
        """
        End a session. Idempotent and best-effort.

        The local browser handle is closed first; the remote release that
        follows may fail without affecting the result the caller sees.
        """
        result = await self.registry.teardown(session_id)
        await self.provisioner.release_session(session_id)
        return result

    async def sweep(self) -> int:
        """
        Tear down stale sessions and release them remotely.

        Returns:
            Number of sessions removed
        """
        results = await self.registry.sweep_stale()
        for result in results:
            await self.provisioner.release_session(result.session_id)
        return len(results)

    async def shutdown(self) -> None:
        """Tear down and release every remaining session."""
        for result in await self.registry.dispose():
            await self.provisioner.release_session(result.session_id)
