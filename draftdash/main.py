#!/usr/bin/env python3
"""
Draftdash - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Runs the API server

All business logic is in the modules, following black box principles.
"""

import asyncio
import logging
import logging.config as log_config
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from playwright.async_api import async_playwright
from starlette.exceptions import HTTPException as StarletteHTTPException

from draftdash import __version__
from draftdash.config.provider import ConfigProvider, EnvConfigProvider
from draftdash.errors import SessionCreationError, TokenNotFoundError
from draftdash.logging_config import get_logging_config
from draftdash.modules.api import (
    BootstrapRequest,
    CheckTokenResponse,
    EndSessionResponse,
    ErrorResponse,
    LeagueRequest,
    SessionRequest,
    StartSessionResponse,
    TokenResponse,
)

# Import modules through their black box interfaces
from draftdash.modules.browser import BrowserbaseProvisioner
from draftdash.modules.capture import CaptureService
from draftdash.modules.config import ConfigModule, get_config
from draftdash.modules.league import LeagueClient, UpstreamError
from draftdash.modules.session import SessionRegistry

# Get configuration
config = get_config()

# Configure logging with access-log suppression and token redaction
log_config.dictConfig(get_logging_config(config.get("log_level")))
logger = logging.getLogger(__name__)


async def sweep_periodically(capture_service: CaptureService, interval: float) -> None:
    """Background stale-session sweep, used only when SWEEP_INTERVAL_SECONDS > 0."""
    while True:
        await asyncio.sleep(interval)
        try:
            removed = await capture_service.sweep()
            if removed:
                logger.info(f"Periodic sweep removed {removed} session(s)")
        except Exception as e:
            logger.error(f"Periodic sweep failed: {e}")


def error_response(status_code: int, message: str, details: Optional[dict] = None) -> JSONResponse:
    body = ErrorResponse(error=message, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


def create_app(
    app_config: Optional[ConfigModule] = None,
    config_provider: Optional[ConfigProvider] = None,
    capture_service: Optional[CaptureService] = None,
    league_client: Optional[LeagueClient] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Modules passed in are used as-is and are not closed at shutdown; missing
    ones are created in the lifespan handler.
    """
    app_config = app_config or config
    config_provider = config_provider or EnvConfigProvider()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - initialize and cleanup resources.
        """
        logger.info("Starting Draftdash API...")
        playwright = None
        owned_provisioner = None
        owned_league = None

        if app.state.capture_service is None:
            playwright = await async_playwright().start()
            owned_provisioner = BrowserbaseProvisioner(config_provider, playwright)
            registry = SessionRegistry(max_age_seconds=app_config.get("session_max_age"))
            app.state.capture_service = CaptureService(
                owned_provisioner,
                registry,
                login_url=app_config.get("login_url"),
                url_pattern=app_config.get("target_url_pattern"),
                header_name=app_config.get("target_header"),
            )
            logger.info("Capture service initialized")

        if app.state.league_client is None:
            owned_league = LeagueClient(app_config.get("league_api_base"))
            app.state.league_client = owned_league

        sweeper = None
        interval = app_config.get("sweep_interval") or 0
        if interval > 0:
            sweeper = asyncio.create_task(
                sweep_periodically(app.state.capture_service, interval)
            )
            logger.info(f"Periodic session sweep every {interval}s")

        logger.info("Draftdash API started successfully")

        yield

        # Shutdown
        logger.info("Shutting down Draftdash API...")
        if sweeper is not None:
            sweeper.cancel()
            try:
                await sweeper
            except asyncio.CancelledError:
                pass

        await app.state.capture_service.shutdown()

        if owned_provisioner is not None:
            await owned_provisioner.close()
        if owned_league is not None:
            await owned_league.close()
        if playwright is not None:
            await playwright.stop()
        logger.info("Draftdash API shutdown complete")

    app = FastAPI(
        title="Draftdash API",
        description="Draftdash - fantasy league token capture and data proxy",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = app_config
    app.state.config_provider = config_provider
    app.state.capture_service = capture_service
    app.state.league_client = league_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config_provider.get_api_config().cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    register_error_handlers(app)
    return app


def get_capture_service(request: Request) -> CaptureService:
    service = request.app.state.capture_service
    if service is None:
        raise HTTPException(503, "Service not initialized")
    return service


def get_league_client(request: Request) -> LeagueClient:
    client = request.app.state.league_client
    if client is None:
        raise HTTPException(503, "Service not initialized")
    return client


def require_session_id(payload: SessionRequest) -> str:
    if not payload.session_id:
        raise HTTPException(400, "Session ID is required")
    return payload.session_id


async def read_session_id(request: Request) -> Optional[str]:
    """Best-effort sessionId lookup; None for anything but a non-blank string."""
    try:
        body = await request.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    session_id = body.get("sessionId")
    if not isinstance(session_id, str):
        return None
    return session_id.strip() or None


def register_routes(app: FastAPI) -> None:
    # Token Capture Endpoints

    @app.post("/api/auth/start-session", response_model=StartSessionResponse)
    async def start_session(request: Request):
        """
        Start a remote browser session for the user to log in.

        Returns:
            200: Session id and live view URL
            500: Credentials missing or provisioning failed
        """
        service = get_capture_service(request)
        started = await service.start()
        return StartSessionResponse(session_id=started.session_id, viewer_url=started.viewer_url)

    @app.post("/api/auth/check-token", response_model=CheckTokenResponse)
    async def check_token(payload: SessionRequest, request: Request):
        """
        Poll for a captured token. No side effects.

        Returns:
            200: hasToken flag and the token (or null)
            400: sessionId missing
        """
        session_id = require_session_id(payload)
        status = get_capture_service(request).check(session_id)
        return CheckTokenResponse(has_token=status.has_token, token=status.token)

    @app.post("/api/auth/get-token", response_model=TokenResponse)
    async def get_token(payload: SessionRequest, request: Request):
        """
        Retrieve the captured token and end the session.

        Returns:
            200: Token
            400: sessionId missing
            404: Token not captured yet
        """
        session_id = require_session_id(payload)
        token = await get_capture_service(request).consume(session_id)
        return TokenResponse(token=token)

    @app.post("/api/auth/end-session", response_model=EndSessionResponse)
    async def end_session(request: Request):
        """
        End a capture session. Always reports success.

        The body is parsed by hand so that a missing, malformed or mistyped
        body still gets the success response.
        """
        session_id = await read_session_id(request)
        service = request.app.state.capture_service
        if session_id is None or service is None:
            return EndSessionResponse(success=True)

        try:
            await service.end(session_id)
        except Exception as e:
            logger.error(f"Error ending session {session_id}: {e}")
        return EndSessionResponse(success=True)

    # League Proxy Endpoints

    @app.post("/api/prem/bootstrap-dynamic")
    async def bootstrap_dynamic(payload: BootstrapRequest, request: Request):
        """
        Relay the dynamic bootstrap data for the logged-in user.

        Returns:
            200: Upstream JSON
            400: bearerToken missing
        """
        if not payload.bearer_token:
            raise HTTPException(400, "Bearer token is required")
        return await get_league_client(request).bootstrap_dynamic(payload.bearer_token)

    @app.post("/api/prem/league-details")
    async def league_details(payload: LeagueRequest, request: Request):
        """
        Relay league details.

        Returns:
            200: Upstream JSON
            400: leagueId or bearerToken missing
        """
        if not payload.league_id:
            raise HTTPException(400, "League ID is required")
        if not payload.bearer_token:
            raise HTTPException(400, "Bearer token is required")
        return await get_league_client(request).league_details(
            payload.bearer_token, payload.league_id
        )

    @app.post("/api/prem/league-element-status")
    async def league_element_status(payload: LeagueRequest, request: Request):
        """
        Relay player ownership for a league.

        Returns:
            200: Upstream JSON
            400: leagueId or bearerToken missing
        """
        if not payload.league_id:
            raise HTTPException(400, "League ID is required")
        if not payload.bearer_token:
            raise HTTPException(400, "Bearer token is required")
        return await get_league_client(request).league_element_status(
            payload.bearer_token, payload.league_id
        )

    @app.post("/api/prem/analyze-players")
    async def analyze_players(payload: LeagueRequest, request: Request):
        """
        Rank every player by points with league ownership, plus team summaries.

        Returns:
            200: players, teamSummaries, positionTypes and counts
            400: leagueId or bearerToken missing
        """
        if not payload.league_id:
            raise HTTPException(400, "League ID is required")
        if not payload.bearer_token:
            raise HTTPException(400, "Bearer token is required")
        return await get_league_client(request).analyze_players(
            payload.bearer_token, payload.league_id
        )

    # Health/Monitoring Endpoints

    @app.get("/healthz")
    async def healthz():
        """
        Minimal liveness check. Unauthenticated, no dependencies.
        """
        return {"status": "ok"}

    @app.get("/health")
    async def health_check(request: Request):
        """
        Health check with capture session counts.

        Returns:
            200: Service healthy
            503: Modules not initialized
        """
        service = request.app.state.capture_service
        provider_ready = request.app.state.config_provider.get_browserbase_config().is_configured
        if service is None:
            return JSONResponse(
                status_code=503,
                content={"status": "unhealthy", "modules": "not initialized"},
            )
        return {
            "status": "healthy",
            "modules": "initialized",
            "browserbase": "configured" if provider_ready else "not configured",
            "sessions": service.registry.stats(),
            "version": __version__,
        }

    @app.get("/metrics")
    async def metrics(request: Request):
        """
        Prometheus-compatible metrics endpoint.
        """
        service = request.app.state.capture_service
        if service is None:
            return Response(content="", status_code=503)

        stats = service.registry.stats()
        metrics_text = f"""# HELP draftdash_capture_sessions Number of live token capture sessions
# TYPE draftdash_capture_sessions gauge
draftdash_capture_sessions {stats["active"]}
# HELP draftdash_captured_tokens Sessions holding a captured token
# TYPE draftdash_captured_tokens gauge
draftdash_captured_tokens {stats["captured"]}
# HELP draftdash_oldest_session_age_seconds Age of the oldest live capture session
# TYPE draftdash_oldest_session_age_seconds gauge
draftdash_oldest_session_age_seconds {stats["oldest_age_seconds"]}
"""
        return Response(content=metrics_text, media_type="text/plain")


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(SessionCreationError)
    async def session_creation_error_handler(request, exc: SessionCreationError):
        """Start failures: missing credentials or provider rejection."""
        logger.error(f"Error creating browser session: {exc}")
        details = None
        if exc.status_code is not None or exc.detail is not None:
            details = {"status": exc.status_code, "detail": exc.detail}
        return error_response(500, str(exc), details)

    @app.exception_handler(TokenNotFoundError)
    async def token_not_found_handler(request, exc: TokenNotFoundError):
        """Not an error for the user: the client keeps polling."""
        return error_response(404, str(exc))

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request, exc: UpstreamError):
        """Relay the upstream league API status."""
        return error_response(exc.status_code, str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request, exc: RequestValidationError):
        """Malformed or missing JSON bodies are client errors."""
        logger.warning(f"Invalid request body for {request.url.path}: {exc.errors()}")
        return error_response(400, "Invalid request body")

    @app.exception_handler(ValueError)
    async def validation_error_handler(request, exc):
        """Handle validation errors."""
        logger.error(f"Validation error: {exc}")
        return error_response(400, str(exc))


app = create_app()


def main() -> None:
    uvicorn.run(
        "draftdash.main:app",
        host=config.get("host"),
        port=config.get("port"),
        log_level=config.get("log_level").lower(),
        reload=config.get("debug"),
        log_config=get_logging_config(config.get("log_level")),
    )


if __name__ == "__main__":
    main()
