"""
API Module - Black Box Interface

Purpose: HTTP request and response shapes
Interface: Pydantic models used by the routes in draftdash.main
Hidden: Field aliasing and input normalization

The API layer only orchestrates - it contains no business logic.
All logic is delegated to appropriate modules.
"""

from .models import (
    BootstrapRequest,
    CheckTokenResponse,
    EndSessionResponse,
    ErrorResponse,
    LeagueRequest,
    SessionRequest,
    StartSessionResponse,
    TokenResponse,
)

__all__ = [
    "BootstrapRequest",
    "CheckTokenResponse",
    "EndSessionResponse",
    "ErrorResponse",
    "LeagueRequest",
    "SessionRequest",
    "StartSessionResponse",
    "TokenResponse",
]
