"""
Draftdash HTTP data models.

These models define the JSON bodies exchanged with the polling client.
Field names on the wire are camelCase.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    model_config = ConfigDict(populate_by_name=True)


# Request Models (API Input)


class SessionRequest(CamelModel):
    """Body of check-token, get-token and end-session."""

    session_id: Optional[str] = Field(
        None, alias="sessionId", description="Capture session identifier"
    )

    @field_validator("session_id")
    @classmethod
    def strip_session_id(cls, v):
        if v is None:
            return v
        v = v.strip()
        return v or None


class BootstrapRequest(CamelModel):
    """Request for the dynamic bootstrap data."""

    bearer_token: Optional[str] = Field(None, alias="bearerToken", description="Captured token")


class LeagueRequest(CamelModel):
    """Request for league-scoped data."""

    bearer_token: Optional[str] = Field(None, alias="bearerToken", description="Captured token")
    league_id: Optional[int] = Field(None, alias="leagueId", ge=1, description="League identifier")


# Response Models (API Output)


class StartSessionResponse(CamelModel):
    """A capture session is running; show viewer_url to the user."""

    session_id: str = Field(..., alias="sessionId")
    viewer_url: str = Field(..., alias="viewerUrl", description="Live view of the remote browser")


class CheckTokenResponse(CamelModel):
    has_token: bool = Field(..., alias="hasToken")
    token: Optional[str] = None


class TokenResponse(CamelModel):
    token: str


class EndSessionResponse(CamelModel):
    success: bool = True


# Error Models


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
