"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol


@dataclass
class BrowserbaseConfig:
    """Remote browser provider configuration."""
    api_key: Optional[str]
    project_id: Optional[str]
    api_base: str = "https://api.browserbase.com"
    region: str = "us-east-1"
    idle_timeout_seconds: int = 120
    keep_alive: bool = True
    viewport_width: int = 1280
    viewport_height: int = 720
    request_timeout: float = 30.0

    @property
    def is_configured(self) -> bool:
        """Check if provider credentials are present."""
        return bool(self.api_key) and bool(self.project_id)

    @property
    def missing_keys(self) -> List[str]:
        """Names of the environment variables that are not set."""
        missing = []
        if not self.api_key:
            missing.append("BROWSERBASE_API_KEY")
        if not self.project_id:
            missing.append("BROWSERBASE_PROJECT_ID")
        return missing


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_browserbase_config(self) -> BrowserbaseConfig:
        """Get remote browser provider configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider.

    Values are read on every call so credentials added to the environment
    after startup are picked up by the next session start.
    """

    def get_browserbase_config(self) -> BrowserbaseConfig:
        """Get remote browser provider configuration from environment variables."""
        return BrowserbaseConfig(
            api_key=os.getenv("BROWSERBASE_API_KEY") or None,
            project_id=os.getenv("BROWSERBASE_PROJECT_ID") or None,
            api_base=os.getenv("BROWSERBASE_API_BASE", "https://api.browserbase.com").rstrip("/"),
            region=os.getenv("BROWSERBASE_REGION", "us-east-1"),
            idle_timeout_seconds=int(os.getenv("BROWSERBASE_TIMEOUT", "120")),
            keep_alive=os.getenv("BROWSERBASE_KEEP_ALIVE", "true").lower() == "true",
            viewport_width=int(os.getenv("BROWSERBASE_VIEWPORT_WIDTH", "1280")),
            viewport_height=int(os.getenv("BROWSERBASE_VIEWPORT_HEIGHT", "720")),
            request_timeout=float(os.getenv("BROWSERBASE_REQUEST_TIMEOUT", "30")),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=int(os.getenv("API_PORT", "3000")),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=os.getenv("API_DEBUG", "false").lower() == "true",
            cors_origins=os.getenv("CORS_ORIGINS", "*").split(","),
        )
