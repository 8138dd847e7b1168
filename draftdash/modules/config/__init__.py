"""
Config Module - Black Box Interface

Purpose: Runtime settings for the capture service and the API server
Interface: get_config(), reset_config(), ConfigModule.get()
Hidden: Environment variable names, type coercion, validation

Provider credentials are not part of this module; they are read per request
through draftdash.config.provider so that a missing key only fails the call
that needs it.
"""

import os
from typing import Any, Callable, Dict, Tuple

# Setting name -> (environment variable, default, parser)
_SETTINGS: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "host": ("API_HOST", "0.0.0.0", str),
    "port": ("API_PORT", "3000", int),
    "log_level": ("LOG_LEVEL", "INFO", str.upper),
    "debug": ("DEBUG", "false", lambda v: v.lower() in ("1", "true", "yes")),
    "session_max_age": ("SESSION_MAX_AGE_SECONDS", "300", float),
    "sweep_interval": ("SWEEP_INTERVAL_SECONDS", "0", float),
    "login_url": ("CAPTURE_LOGIN_URL", "https://draft.premierleague.com/", str),
    "target_url_pattern": ("CAPTURE_URL_PATTERN", "draft.premierleague.com/api/", str),
    "target_header": ("CAPTURE_HEADER", "x-api-authorization", str),
    "league_api_base": (
        "LEAGUE_API_BASE",
        "https://draft.premierleague.com/api",
        lambda v: v.rstrip("/"),
    ),
}

REQUIRED_CONFIG_KEYS = {
    "host": "API server bind address",
    "port": "API server port",
    "log_level": "Logging level (DEBUG, INFO, WARNING, ERROR)",
    "session_max_age": "Capture session staleness threshold in seconds",
    "login_url": "Page opened in the remote browser for the user to log in",
    "target_url_pattern": "URL substring identifying upstream API requests",
    "target_header": "Request header carrying the bearer token",
    "league_api_base": "Base URL of the upstream league API",
}

OPTIONAL_CONFIG_KEYS = {
    "debug": {"description": "Auto-reload and verbose errors", "default": False},
    "sweep_interval": {
        "description": "Seconds between background stale-session sweeps (0 disables)",
        "default": 0,
    },
}


class ConfigModule:
    """Settings read once from the environment and validated up front."""

    def __init__(self):
        self._values = {name: self._read(name) for name in _SETTINGS}
        self._validate()

    @staticmethod
    def _read(name: str) -> Any:
        env_var, default, parse = _SETTINGS[name]
        raw = os.getenv(env_var, default)
        try:
            return parse(raw)
        except ValueError as e:
            raise ValueError(f"Invalid value for {env_var}: {raw!r}") from e

    def _validate(self) -> None:
        """
        Raises:
            ValueError: A required setting is empty or a duration is out of range
        """
        empty = [key for key in REQUIRED_CONFIG_KEYS if self._values.get(key) in (None, "")]
        if empty:
            raise ValueError(f"Empty required settings: {', '.join(empty)}")

        if self._values["session_max_age"] <= 0:
            raise ValueError("SESSION_MAX_AGE_SECONDS must be positive")
        if self._values["sweep_interval"] < 0:
            raise ValueError("SWEEP_INTERVAL_SECONDS must not be negative")

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Describe the settings this module understands.

        Example:
            >>> ConfigModule.get_config_schema()["required"]["target_header"]
            'Request header carrying the bearer token'
        """
        return {
            "required": dict(REQUIRED_CONFIG_KEYS),
            "optional": dict(OPTIONAL_CONFIG_KEYS),
        }


_instance = None


def get_config() -> ConfigModule:
    """Return the process-wide settings, loading them on first use."""
    global _instance
    if _instance is None:
        _instance = ConfigModule()
    return _instance


def reset_config() -> None:
    """Drop the cached settings so the next get_config() re-reads the environment."""
    global _instance
    _instance = None


__all__ = ["get_config", "reset_config", "ConfigModule"]
