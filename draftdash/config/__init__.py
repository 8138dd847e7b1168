"""Typed configuration providers."""

from .provider import APIConfig, BrowserbaseConfig, ConfigProvider, EnvConfigProvider

__all__ = ["APIConfig", "BrowserbaseConfig", "ConfigProvider", "EnvConfigProvider"]
