"""
Browser Module - Black Box Interface

Purpose: Provision and release remote headless browsers
Interface: create_session(), release_session(), navigate()
Hidden: Browserbase REST calls, Playwright CDP connection

Can be replaced with any remote browser provider exposing a CDP endpoint.
"""

from .provisioner import BrowserbaseProvisioner, ProvisionedSession

__all__ = ["BrowserbaseProvisioner", "ProvisionedSession"]
