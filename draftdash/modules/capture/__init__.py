"""
Capture Module - Black Box Interface

Purpose: Drive the token capture protocol for a polling client
Interface: start(), check(), consume(), end(), sweep()
Hidden: Provisioning order, interceptor wiring, failure cleanup

Only session creation failures are raised to callers; cleanup is best-effort.
"""

from .capture import CaptureService, CaptureStart, TokenStatus

__all__ = ["CaptureService", "CaptureStart", "TokenStatus"]
