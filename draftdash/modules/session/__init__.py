"""
Session Module - Black Box Interface

Purpose: Track capture sessions and own their remote browser handles
Interface: register(), set_token(), get_token(), teardown(), sweep_stale()
Hidden: In-memory storage, staleness clock, close bookkeeping

Constructed explicitly and injected; there is no process-wide instance.
"""

from .session import SessionEntry, SessionRegistry, TeardownResult

__all__ = ["SessionEntry", "SessionRegistry", "TeardownResult"]
