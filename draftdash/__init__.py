"""
Draftdash - Fantasy League Dashboard Backend

A service that captures a fantasy-league API bearer token through a
remote, human-driven browser session and proxies league data requests.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- browser: Remote browser provisioning (Browserbase + Playwright)
- interceptor: DevTools network traffic interception
- session: Capture session registry and lifecycle bookkeeping
- capture: Token capture orchestration (start / check / consume / end)
- league: Upstream league API proxy
- config: Runtime configuration
- api: HTTP request/response models
"""

__version__ = "1.0.0"
