"""
Interceptor Module - Black Box Interface

Purpose: Observe a remote page's outbound requests and extract one header
Interface: TrafficInterceptor.attach(), detach(), on_request()
Hidden: CDP session handling, URL and header matching

Can be replaced with proxy-based or response-based interception.
"""

from .interceptor import (
    DEFAULT_HEADER,
    DEFAULT_URL_PATTERN,
    TrafficInterceptor,
    find_header,
)

__all__ = ["DEFAULT_HEADER", "DEFAULT_URL_PATTERN", "TrafficInterceptor", "find_header"]
