"""
artdid.api - HTTP Boundary
============================

Framework-agnostic handlers that turn HTTP requests into workflow calls and
Outcomes into status codes and JSON bodies.

Usage:
    from artdid.api import RegistryHTTPHandlers
"""

from artdid.api.handlers import (
    STATUS_BY_KIND,
    HTTPResponse,
    RegistryHTTPHandlers,
    error_response,
)

__all__ = [
    "STATUS_BY_KIND",
    "HTTPResponse",
    "RegistryHTTPHandlers",
    "error_response",
]
