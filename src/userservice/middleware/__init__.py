"""
Middleware around the router.

    MiddlewarePipeline  - builds the chain
    LoggingMiddleware   - access log on "userservice.access"
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
