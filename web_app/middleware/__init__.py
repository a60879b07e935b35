"""Middleware for URL shortener web app."""

from .auth import AuthMiddleware, UserIDSigner, AUTH_COOKIE_NAME
from .gzip import GzipRequest, GzipRoute
from .logging import LoggingMiddleware
from .timeout import TimeoutMiddleware

__all__ = [
    "AuthMiddleware",
    "UserIDSigner",
    "AUTH_COOKIE_NAME",
    "GzipRequest",
    "GzipRoute",
    "LoggingMiddleware",
    "TimeoutMiddleware",
]
