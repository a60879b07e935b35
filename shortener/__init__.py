"""Core business logic for URL shortener."""

from .shortcode import ShortCodeGenerator
from .service import URLShortenerService
from .deletion import DeletionPipeline
from .users import UserRegistry

__all__ = ["ShortCodeGenerator", "URLShortenerService", "DeletionPipeline", "UserRegistry"]
