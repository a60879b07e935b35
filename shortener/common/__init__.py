"""Common utilities for URL shortener."""

from .validators import extract_url_from_html, is_valid_original_url, is_ip_in_subnet
from .url_builder import build_short_url
from .logging_config import setup_logging

__all__ = [
    "extract_url_from_html",
    "is_valid_original_url",
    "is_ip_in_subnet",
    "build_short_url",
    "setup_logging",
]
