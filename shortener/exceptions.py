"""Exceptions raised by the URL shortener core."""

from typing import Optional


class ShortenerError(Exception):
    """Base class for URL shortener errors."""


class DuplicateURLError(ShortenerError):
    """Original URL is already stored as an active record.

    Not a failure: the existing short ID is carried along so the caller can
    still answer with it (HTTP 409).
    """

    def __init__(self, short_id: str, original_url: Optional[str] = None):
        self.short_id = short_id
        self.original_url = original_url
        super().__init__(f"duplicate URL: {original_url} already shortened as {short_id}")


class ShortIDNotFoundError(ShortenerError):
    """Short ID is unknown to the storage backend."""

    def __init__(self, short_id: str):
        self.short_id = short_id
        super().__init__(f"shortID not found: {short_id}")


class UnauthorizedError(ShortenerError):
    """Write attempted without a user ID."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class StorageError(ShortenerError):
    """Storage backend failed (connection, query or log I/O)."""
