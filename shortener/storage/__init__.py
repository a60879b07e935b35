"""Storage backends for URL shortener."""

from .base import URLStorageBase
from .database import DatabaseURLStorage
from .file import FileURLStorage
from .memory import MemoryURLStorage
from .models import ShortLink, StorageRecord
from .selector import select_storage

__all__ = [
    "URLStorageBase",
    "MemoryURLStorage",
    "FileURLStorage",
    "DatabaseURLStorage",
    "ShortLink",
    "StorageRecord",
    "select_storage",
]
