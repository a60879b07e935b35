"""In-memory registry of the links each user has shortened."""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .common.url_builder import build_short_url


@dataclass
class UserURL:
    """A link shown in a user's "my URLs" listing."""
    
    short_url: str
    original_url: str
    
    def to_dict(self) -> dict:
        return {"short_url": self.short_url, "original_url": self.original_url}


class UserRegistry:
    """Maps user ID to the links that user shortened.
    
    Entries are appended on every successful shorten and never removed, so a
    soft-deleted link stays listed. Not persisted.
    """
    
    def __init__(self, base_url: str):
        self.base_url = base_url
        self._urls: Dict[str, List[UserURL]] = {}
    
    def add_url(self, user_id: str, short_id: str, original_url: str) -> None:
        """Record short_id as created by user_id."""
        short_url = build_short_url(short_id, self.base_url)
        self._urls.setdefault(user_id, []).append(
            UserURL(short_url=short_url, original_url=original_url)
        )
    
    def get_user_urls(self, user_id: str) -> Tuple[List[UserURL], bool]:
        """Return (urls, exists) for user_id."""
        if user_id not in self._urls:
            return [], False
        return list(self._urls[user_id]), True
    
    def user_count(self) -> int:
        return len(self._urls)
    
    def url_count(self) -> int:
        return sum(len(urls) for urls in self._urls.values())
