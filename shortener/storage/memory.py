"""In-memory URL storage."""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from ..exceptions import DuplicateURLError, ShortIDNotFoundError
from ..shortcode import ShortCodeGenerator
from .base import URLStorageBase
from .models import ShortLink


class MemoryURLStorage(URLStorageBase):
    """Keeps every ShortLink in a dict guarded by a single lock."""
    
    name = "memory"
    
    def __init__(
        self,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize in-memory storage.
        
        Args:
            short_code_generator: Optional short ID generator
            logger: Optional logger instance
        """
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self._links: Dict[str, ShortLink] = {}
        self._lock = asyncio.Lock()
    
    def __len__(self) -> int:
        return len(self._links)
    
    def _find_active(self, original_url: str) -> Optional[ShortLink]:
        # Linear scan; the caller holds the lock.
        for link in self._links.values():
            if not link.is_deleted and link.original_url == original_url:
                return link
        return None
    
    def _store(self, link: ShortLink) -> None:
        self._links[link.short_id] = link
    
    async def update_data(self, original_url: str, user_id: str) -> str:
        async with self._lock:
            existing = self._find_active(original_url)
            if existing is not None:
                raise DuplicateURLError(existing.short_id, original_url)
            
            link = ShortLink(
                short_id=self.generator.generate(),
                original_url=original_url,
                user_id=user_id,
            )
            self._store(link)
        
        self.logger.debug(f"Stored {link.short_id} -> {original_url}")
        return link.short_id
    
    async def get_data(self, short_id: str) -> Tuple[str, bool]:
        async with self._lock:
            link = self._links.get(short_id)
        
        if link is None:
            raise ShortIDNotFoundError(short_id)
        return link.original_url, link.is_deleted
    
    async def batch_delete_urls(self, user_id: str, short_ids: List[str]) -> None:
        """Soft-delete is a database-only feature: report success, change nothing."""
        self.logger.debug(
            f"{self.name} storage ignores deletion of {len(short_ids)} URLs for user {user_id}"
        )
    
    async def ping(self) -> None:
        return None
    
    async def close(self) -> None:
        return None
