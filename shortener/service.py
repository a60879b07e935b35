"""Business logic service for URL shortener."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .common.url_builder import build_short_url
from .deletion import DeletionPipeline, DeletionResults
from .exceptions import DuplicateURLError, UnauthorizedError
from .storage.base import URLStorageBase
from .users import UserRegistry, UserURL


@dataclass
class BatchRequestEntry:
    """One URL of a batch shorten request."""
    
    correlation_id: str
    original_url: str


@dataclass
class BatchResponseEntry:
    """Short URL produced for one batch entry."""
    
    correlation_id: str
    short_url: str
    
    def to_dict(self) -> dict:
        return {"correlation_id": self.correlation_id, "short_url": self.short_url}


@dataclass
class BatchResult:
    """Outcome of a batch shorten.
    
    error holds the error of the last processed entry only, so a duplicate
    earlier in the batch does not show up here if the last entry was new.
    """
    
    entries: List[BatchResponseEntry] = field(default_factory=list)
    error: Optional[Exception] = None
    
    @property
    def duplicate(self) -> bool:
        return isinstance(self.error, DuplicateURLError)


class URLShortenerService:
    """Service layer for URL shortening business logic."""
    
    def __init__(
        self,
        storage: URLStorageBase,
        registry: UserRegistry,
        base_url: str,
        deletion_pipeline: Optional[DeletionPipeline] = None,
        num_workers: int = 15,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize URL shortener service.
        
        Args:
            storage: Storage backend selected at startup
            registry: Ownership registry for "my URLs" listings and statistics
            base_url: Base URL prepended to short IDs
            deletion_pipeline: Optional pipeline (built from storage if omitted)
            num_workers: Worker count for the default pipeline
            logger: Optional logger
        """
        self.storage = storage
        self.registry = registry
        self.base_url = base_url
        self.logger = logger or logging.getLogger(__name__)
        self.deletion = deletion_pipeline or DeletionPipeline(
            storage,
            num_workers=num_workers,
            logger=self.logger,
        )
    
    def short_url(self, short_id: str) -> str:
        """Build the public short URL for short_id."""
        return build_short_url(short_id, self.base_url)
    
    async def shorten_url(self, original_url: str, user_id: str) -> str:
        """Shorten a URL on behalf of user_id.
        
        Ownership is recorded even when the URL was already stored, so the
        user's listing grows on every call.
        
        Args:
            original_url: The URL to shorten
            user_id: The requesting user
            
        Returns:
            The new short ID
            
        Raises:
            UnauthorizedError: If user_id is empty
            DuplicateURLError: If the URL is already stored (carries the
                existing short ID)
            StorageError: If the backend fails
        """
        if not user_id:
            raise UnauthorizedError()
        
        try:
            short_id = await self.storage.update_data(original_url, user_id)
        except DuplicateURLError as e:
            self.registry.add_url(user_id, e.short_id, original_url)
            self.logger.info(f"Duplicate URL {original_url} -> {e.short_id}")
            raise
        
        self.registry.add_url(user_id, short_id, original_url)
        self.logger.info(f"Created short URL: {short_id} -> {original_url}")
        return short_id
    
    async def shorten_batch(self, user_id: str, entries: List[BatchRequestEntry]) -> BatchResult:
        """Shorten several URLs sequentially.
        
        Duplicates still produce an entry carrying the existing short URL.
        Only non-duplicate entries are recorded in the user's listing.
        
        Raises:
            UnauthorizedError: If user_id is empty
            StorageError: If the backend fails
        """
        if not user_id:
            raise UnauthorizedError()
        
        result = BatchResult()
        for entry in entries:
            try:
                short_id = await self.storage.update_data(entry.original_url, user_id)
                result.error = None
                self.registry.add_url(user_id, short_id, entry.original_url)
            except DuplicateURLError as e:
                short_id = e.short_id
                result.error = e
            
            result.entries.append(BatchResponseEntry(
                correlation_id=entry.correlation_id,
                short_url=self.short_url(short_id),
            ))
        
        self.logger.info(f"Batch shortened {len(result.entries)} URLs for user {user_id}")
        return result
    
    async def get_original_url(self, short_id: str) -> Tuple[str, bool]:
        """Resolve short_id.
        
        Returns:
            Tuple of (original_url, is_deleted); a deleted link yields ("", True)
            
        Raises:
            ShortIDNotFoundError: Unknown short ID (memory and file backends)
            StorageError: If the backend fails
        """
        original_url, is_deleted = await self.storage.get_data(short_id)
        if is_deleted:
            return "", True
        return original_url, False
    
    def get_user_urls(self, user_id: str) -> Tuple[List[UserURL], bool]:
        """Return (urls, exists) from the ownership registry."""
        return self.registry.get_user_urls(user_id)
    
    def delete_user_urls(self, user_id: str, short_ids: List[str]) -> DeletionResults:
        """Launch soft-deletion of short_ids and return without waiting.
        
        Raises:
            UnauthorizedError: If user_id is empty
        """
        if not user_id:
            raise UnauthorizedError()
        return self.deletion.submit(user_id, short_ids)
    
    async def ping(self) -> None:
        """Check storage liveness; raises StorageError when unreachable."""
        await self.storage.ping()
    
    def get_statistics(self) -> Dict[str, int]:
        """Count of shortened URLs and of users, from the ownership registry."""
        return {
            "urls": self.registry.url_count(),
            "users": self.registry.user_count(),
        }
    
    async def close(self) -> None:
        """Let running deletions finish, then close the storage."""
        await self.deletion.join()
        await self.storage.close()
