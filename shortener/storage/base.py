"""Abstract base class for URL storage backends."""

from abc import ABC, abstractmethod
from typing import List, Tuple


class URLStorageBase(ABC):
    """Contract shared by the memory, file and database backends.
    
    Duplicate detection, soft-deletion and existence checks must behave the
    same on every backend, with one deliberate exception: the database
    backend reports an unknown short ID as deleted, while the memory and
    file backends raise ShortIDNotFoundError.
    """
    
    name = "base"
    
    @abstractmethod
    async def update_data(self, original_url: str, user_id: str) -> str:
        """Store a new mapping for original_url.
        
        Args:
            original_url: The URL to shorten
            user_id: Owner of the new record
            
        Returns:
            The freshly generated short ID
            
        Raises:
            DuplicateURLError: If an active record already holds original_url;
                the existing short ID is attached to the exception
            StorageError: If the backend fails
        """
        pass
    
    @abstractmethod
    async def get_data(self, short_id: str) -> Tuple[str, bool]:
        """Resolve a short ID.
        
        Args:
            short_id: The short ID to lookup
            
        Returns:
            Tuple of (original_url, is_deleted)
            
        Raises:
            ShortIDNotFoundError: Unknown short ID (memory and file backends)
            StorageError: If the backend fails
        """
        pass
    
    @abstractmethod
    async def batch_delete_urls(self, user_id: str, short_ids: List[str]) -> None:
        """Mark every listed short ID owned by user_id as deleted.
        
        Must be safe to call concurrently for disjoint subsets.
        
        Raises:
            StorageError: If the backend fails
        """
        pass
    
    @abstractmethod
    async def ping(self) -> None:
        """Check backend liveness.
        
        Raises:
            StorageError: If the backend is unreachable
        """
        pass
    
    @abstractmethod
    async def close(self) -> None:
        """Release backend resources."""
        pass
