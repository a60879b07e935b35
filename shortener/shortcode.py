"""Short ID generation."""

import string
from typing import Optional

from nanoid import generate


class ShortCodeGenerator:
    """Generate opaque short IDs for URLs."""
    
    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_letters + string.digits  # a-zA-Z0-9
    
    def __init__(self, default_length: int = 10):
        """Initialize short ID generator.
        
        Args:
            default_length: Default length for generated IDs
        """
        if default_length < 1:
            raise ValueError("default_length must be positive")
        self.default_length = default_length
    
    def generate(self, length: Optional[int] = None) -> str:
        """Generate a random short ID.
        
        Collisions are not retried; with the default length their
        probability is negligible.
        
        Args:
            length: Length of the ID (uses default if not specified)
            
        Returns:
            Random short ID
        """
        length = length or self.default_length
        return generate(self.BASE62_CHARS, length)
