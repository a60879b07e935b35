"""Data models for URL storage backends."""

import json
from dataclasses import dataclass


@dataclass
class ShortLink:
    """A stored mapping from short ID to original URL."""
    
    short_id: str
    original_url: str
    user_id: str = ""
    is_deleted: bool = False


@dataclass
class StorageRecord:
    """One line of the append-only backup log."""
    
    uuid: str
    short_url: str
    original_url: str
    
    def to_json(self) -> str:
        """Serialize to a single JSON line (without trailing newline)."""
        return json.dumps({
            "uuid": self.uuid,
            "short_url": self.short_url,
            "original_url": self.original_url,
        })
    
    @classmethod
    def from_json(cls, line: str) -> "StorageRecord":
        """Parse a JSON line.
        
        Raises:
            ValueError: If the line is not a valid record
        """
        data = json.loads(line)
        if not isinstance(data, dict):
            raise ValueError(f"record is not an object: {line!r}")
        try:
            return cls(
                uuid=str(data.get("uuid", "")),
                short_url=data["short_url"],
                original_url=data["original_url"],
            )
        except KeyError as e:
            raise ValueError(f"record is missing field {e}") from e
