"""Pydantic schemas for API requests and responses."""

from typing import List, Optional

from pydantic import BaseModel, Field, TypeAdapter


class ShortenRequest(BaseModel):
    """Request to shorten a URL."""
    
    url: str = Field(..., description="The URL to shorten")
    
    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "https://example.com/very/long/path/to/resource"},
            ]
        }
    }


class ShortenResponse(BaseModel):
    """Response after shortening a URL."""
    
    result: str = Field(..., description="The complete short URL")
    
    model_config = {
        "json_schema_extra": {
            "examples": [
                {"result": "http://localhost:8080/EwHXdJfB0a"},
            ]
        }
    }


class BatchRequestItem(BaseModel):
    """One URL of a batch request."""
    
    correlation_id: str
    original_url: str


class BatchResponseItem(BaseModel):
    """Short URL for one batch entry, matched by correlation_id."""
    
    correlation_id: str
    short_url: str


class UserURLResponse(BaseModel):
    """A link in the user's listing."""
    
    short_url: str
    original_url: str


class StatisticsResponse(BaseModel):
    """Statistics response."""
    
    urls: int = Field(..., description="Number of shortened URLs")
    users: int = Field(..., description="Number of users")


class ErrorResponse(BaseModel):
    """Error response."""
    
    detail: Optional[str] = Field(None, description="Detailed error information")


# Body of DELETE /api/user/urls
ShortIDList = TypeAdapter(List[str])
