"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ShortenRequest(BaseModel):
    """Request to shorten a URL."""

    url: str = Field(..., description="The URL to shorten (http or https, at most 2048 characters)")
    custom_code: Optional[str] = Field(None, description="Optional custom short code (2-30 chars)")
    expires_at: Optional[str] = Field(None, description="Optional ISO-8601 expiry in the future")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "https://example.com/very/long/path/to/resource",
                    "custom_code": None,
                    "expires_at": None
                },
                {
                    "url": "https://github.com/user/repo",
                    "custom_code": "myrepo",
                    "expires_at": "2030-01-01T00:00:00Z"
                }
            ]
        }
    }


class LinkResponse(BaseModel):
    """A short link as returned by the API."""

    short_code: str = Field(..., description="The short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original long URL")
    clicks: int = Field(..., description="Total recorded clicks")
    expires_at: Optional[datetime] = Field(None, description="Expiry timestamp, if any")
    is_expired: bool = Field(..., description="Whether the link is past its expiry")
    created_at: datetime
    updated_at: datetime


class ShortenResponse(LinkResponse):
    """Response after shortening a URL."""

    existing: bool = Field(..., description="True if an existing link was returned instead of a new one")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "short_code": "aB3dE7x",
                    "short_url": "https://short.link/aB3dE7x",
                    "original_url": "https://example.com/very/long/path",
                    "clicks": 0,
                    "expires_at": None,
                    "is_expired": False,
                    "created_at": "2024-01-01T12:00:00Z",
                    "updated_at": "2024-01-01T12:00:00Z",
                    "existing": False
                }
            ]
        }
    }


class LinkListResponse(BaseModel):
    """A page of links."""

    links: List[LinkResponse]
    total: int
    page: int
    limit: int


class ClickEventResponse(BaseModel):
    """One recorded click."""

    timestamp: datetime
    ip: str
    user_agent: str
    referer: Optional[str] = None


class AnalyticsResponse(LinkResponse):
    """Link summary with its click log, most recent first."""

    total_clicks: int
    click_events: List[ClickEventResponse]


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Overall status")
    database: str = Field(..., description="Store status")
    cache: str = Field(..., description="Cache status")
    uptime_seconds: float = Field(..., description="Seconds since the app was created")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str = Field(..., description="Error message")


class StatisticsResponse(BaseModel):
    """Statistics response."""

    total_links: int
    total_clicks: int
    cache_enabled: bool
    custom_codes_enabled: bool
