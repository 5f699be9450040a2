"""Data models for the link service."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _parse_dt(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class ClickEvent:
    """One recorded visit to a short code."""

    timestamp: datetime
    ip: str = "unknown"
    user_agent: str = "unknown"
    referer: Optional[str] = None

    @classmethod
    def from_meta(cls, meta: Optional[dict], timestamp: datetime) -> "ClickEvent":
        """Build an event from request metadata, filling defaults."""
        meta = meta or {}
        return cls(
            timestamp=timestamp,
            ip=meta.get("ip") or "unknown",
            user_agent=meta.get("user_agent") or "unknown",
            referer=meta.get("referer") or None,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "ip": self.ip,
            "user_agent": self.user_agent,
            "referer": self.referer,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ClickEvent":
        """Create from dictionary."""
        return cls(
            timestamp=_parse_dt(data["timestamp"]),
            ip=data.get("ip") or "unknown",
            user_agent=data.get("user_agent") or "unknown",
            referer=data.get("referer"),
        )


@dataclass
class Link:
    """A short code and the URL it points to."""

    code: str
    original_url: str
    created_at: datetime
    updated_at: datetime
    clicks: int = 0
    expires_at: Optional[datetime] = None
    click_events: List[ClickEvent] = field(default_factory=list)
    is_active: bool = True
    created_by: Optional[str] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True when an expiry is set and has passed."""
        if self.expires_at is None:
            return False
        return (now or utcnow()) > self.expires_at

    def copy(self, with_events: bool = True) -> "Link":
        """Detached copy, optionally without the click log."""
        events = list(self.click_events) if with_events else []
        return replace(self, click_events=events)
