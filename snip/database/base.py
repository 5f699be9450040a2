"""Abstract base class for link store implementations."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from .models import ClickEvent, Link


DEFAULT_CLICK_EVENT_LIMIT = 1000
SORT_FIELDS = ("clicks", "created_at", "code")


def normalize_sort(sort_by: Optional[str], order: Optional[str]) -> Tuple[str, bool]:
    """Return (field, descending) for a listing query.

    Unknown fields fall back to ``clicks``; anything but ``asc`` is descending.
    """
    field = sort_by if sort_by in SORT_FIELDS else "clicks"
    return field, order != "asc"


class LinkStoreBase(ABC):
    """Abstract base class for link persistence.

    Every operation touches a single link record and is atomic on its own.
    """

    def __init__(self, db_config: str, click_event_limit: int = DEFAULT_CLICK_EVENT_LIMIT):
        """Initialize the store.

        Args:
            db_config: Connection string (``memory://`` for the in-process store)
            click_event_limit: Number of click events kept per link
        """
        self.db_config = db_config
        self.click_event_limit = click_event_limit

    @abstractmethod
    async def find_by_code(self, code: str) -> Optional[Link]:
        """Find an active link by its short code."""
        pass

    @abstractmethod
    async def find_by_original_url(self, original_url: str, owner: Optional[str]) -> Optional[Link]:
        """Find the owner's active, non-expiring link for a URL (dedup lookup)."""
        pass

    @abstractmethod
    async def exists_by_code(self, code: str) -> bool:
        """Check whether a code is taken by any link, active or not."""
        pass

    @abstractmethod
    async def create(
        self,
        code: str,
        original_url: str,
        expires_at: Optional[datetime],
        owner: Optional[str],
    ) -> Link:
        """Persist a new link.

        Raises:
            DuplicateKeyError: If the code already exists
        """
        pass

    @abstractmethod
    async def record_click(self, code: str, click: ClickEvent) -> Optional[Link]:
        """Increment clicks and append one event as a single atomic update.

        The event log is trimmed to the most recent ``click_event_limit``
        entries. Only active links are affected.

        Returns:
            The updated link, or None if no active link matched
        """
        pass

    @abstractmethod
    async def find_all(
        self,
        page: int = 1,
        limit: int = 50,
        sort_by: str = "clicks",
        order: str = "desc",
        owner: Optional[str] = None,
    ) -> Tuple[List[Link], int]:
        """List active links without their click logs.

        Returns:
            Tuple of (links on the requested page, total matching links)
        """
        pass

    @abstractmethod
    async def find_with_analytics(self, code: str, owner: Optional[str]) -> Optional[Link]:
        """Fetch the owner's link with its click log, active or not."""
        pass

    @abstractmethod
    async def soft_delete(self, code: str, owner: Optional[str]) -> Optional[Link]:
        """Mark the owner's active link inactive.

        Returns None if the owner has no such link or it is already deleted.
        """
        pass

    @abstractmethod
    async def hard_delete(self, code: str) -> bool:
        """Physically remove a link. Returns True if a record was removed."""
        pass

    @abstractmethod
    async def count(self, owner: Optional[str] = None) -> int:
        """Count active links."""
        pass

    @abstractmethod
    async def total_clicks(self, owner: Optional[str] = None) -> int:
        """Sum of clicks over active links."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is reachable."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        pass
