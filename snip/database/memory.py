"""In-process link store.

Keeps links in a dict keyed by code. A single ``asyncio.Lock`` makes every
mutating operation atomic with respect to other coroutines on the loop, which
is what the uniqueness and click-count guarantees need. Data lives only as
long as the process, so this backend is meant for tests, local runs and
single-worker deployments.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import DuplicateKeyError
from .base import DEFAULT_CLICK_EVENT_LIMIT, LinkStoreBase, normalize_sort
from .models import ClickEvent, Link, utcnow


class InMemoryLinkStore(LinkStoreBase):
    """Dict-backed implementation of the link store."""

    def __init__(
        self,
        db_config: str = "memory://",
        click_event_limit: int = DEFAULT_CLICK_EVENT_LIMIT,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(db_config, click_event_limit)
        self.clock = clock or utcnow
        self.logger = logger or logging.getLogger(__name__)
        self._links: Dict[str, Link] = {}
        self._lock = asyncio.Lock()

    async def find_by_code(self, code: str) -> Optional[Link]:
        link = self._links.get(code)
        if link is None or not link.is_active:
            return None
        return link.copy()

    async def find_by_original_url(self, original_url: str, owner: Optional[str]) -> Optional[Link]:
        for link in self._links.values():
            if (
                link.is_active
                and link.original_url == original_url
                and link.created_by == owner
                and link.expires_at is None
            ):
                return link.copy()
        return None

    async def exists_by_code(self, code: str) -> bool:
        return code in self._links

    async def create(
        self,
        code: str,
        original_url: str,
        expires_at: Optional[datetime],
        owner: Optional[str],
    ) -> Link:
        async with self._lock:
            if code in self._links:
                self.logger.warning(f"Short code already exists: {code}")
                raise DuplicateKeyError(code)

            now = self.clock()
            link = Link(
                code=code,
                original_url=original_url,
                created_at=now,
                updated_at=now,
                expires_at=expires_at,
                created_by=owner,
            )
            self._links[code] = link
            return link.copy()

    async def record_click(self, code: str, click: ClickEvent) -> Optional[Link]:
        async with self._lock:
            link = self._links.get(code)
            if link is None or not link.is_active:
                return None

            link.clicks += 1
            link.click_events.append(click)
            overflow = len(link.click_events) - self.click_event_limit
            if overflow > 0:
                del link.click_events[:overflow]
            link.updated_at = self.clock()
            return link.copy()

    async def find_all(
        self,
        page: int = 1,
        limit: int = 50,
        sort_by: str = "clicks",
        order: str = "desc",
        owner: Optional[str] = None,
    ) -> Tuple[List[Link], int]:
        field, descending = normalize_sort(sort_by, order)

        matches = [
            link for link in self._links.values()
            if link.is_active and (owner is None or link.created_by == owner)
        ]
        matches.sort(key=lambda l: (getattr(l, field), l.code), reverse=descending)

        skip = (page - 1) * limit
        links = [link.copy(with_events=False) for link in matches[skip:skip + limit]]
        return links, len(matches)

    async def find_with_analytics(self, code: str, owner: Optional[str]) -> Optional[Link]:
        link = self._links.get(code)
        if link is None or link.created_by != owner:
            return None
        return link.copy()

    async def soft_delete(self, code: str, owner: Optional[str]) -> Optional[Link]:
        async with self._lock:
            link = self._links.get(code)
            if link is None or not link.is_active or link.created_by != owner:
                return None
            link.is_active = False
            link.updated_at = self.clock()
            return link.copy()

    async def hard_delete(self, code: str) -> bool:
        async with self._lock:
            return self._links.pop(code, None) is not None

    async def count(self, owner: Optional[str] = None) -> int:
        return sum(
            1 for link in self._links.values()
            if link.is_active and (owner is None or link.created_by == owner)
        )

    async def total_clicks(self, owner: Optional[str] = None) -> int:
        return sum(
            link.clicks for link in self._links.values()
            if link.is_active and (owner is None or link.created_by == owner)
        )

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self.logger.debug(f"Closing in-memory store with {len(self._links)} links")
