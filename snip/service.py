"""Business logic service for the link shortener."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Set, Union

from .common.validators import is_valid_url, parse_timestamp
from .database.base import LinkStoreBase
from .database.cache import RedisCache
from .database.models import ClickEvent, Link, utcnow
from .errors import (
    CodeConflictError,
    CodeTakenError,
    DuplicateKeyError,
    ExpiredError,
    InvalidCodeError,
    InvalidDateError,
    InvalidUrlError,
    NotFoundError,
    PastExpiryError,
)
from .shortcode import ShortCodeGenerator


MAX_PAGE_SIZE = 100


class LinkService:
    """Service layer for shortening, resolving and analytics."""

    def __init__(
        self,
        store: LinkStoreBase,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        cache: Optional[RedisCache] = None,
        logger: Optional[logging.Logger] = None,
        base_url: str = "http://localhost:9200",
        path_prefix: str = "",
        enable_custom_codes: bool = True,
        max_collision_retries: int = 10,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize link service.

        Args:
            store: Link store instance
            short_code_generator: Optional short code generator
            cache: Optional resolve cache
            logger: Optional logger
            base_url: Default base URL for short links
            path_prefix: Path prefix inserted before the code in short links
            enable_custom_codes: Whether to allow custom short codes
            max_collision_retries: Generated codes tried before giving up
            clock: Returns the current aware UTC time
        """
        self.store = store
        self.generator = short_code_generator or ShortCodeGenerator()
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)
        self.base_url = base_url
        self.path_prefix = path_prefix
        self.enable_custom_codes = enable_custom_codes
        self.max_collision_retries = max_collision_retries
        self.clock = clock or utcnow
        self._pending_clicks: Set[asyncio.Task] = set()

    async def shorten_url(
        self,
        original_url: str,
        custom_code: Optional[str] = None,
        expires_at: Union[str, datetime, None] = None,
        owner: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a short link, or return the owner's existing one.

        Dedup only applies to plain requests: no custom code and no expiry.

        Args:
            original_url: The original long URL
            custom_code: Optional custom short code
            expires_at: Optional expiry (datetime or ISO-8601 string)
            owner: Opaque owner key from the auth layer
            base_url: Base URL for the returned short_url

        Returns:
            Formatted link with an ``existing`` flag

        Raises:
            InvalidUrlError, InvalidDateError, PastExpiryError,
            InvalidCodeError, CodeTakenError, CodeConflictError
        """
        url = self._validate_url(original_url)
        expiry = self._validate_expiry(expires_at)
        custom_code = custom_code or None

        if custom_code is None and expiry is None:
            existing = await self.store.find_by_original_url(url, owner)
            if existing:
                self.logger.debug(f"Dedup hit for {url} -> {existing.code}")
                return {**self.format_link(existing, base_url), "existing": True}

        if custom_code is not None:
            if not self.enable_custom_codes:
                raise InvalidCodeError("Custom short codes are not enabled")
            custom_code = self.generator.validate_custom_code(custom_code)

        link = await self._create_link(url, custom_code, expiry, owner)

        if self.cache:
            await self.cache.set_link(link)

        self.logger.info(f"Created link: {link.code} -> {url}")
        return {**self.format_link(link, base_url), "existing": False}

    async def resolve_code(self, code: str, click_meta: Optional[Dict[str, Any]] = None) -> str:
        """Resolve a short code to its destination and record the click.

        The click is written by a background task; its outcome never affects
        the returned URL.

        Raises:
            NotFoundError: No active link has this code
            ExpiredError: The link is past its expiry
        """
        target = await self._lookup_active(code)
        if target is None:
            raise NotFoundError("Short link not found.")

        original_url, expires_at = target
        if expires_at is not None and self.clock() > expires_at:
            raise ExpiredError("This link has expired.")

        self._schedule_click(code, click_meta)
        return original_url

    async def list_links(
        self,
        page: int = 1,
        limit: int = 50,
        sort_by: str = "clicks",
        order: str = "desc",
        owner: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Page through the owner's active links."""
        page = max(1, page)
        limit = min(max(1, limit), MAX_PAGE_SIZE)

        links, total = await self.store.find_all(
            page=page, limit=limit, sort_by=sort_by, order=order, owner=owner
        )
        return {
            "links": [self.format_link(link, base_url) for link in links],
            "total": total,
            "page": page,
            "limit": limit,
        }

    async def get_analytics(
        self,
        code: str,
        owner: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Link summary with its click log, most recent click first.

        ``total_clicks`` comes from the counter and can exceed the number of
        events kept in the log.
        """
        link = await self.store.find_with_analytics(code, owner)
        if link is None:
            raise NotFoundError(f'Link "{code}" not found.')

        return {
            **self.format_link(link, base_url),
            "total_clicks": link.clicks,
            "click_events": [
                {
                    "timestamp": event.timestamp,
                    "ip": event.ip,
                    "user_agent": event.user_agent,
                    "referer": event.referer,
                }
                for event in reversed(link.click_events)
            ],
        }

    async def delete_link(self, code: str, owner: Optional[str] = None) -> Dict[str, str]:
        """Soft-delete the owner's link. Its code stays reserved."""
        deleted = await self.store.soft_delete(code, owner)
        if deleted is None:
            raise NotFoundError(f'Link "{code}" not found.')

        if self.cache:
            await self.cache.delete(code)

        self.logger.info(f"Deleted link: {code}")
        return {"message": f'Link "{code}" deleted successfully.'}

    async def purge_link(self, code: str) -> Dict[str, str]:
        """Physically remove a link (administrative use only)."""
        removed = await self.store.hard_delete(code)
        if not removed:
            raise NotFoundError(f'Link "{code}" not found.')

        if self.cache:
            await self.cache.delete(code)

        self.logger.warning(f"Purged link: {code}")
        return {"message": f'Link "{code}" purged.'}

    async def get_statistics(self, owner: Optional[str] = None) -> Dict[str, Any]:
        """Get link and click totals."""
        return {
            "total_links": await self.store.count(owner),
            "total_clicks": await self.store.total_clicks(owner),
            "cache_enabled": self.cache is not None and self.cache.enabled,
            "custom_codes_enabled": self.enable_custom_codes,
        }

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check."""
        db_healthy = await self.store.health_check()
        cache_healthy = await self.cache.ping() if self.cache else True

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }

    def format_link(self, link: Link, base_url: Optional[str] = None) -> Dict[str, Any]:
        """Public representation of a link."""
        return {
            "short_code": link.code,
            "short_url": self.short_url(link.code, base_url),
            "original_url": link.original_url,
            "clicks": link.clicks,
            "expires_at": link.expires_at,
            "is_expired": link.is_expired(self.clock()),
            "created_at": link.created_at,
            "updated_at": link.updated_at,
        }

    def short_url(self, code: str, base_url: Optional[str] = None) -> str:
        """``base_url[/path_prefix]/code``; the configured base URL by default."""
        parts = [(base_url or self.base_url).rstrip("/")]
        prefix = self.path_prefix.strip("/")
        if prefix:
            parts.append(prefix)
        parts.append(code)
        return "/".join(parts)

    async def wait_for_pending_clicks(self) -> None:
        """Wait until every scheduled click write has finished."""
        while self._pending_clicks:
            await asyncio.gather(*list(self._pending_clicks))

    async def close(self) -> None:
        """Flush pending clicks and close connections."""
        await self.wait_for_pending_clicks()
        await self.store.close()
        if self.cache:
            await self.cache.close()

    def _validate_url(self, original_url: Optional[str]) -> str:
        url = original_url.strip() if isinstance(original_url, str) else ""
        if not url:
            raise InvalidUrlError("URL is required.")

        is_valid, error = is_valid_url(url)
        if not is_valid:
            raise InvalidUrlError(f"Invalid URL: {error}")
        return url

    def _validate_expiry(self, expires_at: Union[str, datetime, None]) -> Optional[datetime]:
        if expires_at is None or expires_at == "":
            return None

        expiry = parse_timestamp(expires_at)
        if expiry is None:
            raise InvalidDateError("Invalid expires_at date.")
        if expiry <= self.clock():
            raise PastExpiryError("expires_at must be in the future.")
        return expiry

    async def _create_link(
        self,
        url: str,
        custom_code: Optional[str],
        expiry: Optional[datetime],
        owner: Optional[str],
    ) -> Link:
        """Resolve a code and persist, retrying once on a creation race."""
        code = await self._resolve_code(custom_code)
        try:
            return await self.store.create(code, url, expiry, owner)
        except DuplicateKeyError:
            if custom_code is not None:
                raise CodeTakenError(f'Code "{code}" is already taken.')
            self.logger.warning(f"Generated code {code} was taken concurrently, retrying")

        code = await self._generate_unique_code()
        try:
            return await self.store.create(code, url, expiry, owner)
        except DuplicateKeyError:
            raise CodeConflictError("Could not allocate a unique short code, please retry.")

    async def _resolve_code(self, custom_code: Optional[str]) -> str:
        if custom_code is not None:
            if await self.store.exists_by_code(custom_code):
                raise CodeTakenError(f'Code "{custom_code}" is already taken.')
            return custom_code
        return await self._generate_unique_code()

    async def _generate_unique_code(self) -> str:
        """Generate codes until one is unused."""
        for attempt in range(self.max_collision_retries):
            code = self.generator.generate()
            if not await self.store.exists_by_code(code):
                if attempt:
                    self.logger.debug(f"Generated code after {attempt + 1} attempts: {code}")
                return code

        raise CodeConflictError("Unable to generate unique short code after multiple attempts")

    async def _lookup_active(self, code: str):
        """(original_url, expires_at) for an active code, cache first."""
        if self.cache:
            cached = await self.cache.get_link(code)
            if cached:
                self.logger.debug(f"Cache hit for {code}")
                return cached["original_url"], cached["expires_at"]

        link = await self.store.find_by_code(code)
        if link is None:
            return None

        if self.cache:
            await self.cache.set_link(link)
            # A delete may have invalidated the cache before this write landed
            if await self.store.find_by_code(code) is None:
                self.logger.debug(f"Link {code} deleted during cache fill, dropping entry")
                await self.cache.delete(code)
        return link.original_url, link.expires_at

    def _schedule_click(self, code: str, click_meta: Optional[Dict[str, Any]]) -> None:
        event = ClickEvent.from_meta(click_meta, self.clock())
        task = asyncio.create_task(self._record_click(code, event))
        self._pending_clicks.add(task)
        task.add_done_callback(self._pending_clicks.discard)

    async def _record_click(self, code: str, event: ClickEvent) -> None:
        try:
            link = await self.store.record_click(code, event)
        except Exception as e:
            self.logger.error(f"Failed to record click for {code}: {e}")
            return

        if link is None:
            self.logger.warning(f"Click not recorded, link {code} is no longer active")
            if self.cache:
                await self.cache.delete(code)
