"""Integration tests for the PostgreSQL store.

Run with a scratch database:

    SNIP_TEST_DATABASE_URL=postgresql://postgres@localhost:5432/snip_test pytest tests/test_postgres.py
"""

import asyncio
import os
import uuid

import pytest

from snip.database.models import ClickEvent, utcnow
from snip.database.postgres import PostgresLinkStore
from snip.errors import DuplicateKeyError
from snip.service import LinkService


DATABASE_URL = os.getenv("SNIP_TEST_DATABASE_URL")

pytestmark = pytest.mark.skipif(not DATABASE_URL, reason="SNIP_TEST_DATABASE_URL not set")


@pytest.fixture
async def pg_store(logger):
    """Store connected to the test database with the schema in place."""
    store = PostgresLinkStore(db_config=DATABASE_URL, click_event_limit=5, logger=logger)
    await store.ensure_tables()
    created = []
    store.created_codes = created
    yield store
    for code in created:
        await store.hard_delete(code)
    await store.close()


def new_code():
    return uuid.uuid4().hex[:12]


class TestPostgresLinkStore:
    """Exercise the store against a real database."""

    async def test_health(self, pg_store):
        assert await pg_store.health_check()

    async def test_create_find_and_duplicate(self, pg_store):
        code = new_code()
        pg_store.created_codes.append(code)

        link = await pg_store.create(code, "https://example.com", None, "alice")
        assert link.clicks == 0
        assert link.is_active

        found = await pg_store.find_by_code(code)
        assert found.original_url == "https://example.com"
        assert found.created_by == "alice"

        with pytest.raises(DuplicateKeyError):
            await pg_store.create(code, "https://other.example", None, "bob")

    async def test_record_click_caps_events(self, pg_store):
        code = new_code()
        pg_store.created_codes.append(code)
        await pg_store.create(code, "https://example.com", None, "alice")

        for i in range(7):
            await pg_store.record_click(code, ClickEvent(timestamp=utcnow(), ip=f"10.0.0.{i}"))

        link = await pg_store.find_with_analytics(code, "alice")
        assert link.clicks == 7
        assert [e.ip for e in link.click_events] == [f"10.0.0.{i}" for i in range(2, 7)]

    async def test_concurrent_clicks(self, pg_store):
        code = new_code()
        pg_store.created_codes.append(code)
        await pg_store.create(code, "https://example.com", None, "alice")

        await asyncio.gather(*[
            pg_store.record_click(code, ClickEvent(timestamp=utcnow()))
            for _ in range(40)
        ])

        link = await pg_store.find_with_analytics(code, "alice")
        assert link.clicks == 40
        assert len(link.click_events) == 5

    async def test_soft_delete_keeps_code_reserved(self, pg_store):
        code = new_code()
        pg_store.created_codes.append(code)
        await pg_store.create(code, "https://example.com", None, "alice")

        assert await pg_store.soft_delete(code, "bob") is None
        assert await pg_store.soft_delete(code, "alice") is not None
        assert await pg_store.soft_delete(code, "alice") is None

        assert await pg_store.find_by_code(code) is None
        assert await pg_store.exists_by_code(code)
        assert await pg_store.record_click(code, ClickEvent(timestamp=utcnow())) is None
        assert (await pg_store.find_with_analytics(code, "alice")).is_active is False

    async def test_find_all_scoped_to_owner(self, pg_store):
        owner = f"owner-{new_code()}"
        codes = [new_code() for _ in range(3)]
        pg_store.created_codes.extend(codes)
        for i, code in enumerate(codes):
            await pg_store.create(code, f"https://example.com/{i}", None, owner)
        await pg_store.record_click(codes[2], ClickEvent(timestamp=utcnow()))

        links, total = await pg_store.find_all(owner=owner)
        assert total == 3
        assert links[0].code == codes[2]
        assert all(link.click_events == [] for link in links)

        links, total = await pg_store.find_all(page=2, limit=2, sort_by="code", order="asc", owner=owner)
        assert [link.code for link in links] == sorted(codes)[2:]
        assert await pg_store.count(owner) == 3
        assert await pg_store.total_clicks(owner) == 1

    async def test_service_round_trip(self, pg_store, logger):
        service = LinkService(store=pg_store, logger=logger)
        owner = f"owner-{new_code()}"

        created = await service.shorten_url("https://example.com/pg", owner=owner)
        pg_store.created_codes.append(created["short_code"])
        again = await service.shorten_url("https://example.com/pg", owner=owner)
        assert again["existing"] is True

        assert await service.resolve_code(created["short_code"], {"ip": "1.2.3.4"}) == "https://example.com/pg"
        await service.wait_for_pending_clicks()

        analytics = await service.get_analytics(created["short_code"], owner=owner)
        assert analytics["total_clicks"] == 1
        assert analytics["click_events"][0]["ip"] == "1.2.3.4"
