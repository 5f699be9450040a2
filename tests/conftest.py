"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from snip.common.logging_config import setup_logging
from snip.database.memory import InMemoryLinkStore
from snip.service import LinkService
from snip.shortcode import ShortCodeGenerator


class FakeClock:
    """Controllable clock returning aware UTC datetimes."""

    def __init__(self, start: datetime = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class SequenceBytes:
    """Random source that replays byte strings, then falls back to counting."""

    def __init__(self, *chunks: bytes):
        self.chunks = list(chunks)
        self.counter = 0

    def __call__(self, n: int) -> bytes:
        if self.chunks:
            return self.chunks.pop(0)[:n]
        self.counter += 1
        return bytes((self.counter + i) % 256 for i in range(n))


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def clock():
    """Fixed clock that tests can move forward."""
    return FakeClock()


@pytest.fixture
def store(clock, logger):
    """In-memory link store."""
    return InMemoryLinkStore(clock=clock, logger=logger)


@pytest.fixture
def sequence_bytes():
    """Factory for replayable random sources."""
    return SequenceBytes


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=7)


@pytest.fixture
async def service(store, short_code_generator, clock, logger):
    """Create service instance."""
    service = LinkService(
        store=store,
        short_code_generator=short_code_generator,
        logger=logger,
        base_url="https://sn.ip",
        clock=clock,
    )
    yield service
    await service.wait_for_pending_clicks()


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
