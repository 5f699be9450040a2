"""Wiring of store, cache, generator and service from configuration."""

import logging

from .config import Config
from .database.base import LinkStoreBase
from .database.cache import RedisCache
from .database.memory import InMemoryLinkStore
from .database.postgres import PostgresLinkStore
from .service import LinkService
from .shortcode import ShortCodeGenerator


def build_store(config: Config, logger: logging.Logger) -> LinkStoreBase:
    """Create the configured link store."""
    if config.store_backend == "postgres":
        logger.info("Using PostgreSQL store")
        return PostgresLinkStore(
            db_config=config.database_url,
            click_event_limit=config.click_event_limit,
            pool_max_size=config.pool_max_size,
            command_timeout_seconds=config.store_timeout_seconds,
            create_tables=config.create_tables,
            logger=logger,
        )

    logger.info("Using in-memory store")
    return InMemoryLinkStore(click_event_limit=config.click_event_limit, logger=logger)


async def build_service(config: Config, logger: logging.Logger) -> LinkService:
    """Create and connect every component the service needs.

    Args:
        config: Application configuration
        logger: Logger shared by all components

    Returns:
        Ready-to-use service
    """
    store = build_store(config, logger)

    cache = None
    if config.redis_url:
        logger.info(f"Connecting to Redis at {config.redis_url}")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger,
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")

    generator = ShortCodeGenerator(default_length=config.short_code_length)
    return LinkService(
        store=store,
        short_code_generator=generator,
        cache=cache,
        logger=logger,
        base_url=config.base_url,
        path_prefix=config.path_prefix,
        enable_custom_codes=config.enable_custom_codes,
        max_collision_retries=config.max_collision_retries,
    )
