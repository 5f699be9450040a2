#!/usr/bin/env python3
"""
Main entry point for the SNIP link service.

Concurrency: requests are served concurrently by one asyncio event loop per
worker. Click analytics are written by background tasks so redirects never
wait on them. Use WORKERS > 1 only with STORE_BACKEND=postgres; the in-memory
store is per process.

Usage:
    python app.py

Environment variables:
    STORE_BACKEND - 'memory' (default) or 'postgres'
    DATABASE_URL - PostgreSQL connection URL
    CREATE_TABLES - Set to 'true' to create the links table on startup
    REDIS_URL - Redis connection URL (optional resolve cache)
    BASE_URL - Base URL for short links
    OWNER_HEADER - Header carrying the caller identity (default X-Owner-Id)
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from snip.config import load_config
from snip.common.logging_config import setup_logging
from snip.factory import build_service
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service on startup and close it on shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting SNIP link service...")
    service = await build_service(config, logger)
    app.state.service = service
    logger.info("Service started successfully")

    yield

    logger.info("Shutting down SNIP link service...")
    await service.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("SNIP link service")
    logger.debug(f"Configuration: {config.model_dump()}")

    app = create_app(service_instance=None, config=config, lifespan=lifespan)
    app.state.logger = logger

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=False,
    )

    server = uvicorn.Server(uvicorn_config)

    # Setup signal handlers for graceful shutdown
    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
