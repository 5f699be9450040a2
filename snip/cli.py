#!/usr/bin/env python3
"""
Command-line admin tool for the link service.

Usage:
    snip-cli shorten <url> --owner ID [--custom-code CODE] [--expires-at ISO]
    snip-cli resolve <code>
    snip-cli list --owner ID [--page N] [--limit N] [--sort-by F] [--order asc|desc]
    snip-cli analytics <code> --owner ID
    snip-cli delete <code> --owner ID
    snip-cli purge <code>
    snip-cli health

The memory backend keeps nothing between runs, so every call starts from an
empty store; use --backend postgres (the default) for real work.
"""

import argparse
import asyncio
import json
import os
import sys
from datetime import datetime
from typing import Any, List, Optional

from .common.logging_config import setup_logging
from .config import Config
from .errors import LinkServiceError
from .factory import build_service
from .service import LinkService


def _json_default(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _emit(payload: dict, error: bool = False) -> None:
    print(
        json.dumps(payload, indent=2, default=_json_default),
        file=sys.stderr if error else sys.stdout,
    )


class SnipCLI:
    """Command-line interface for the link service."""

    def __init__(self, config: Config, verbose: bool = False, service: Optional[LinkService] = None):
        """Initialize CLI."""
        self.config = config
        # stdout carries the JSON result
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING", stream=sys.stderr)
        self.service = service

    async def initialize(self):
        """Build the service unless one was injected."""
        if self.service is None:
            self.service = await build_service(self.config, self.logger)

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    async def run(self, args: argparse.Namespace) -> int:
        """Dispatch one command and print its JSON result."""
        try:
            result = await self._dispatch(args)
        except LinkServiceError as e:
            _emit({"success": False, "error": e.message, "status": e.status_code}, error=True)
            return 1
        except Exception as e:
            self.logger.debug("Command failed", exc_info=True)
            _emit({"success": False, "error": f"Unexpected error: {e}"}, error=True)
            return 1

        _emit({"success": True, "data": result})
        if args.command == "health":
            return 0 if result["health"]["overall"] else 1
        return 0

    async def _dispatch(self, args: argparse.Namespace) -> Any:
        service = self.service

        if args.command == "shorten":
            return await service.shorten_url(
                original_url=args.url,
                custom_code=args.custom_code,
                expires_at=args.expires_at,
                owner=args.owner,
            )
        if args.command == "resolve":
            # Lookups from the CLI are still counted as clicks
            url = await service.resolve_code(args.code, {"user_agent": "snip-cli"})
            await service.wait_for_pending_clicks()
            return {"short_code": args.code, "original_url": url}
        if args.command == "list":
            return await service.list_links(
                page=args.page,
                limit=args.limit,
                sort_by=args.sort_by,
                order=args.order,
                owner=args.owner,
            )
        if args.command == "analytics":
            return await service.get_analytics(args.code, owner=args.owner)
        if args.command == "delete":
            return await service.delete_link(args.code, owner=args.owner)
        if args.command == "purge":
            return await service.purge_link(args.code)
        if args.command == "health":
            return {
                "health": await service.health_check(),
                "statistics": await service.get_statistics(),
            }
        raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snip-cli",
        description="SNIP link service admin CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL
  %(prog)s shorten https://example.com/long/url --owner alice

  # Shorten with custom code and expiry
  %(prog)s shorten https://example.com --owner alice --custom-code promo --expires-at 2030-01-01T00:00:00Z

  # Click analytics
  %(prog)s analytics promo --owner alice

  # Remove a link for good
  %(prog)s purge promo
        """
    )

    parser.add_argument(
        "--backend",
        choices=["memory", "postgres"],
        default=os.getenv("STORE_BACKEND", "postgres"),
        help="Store backend (default: from STORE_BACKEND env or postgres); memory is not kept between runs"
    )
    parser.add_argument(
        "--db-url",
        default=os.getenv("DATABASE_URL", "postgresql://postgres@localhost:5432/snip"),
        help="PostgreSQL connection URL (default: from DATABASE_URL env)"
    )
    parser.add_argument(
        "--redis-url",
        default=os.getenv("REDIS_URL"),
        help="Redis connection URL (optional, default: from REDIS_URL env)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")
    shorten_parser.add_argument("--owner", required=True, help="Owner identifier")
    shorten_parser.add_argument("--custom-code", help="Custom short code")
    shorten_parser.add_argument("--expires-at", help="ISO-8601 expiry timestamp")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a code (counts as a click)")
    resolve_parser.add_argument("code", help="Short code to resolve")

    list_parser = subparsers.add_parser("list", help="List an owner's links")
    list_parser.add_argument("--owner", required=True, help="Owner identifier")
    list_parser.add_argument("--page", type=int, default=1, help="Page number")
    list_parser.add_argument("--limit", type=int, default=50, help="Page size")
    list_parser.add_argument("--sort-by", default="clicks", choices=["clicks", "created_at", "code"])
    list_parser.add_argument("--order", default="desc", choices=["asc", "desc"])

    analytics_parser = subparsers.add_parser("analytics", help="Click analytics for a link")
    analytics_parser.add_argument("code", help="Short code")
    analytics_parser.add_argument("--owner", required=True, help="Owner identifier")

    delete_parser = subparsers.add_parser("delete", help="Soft-delete a link")
    delete_parser.add_argument("code", help="Short code")
    delete_parser.add_argument("--owner", required=True, help="Owner identifier")

    purge_parser = subparsers.add_parser("purge", help="Permanently remove a link")
    purge_parser.add_argument("code", help="Short code")

    subparsers.add_parser("health", help="Check service health")

    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = Config(
        store_backend=args.backend,
        database_url=args.db_url,
        redis_url=args.redis_url,
    )
    cli = SnipCLI(config, verbose=args.verbose)
    if config.store_backend == "memory":
        cli.logger.warning("Memory backend: links do not persist between snip-cli runs")

    try:
        await cli.initialize()
        return await cli.run(args)
    finally:
        await cli.cleanup()


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
