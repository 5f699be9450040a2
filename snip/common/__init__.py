"""Common utilities for the link service."""

from .validators import is_valid_url, parse_timestamp
from .headers import parse_forwarded, public_origin, client_ip, build_click_meta
from .logging_config import setup_logging

__all__ = [
    "is_valid_url",
    "parse_timestamp",
    "parse_forwarded",
    "public_origin",
    "client_ip",
    "build_click_meta",
    "setup_logging",
]
