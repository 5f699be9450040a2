"""Persistence layer for the link service."""

from .base import LinkStoreBase
from .memory import InMemoryLinkStore
from .postgres import PostgresLinkStore
from .models import ClickEvent, Link

__all__ = ["LinkStoreBase", "InMemoryLinkStore", "PostgresLinkStore", "ClickEvent", "Link"]
