"""Core link shortening, resolution and analytics."""

from .shortcode import ShortCodeGenerator
from .service import LinkService

__all__ = ["ShortCodeGenerator", "LinkService"]
