"""Forwarded headers middleware."""

from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from snip.common.headers import build_click_meta, parse_forwarded


class ForwardedHeadersMiddleware(BaseHTTPMiddleware):
    """Stores the proxy headers and click metadata on ``request.state``."""

    async def dispatch(self, request: Request, call_next: Callable):
        """Process request and extract forwarded headers."""
        headers = dict(request.headers)

        request.state.forwarded = parse_forwarded(headers)
        request.state.click_meta = build_click_meta(
            headers,
            peer_host=request.client.host if request.client else None,
        )

        response = await call_next(request)
        return response
