"""Web interface routes implementation."""

import html

from fastapi import APIRouter, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from snip.common.headers import build_click_meta
from snip.errors import ExpiredError, NotFoundError
from snip.shortcode import ShortCodeGenerator

from .pages import error_page, home_page

router = APIRouter()


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def homepage(request: Request):
    """Serve the homepage."""
    return HTMLResponse(content=home_page())


@router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the original URL and record the click in the background."""
    if not ShortCodeGenerator.is_valid_format(short_code):
        return _error_response(status.HTTP_404_NOT_FOUND, "Link Not Found", "Short link not found.")

    service = request.app.state.service
    click_meta = getattr(request.state, "click_meta", None) or build_click_meta(
        dict(request.headers),
        peer_host=request.client.host if request.client else None,
    )

    try:
        original_url = await service.resolve_code(short_code, click_meta)
    except NotFoundError as e:
        return _error_response(status.HTTP_404_NOT_FOUND, "Link Not Found", e.message)
    except ExpiredError as e:
        return _error_response(status.HTTP_410_GONE, "Link Expired", e.message)

    # 302 so browsers come back through us and every visit is counted
    return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)


def _error_response(status_code: int, title: str, message: str) -> HTMLResponse:
    return HTMLResponse(
        content=error_page(status_code, html.escape(title), html.escape(message)),
        status_code=status_code,
    )
