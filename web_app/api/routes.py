"""API routes implementation."""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from snip.common.headers import public_origin
from snip.errors import LinkServiceError

from .schemas import (
    AnalyticsResponse,
    ErrorResponse,
    HealthResponse,
    LinkListResponse,
    MessageResponse,
    ShortenRequest,
    ShortenResponse,
    StatisticsResponse,
)

router = APIRouter()
logger = logging.getLogger("snip.api")


def get_owner(request: Request) -> str:
    """Caller identity forwarded by the authentication proxy."""
    header = request.app.state.config.owner_header
    owner = (request.headers.get(header) or "").strip()
    if not owner:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {header} header",
        )
    return owner


def request_base_url(request: Request) -> str:
    """Base URL for short links, honouring proxy headers."""
    return public_origin(
        headers=dict(request.headers),
        fallback_base_url=request.app.state.config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )


def to_http_error(request: Request, exc: Exception) -> HTTPException:
    """Map a service failure to an HTTP error without leaking internals."""
    if isinstance(exc, LinkServiceError):
        return HTTPException(status_code=exc.status_code, detail=exc.message)

    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    detail = "Internal server error."
    if request.app.state.config.debug:
        detail = f"Internal error: {exc}"
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies and parameters as 400 with the first reason."""
    errors = exc.errors()
    detail = "Invalid request."
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"Invalid request: {field + ': ' if field else ''}{first.get('msg')}"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@router.get("", summary="API index", include_in_schema=False)
async def api_index():
    """List the available endpoints."""
    return {
        "name": "SNIP link API",
        "endpoints": {
            "POST   /api/links": "Shorten a URL",
            "GET    /api/links": "List your links (paginated)",
            "GET    /api/links/{code}/analytics": "Click analytics for a link",
            "DELETE /api/links/{code}": "Delete a link",
            "GET    /api/stats": "Link and click totals",
            "GET    /api/health": "Health check",
            "GET    /{code}": "Redirect to the original URL",
        },
    }


@router.post(
    "/links",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": ShortenResponse, "description": "Existing link returned"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Missing caller identity"},
        409: {"model": ErrorResponse, "description": "Short code already exists"},
    },
    summary="Create short URL",
    description="Create a shortened URL, optionally with a custom code and an expiry.",
)
async def shorten_url(
    request: Request,
    response: Response,
    body: ShortenRequest,
    owner: str = Depends(get_owner),
):
    """Create a shortened URL."""
    service = request.app.state.service

    try:
        result = await service.shorten_url(
            original_url=body.url,
            custom_code=body.custom_code,
            expires_at=body.expires_at,
            owner=owner,
            base_url=request_base_url(request),
        )
    except Exception as e:
        raise to_http_error(request, e)

    if result["existing"]:
        response.status_code = status.HTTP_200_OK
    return ShortenResponse(**result)


@router.get(
    "/links",
    response_model=LinkListResponse,
    summary="List links",
    description="List the caller's active links, sorted and paginated.",
)
async def list_links(
    request: Request,
    page: int = Query(1, description="Page number, starting at 1"),
    limit: int = Query(50, description="Page size (max 100)"),
    sort_by: str = Query("clicks", description="clicks, created_at or code"),
    order: str = Query("desc", description="asc or desc"),
    owner: str = Depends(get_owner),
):
    """List the caller's links."""
    service = request.app.state.service

    try:
        result = await service.list_links(
            page=page,
            limit=limit,
            sort_by=sort_by,
            order=order,
            owner=owner,
            base_url=request_base_url(request),
        )
    except Exception as e:
        raise to_http_error(request, e)

    return LinkListResponse(**result)


@router.get(
    "/links/{code}/analytics",
    response_model=AnalyticsResponse,
    responses={404: {"model": ErrorResponse, "description": "Link not found"}},
    summary="Link analytics",
    description="Click counter and the most recent click events, newest first.",
)
async def get_analytics(request: Request, code: str, owner: str = Depends(get_owner)):
    """Get analytics for one link."""
    service = request.app.state.service

    try:
        result = await service.get_analytics(code, owner=owner, base_url=request_base_url(request))
    except Exception as e:
        raise to_http_error(request, e)

    return AnalyticsResponse(**result)


@router.delete(
    "/links/{code}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "Link not found"}},
    summary="Delete link",
    description="Soft-delete a link. The code is not released for reuse.",
)
async def delete_link(request: Request, code: str, owner: str = Depends(get_owner)):
    """Delete one of the caller's links."""
    service = request.app.state.service

    try:
        result = await service.delete_link(code, owner=owner)
    except Exception as e:
        raise to_http_error(request, e)

    return MessageResponse(**result)


@router.get(
    "/stats",
    response_model=StatisticsResponse,
    summary="Get statistics",
    description="Totals for the caller's active links.",
)
async def get_statistics(request: Request, owner: str = Depends(get_owner)):
    """Get statistics for the caller."""
    service = request.app.state.service

    try:
        stats = await service.get_statistics(owner=owner)
    except Exception as e:
        raise to_http_error(request, e)

    return StatisticsResponse(**stats)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        uptime_seconds=time.monotonic() - request.app.state.started_at,
        timestamp=datetime.now(timezone.utc),
    )
