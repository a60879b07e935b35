"""Plain HTTP routes: shorten from a raw body, redirect, ping."""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from pydantic import ValidationError

from shortener.common.validators import extract_url_from_html, is_valid_original_url
from shortener.exceptions import (
    DuplicateURLError,
    ShortIDNotFoundError,
    StorageError,
    UnauthorizedError,
)

from ..api.schemas import ShortenRequest
from ..middleware.gzip import GzipRoute

router = APIRouter(route_class=GzipRoute)
logger = logging.getLogger("shortener.web")


async def _original_url_from_body(request: Request) -> str:
    """Extract the URL according to Content-Type; empty string if none found."""
    content_type = request.headers.get("content-type", "")
    body = await request.body()
    
    if "application/json" in content_type:
        try:
            return ShortenRequest.model_validate_json(body).url
        except ValidationError:
            return ""
    
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        return ""
    
    if "text/html" in content_type:
        return extract_url_from_html(text) or ""
    return text.strip()


@router.post("/", include_in_schema=False)
async def shorten_url(request: Request):
    """Shorten the URL in the request body; answer with the short URL as text."""
    service = request.app.state.service
    
    original_url = await _original_url_from_body(request)
    is_valid, error = is_valid_original_url(original_url)
    if not is_valid:
        return PlainTextResponse(f"Bad Request: {error}", status_code=status.HTTP_400_BAD_REQUEST)
    
    status_code = status.HTTP_201_CREATED
    try:
        short_id = await service.shorten_url(original_url, getattr(request.state, "user_id", ""))
    except DuplicateURLError as e:
        short_id = e.short_id
        status_code = status.HTTP_409_CONFLICT
    except UnauthorizedError:
        return PlainTextResponse("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)
    except StorageError as e:
        logger.error(f"Shorten failed: {e}")
        return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    
    return PlainTextResponse(service.short_url(short_id), status_code=status_code)


@router.get("/ping", include_in_schema=False)
async def ping(request: Request):
    """Storage liveness check."""
    service = request.app.state.service
    
    try:
        await service.ping()
    except StorageError as e:
        logger.error(f"Database connection error: {e}")
        return PlainTextResponse("Database connection error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    
    return Response(status_code=status.HTTP_200_OK)


@router.get("/{short_id}", include_in_schema=False)
async def redirect_to_url(request: Request, short_id: str):
    """Redirect to the original URL (307), 410 if deleted, 400 if unknown."""
    service = request.app.state.service
    
    try:
        original_url, is_deleted = await service.get_original_url(short_id)
    except ShortIDNotFoundError:
        return PlainTextResponse("Bad Request", status_code=status.HTTP_400_BAD_REQUEST)
    except StorageError as e:
        logger.error(f"Lookup of {short_id} failed: {e}")
        return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    
    if is_deleted:
        return PlainTextResponse("Gone", status_code=status.HTTP_410_GONE)
    
    return RedirectResponse(url=original_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
