"""API routes implementation."""

import logging
from typing import List

from fastapi import APIRouter, Request, HTTPException, status
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from shortener.common.validators import is_valid_original_url, is_ip_in_subnet
from shortener.exceptions import DuplicateURLError, StorageError, UnauthorizedError
from shortener.service import BatchRequestEntry

from ..middleware.gzip import GzipRoute
from .schemas import (
    ShortenRequest,
    ShortenResponse,
    BatchRequestItem,
    BatchResponseItem,
    UserURLResponse,
    StatisticsResponse,
    ErrorResponse,
    ShortIDList,
)

router = APIRouter(route_class=GzipRoute)
logger = logging.getLogger("shortener.web.api")


def _user_id(request: Request) -> str:
    return getattr(request.state, "user_id", "")


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        409: {"model": ShortenResponse, "description": "URL already shortened"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Create short URL",
)
async def shorten_url(request: Request, body: ShortenRequest):
    """Create a shortened URL; a repeated URL answers 409 with the existing one."""
    service = request.app.state.service
    
    is_valid, error = is_valid_original_url(body.url)
    if not is_valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)
    
    status_code = status.HTTP_201_CREATED
    try:
        short_id = await service.shorten_url(body.url, _user_id(request))
    except DuplicateURLError as e:
        short_id = e.short_id
        status_code = status.HTTP_409_CONFLICT
    except UnauthorizedError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    except StorageError as e:
        logger.error(f"Shorten failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error")
    
    return JSONResponse(
        status_code=status_code,
        content=ShortenResponse(result=service.short_url(short_id)).model_dump(),
    )


@router.post(
    "/shorten/batch",
    response_model=List[BatchResponseItem],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"description": "Last URL of the batch was already shortened"},
    },
    summary="Create short URLs in batch",
)
async def shorten_batch(request: Request, body: List[BatchRequestItem]):
    """Shorten several URLs; the status reflects the last entry processed."""
    service = request.app.state.service
    
    for item in body:
        is_valid, error = is_valid_original_url(item.original_url)
        if not is_valid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{item.correlation_id}: {error}",
            )
    
    entries = [
        BatchRequestEntry(correlation_id=item.correlation_id, original_url=item.original_url)
        for item in body
    ]
    try:
        result = await service.shorten_batch(_user_id(request), entries)
    except UnauthorizedError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    except StorageError as e:
        logger.error(f"Batch shorten failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error")
    
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT if result.duplicate else status.HTTP_201_CREATED,
        content=[entry.to_dict() for entry in result.entries],
    )


@router.get(
    "/user/urls",
    response_model=List[UserURLResponse],
    responses={
        204: {"description": "User has no URLs"},
        401: {"description": "Unknown user"},
    },
    summary="List the user's URLs",
)
async def get_user_urls(request: Request):
    """List every URL the current user has shortened."""
    service = request.app.state.service
    
    urls, exists = service.get_user_urls(_user_id(request))
    if not exists:
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)
    if not urls:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    
    return JSONResponse(content=[url.to_dict() for url in urls])


@router.delete(
    "/user/urls",
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        400: {"description": "Body is not a JSON array of short IDs"},
        401: {"description": "No valid auth cookie"},
    },
    summary="Delete the user's URLs",
)
async def delete_user_urls(request: Request):
    """Queue soft-deletion of the listed short IDs and answer 202 right away."""
    service = request.app.state.service
    
    user_id = _user_id(request) if getattr(request.state, "authenticated", False) else ""
    if not user_id:
        return Response("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)
    
    try:
        short_ids = ShortIDList.validate_json(await request.body())
    except ValidationError:
        return Response("Bad Request", status_code=status.HTTP_400_BAD_REQUEST)
    
    try:
        results = service.delete_user_urls(user_id, short_ids)
    except UnauthorizedError:
        return Response("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)
    
    service.deletion.drain(results)
    return Response(status_code=status.HTTP_202_ACCEPTED)


@router.get(
    "/internal/stats",
    response_model=StatisticsResponse,
    responses={403: {"description": "Client IP outside the trusted subnet"}},
    summary="Get statistics",
)
async def get_statistics(request: Request):
    """Counts of URLs and users, for clients inside the trusted subnet only."""
    service = request.app.state.service
    config = request.app.state.config
    
    if not config.trusted_subnet:
        logger.debug("Access denied (empty trusted_subnet)")
        return Response("Forbidden", status_code=status.HTTP_403_FORBIDDEN)
    
    client_ip = request.headers.get("x-real-ip") or (request.client.host if request.client else "")
    if not is_ip_in_subnet(client_ip, config.trusted_subnet):
        logger.debug(f"Access denied for {client_ip} (not in {config.trusted_subnet})")
        return Response("Forbidden", status_code=status.HTTP_403_FORBIDDEN)
    
    return StatisticsResponse(**service.get_statistics())
