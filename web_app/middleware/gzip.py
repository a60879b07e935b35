"""Decoding of gzip-compressed request bodies."""

import gzip
import zlib
from typing import Callable

from fastapi import HTTPException, status
from fastapi.routing import APIRoute
from starlette.requests import Request
from starlette.responses import Response


class GzipRequest(Request):
    """Request whose body is transparently gunzipped when Content-Encoding says so."""
    
    async def body(self) -> bytes:
        if not hasattr(self, "_body"):
            body = await super().body()
            if "gzip" in self.headers.getlist("Content-Encoding"):
                try:
                    body = gzip.decompress(body)
                except (OSError, EOFError, zlib.error):
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail="Bad Request: Unable to decode gzip body",
                    )
            self._body = body
        return self._body


class GzipRoute(APIRoute):
    """API route that hands handlers a GzipRequest."""
    
    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()
        
        async def custom_route_handler(request: Request) -> Response:
            request = GzipRequest(request.scope, request.receive)
            return await original_route_handler(request)
        
        return custom_route_handler
