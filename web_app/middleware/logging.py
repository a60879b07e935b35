"""Request logging middleware."""

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and one per response.
    
    Server errors are logged at WARNING, everything else at INFO. The user
    ID is the one resolved by AuthMiddleware, empty for exempt paths.
    """
    
    def __init__(self, app, logger: logging.Logger = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("shortener.web")
    
    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        client_ip = request.headers.get("x-real-ip") or (
            request.client.host if request.client else "unknown"
        )
        self.logger.info(f"Request: {request.method} {request.url.path} from {client_ip}")
        
        response = await call_next(request)
        
        duration_ms = (time.perf_counter() - started) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        self.logger.log(
            level,
            f"Response: {request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Size: {response.headers.get('content-length', '-')} - "
            f"User: {getattr(request.state, 'user_id', '') or '-'} - "
            f"Duration: {duration_ms:.2f}ms",
        )
        
        return response
