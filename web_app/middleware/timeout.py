"""Request timeout middleware."""

import asyncio
import logging

from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send


class TimeoutMiddleware:
    """Cancel a request whose handler runs longer than timeout seconds.
    
    The downstream app is cancelled on expiry, so an unfinished handler has
    no further side effects. The client gets 504 unless the response had
    already started, in which case the connection is simply cut. Background
    deletion tasks started by the handler are not affected.
    """
    
    def __init__(self, app: ASGIApp, timeout: float, logger: logging.Logger = None):
        self.app = app
        self.timeout = timeout
        self.logger = logger or logging.getLogger("shortener.web")
    
    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        
        response_started = False
        
        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)
        
        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.timeout)
        except asyncio.TimeoutError:
            self.logger.warning(
                f"Request timed out after {self.timeout}s: {scope['method']} {scope['path']}"
            )
            if not response_started:
                response = PlainTextResponse("Gateway Timeout", status_code=504)
                await response(scope, receive, send)
