"""Cookie authentication middleware."""

import logging
import uuid
from typing import Callable, Iterable, Optional

from itsdangerous import BadData, URLSafeSerializer
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse


AUTH_COOKIE_NAME = "AuthToken"
AUTH_COOKIE_MAX_AGE = 30 * 24 * 60 * 60  # 30 days


class UserIDSigner:
    """Signs and verifies the user ID carried in the auth cookie."""
    
    def __init__(self, secret: str):
        self._serializer = URLSafeSerializer(secret, salt=AUTH_COOKIE_NAME)
    
    def encode(self, user_id: str) -> str:
        return self._serializer.dumps(user_id)
    
    def decode(self, token: str) -> Optional[str]:
        """Return the user ID, or None if the signature does not verify."""
        try:
            user_id = self._serializer.loads(token)
        except BadData:
            return None
        return user_id if isinstance(user_id, str) and user_id else None


class AuthMiddleware(BaseHTTPMiddleware):
    """Identify the user from a signed cookie.
    
    A request without the cookie gets a fresh user ID, issued in the
    response; a cookie with a bad signature is rejected with 401. The user
    ID is stored in request.state.user_id and request.state.authenticated
    tells whether it came from a valid cookie.
    """
    
    def __init__(
        self,
        app,
        secret: str,
        exempt_paths: Iterable[str] = (),
        logger: logging.Logger = None,
    ):
        super().__init__(app)
        self.signer = UserIDSigner(secret)
        self.exempt_paths = set(exempt_paths)
        self.logger = logger or logging.getLogger("shortener.web.auth")
    
    async def dispatch(self, request: Request, call_next: Callable):
        request.state.user_id = ""
        request.state.authenticated = False
        
        if request.url.path in self.exempt_paths:
            return await call_next(request)
        
        token = request.cookies.get(AUTH_COOKIE_NAME)
        if not token:
            user_id = str(uuid.uuid4())
            self.logger.debug("Missing auth token, issuing new user ID")
            request.state.user_id = user_id
            
            response = await call_next(request)
            response.set_cookie(
                AUTH_COOKIE_NAME,
                self.signer.encode(user_id),
                max_age=AUTH_COOKIE_MAX_AGE,
                path="/",
                httponly=True,
            )
            return response
        
        user_id = self.signer.decode(token)
        if user_id is None:
            self.logger.debug("Rejected auth token with bad signature")
            return PlainTextResponse("Unauthorized", status_code=401)
        
        request.state.user_id = user_id
        request.state.authenticated = True
        return await call_next(request)
