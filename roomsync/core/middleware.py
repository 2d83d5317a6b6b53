"""
Session Middleware - loads the current session from Redis for each request.
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from typing import Callable
import logging
import redis
from roomsync.session import extract_token, get_session

logger = logging.getLogger(__name__)


class SessionMiddleware(BaseHTTPMiddleware):
    """Resolves the bearer token to its stored session view."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.session = {}
        request.state.token = None

        token = extract_token(request.headers.get("authorization"))
        if token:
            # Keep the token even if the session is gone, so routes can
            # tell "no token" from "expired session".
            request.state.token = token
            try:
                request.state.session = get_session(token) or {}
            except redis.RedisError as e:
                logger.error(f"Session lookup failed: {e}")

        return await call_next(request)
