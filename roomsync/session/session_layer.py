"""
Session layer - Redis-backed current-session store and token handling.

A session is the public view of the logged-in user (no password digest),
stored under ``session:<token>`` with a TTL.
"""
from typing import Optional, Dict, Any
import logging
import json
import secrets

from roomsync.core.config import settings
from roomsync.store import get_redis_client

logger = logging.getLogger(__name__)


def _session_key(token: str) -> str:
    return f"{settings.KEY_PREFIX}session:{token}"


def new_token() -> str:
    return secrets.token_urlsafe(32)


def create_session(token: str, user_data: Dict[str, Any]) -> None:
    """Store token and user view in Redis with TTL."""
    client = get_redis_client()
    client.setex(_session_key(token), settings.SESSION_TTL, json.dumps(user_data, default=str))
    logger.info(f"Session created for user: {user_data.get('username')}")


def get_session(token: str) -> Optional[Dict[str, Any]]:
    """Get user view from Redis if token exists."""
    client = get_redis_client()
    data = client.get(_session_key(token))
    if data:
        return json.loads(data)
    return None


def remove_session(token: str) -> bool:
    """Remove token from Redis (logout)."""
    client = get_redis_client()
    result = client.delete(_session_key(token))
    if result > 0:
        logger.info("Session removed for token")
        return True
    return False


def extract_token(auth_header: Optional[str]) -> Optional[str]:
    """Extract bearer token from Authorization header."""
    if not auth_header:
        return None

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]
