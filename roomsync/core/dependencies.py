"""
FastAPI dependencies for route protection.
"""
from fastapi import Request, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from roomsync.core.exceptions import NotAuthenticated, SessionExpired
from roomsync.model.user import UserPublic
from roomsync.service.auth_service import user_from_session
from typing import Dict, Any, Optional

# Security scheme for OpenAPI docs (shows lock icon and Authorization header)
bearer_scheme = HTTPBearer(
    scheme_name="Bearer",
    description="Session token from register or login",
    auto_error=False,
)


async def validate_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Dict[str, Any]:
    """
    Validates session loaded by middleware.

    Returns:
        Session view dict with user_id, username, created_at

    Raises:
        NotAuthenticated: No token provided
        SessionExpired: Token not found in Redis
    """
    if not credentials and not request.state.token:
        raise NotAuthenticated()

    if not request.state.session:
        raise SessionExpired()

    return request.state.session


async def get_current_user(
    current_user: Dict[str, Any] = Depends(validate_session),
) -> UserPublic:
    return user_from_session(current_user)


def get_current_token(request: Request) -> str:
    """Get current token from request state."""
    if not request.state.token:
        raise NotAuthenticated()
    return request.state.token
