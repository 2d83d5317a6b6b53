"""
Authentication router - register/login/logout/session.
"""
from typing import Dict, Any
from fastapi import APIRouter, Depends, Request
from roomsync.core.dependencies import validate_session, get_current_token
from roomsync.service.auth_service import AuthService
from roomsync.schema.auth import UserRegister, UserLogin, LoginResponse, MessageResponse, SessionStatus, UserInfo
from roomsync.store import KeyValueStore, get_store
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register", response_model=LoginResponse, status_code=201)
async def register(
    user_data: UserRegister,
    store: KeyValueStore = Depends(get_store)
):
    """Register a new user and log them in."""
    auth_service = AuthService(store)
    return auth_service.register_user(user_data)


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: UserLogin,
    store: KeyValueStore = Depends(get_store)
):
    """Login and get a session token."""
    auth_service = AuthService(store)
    return auth_service.login(login_data)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    current_user: Dict[str, Any] = Depends(validate_session),
    store: KeyValueStore = Depends(get_store)
):
    """Logout - marks the user offline and invalidates the token."""
    auth_service = AuthService(store)
    token = get_current_token(request)
    auth_service.logout(token, current_user)
    logger.info(f"User logged out: {current_user['username']}")
    return MessageResponse(message="Logged out successfully")


@router.get("/session", response_model=SessionStatus)
async def session_status(
    request: Request,
    store: KeyValueStore = Depends(get_store)
):
    """Current session, if the bearer token is still valid."""
    user = AuthService(store).current_session(request.state.token)
    if user is None:
        return SessionStatus(authenticated=False)
    return SessionStatus(authenticated=True, user=UserInfo.model_validate(user.model_dump()))
