"""
Authentication service.
"""
from typing import Any, Dict, Optional
import uuid

from roomsync.core.exceptions import AuthError, UsernameTaken, ValidationError
from roomsync.crud import user_crud
from roomsync.model.user import UserPublic, UserRecord
from roomsync.schema.auth import UserRegister, UserLogin, LoginResponse, UserInfo
from roomsync.session import create_session, get_session, new_token, remove_session
from roomsync.store import KeyValueStore
from roomsync.utils.passwords import hash_password, verify_password
import logging

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 6


def session_payload(user: UserPublic) -> Dict[str, Any]:
    """Session view as stored under the token."""
    return {
        "user_id": str(user.id),
        "username": user.username,
        "created_at": user.created_at.isoformat(),
        "is_online": user.is_online,
    }


def user_from_session(session: Dict[str, Any]) -> UserPublic:
    return UserPublic(
        id=session["user_id"],
        username=session["username"],
        created_at=session["created_at"],
        is_online=session.get("is_online", True),
    )


class AuthService:
    """Registers users, verifies credentials and manages sessions."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def register_user(self, user_data: UserRegister) -> LoginResponse:
        """Validate, persist a new user (online) and open a session for it."""
        if not user_data.username or not user_data.password:
            raise ValidationError("Username and password are required")
        username = user_data.username.strip()
        if len(username) < USERNAME_MIN_LENGTH:
            raise ValidationError(f"Username must be at least {USERNAME_MIN_LENGTH} characters")
        if len(user_data.password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
        if user_data.password != user_data.confirm_password:
            raise ValidationError("Passwords do not match")

        record = UserRecord(
            username=username,
            password_digest=hash_password(user_data.password),
            is_online=True,
        )
        # Uniqueness is re-checked inside the write transaction.
        user = user_crud.create_unique(self.store, obj_in=record, on_conflict=UsernameTaken)
        logger.info(f"User registered: {user.username} ({user.id})")
        return self._open_session(user.public(), "Registration successful")

    def login(self, login_data: UserLogin) -> LoginResponse:
        """Authenticate and open a session. Unknown user and wrong password look the same."""
        if not login_data.username or not login_data.password:
            raise ValidationError("Username and password are required")

        user = user_crud.get_by_username(self.store, login_data.username)
        if not user or not verify_password(login_data.password, user.password_digest):
            logger.info("Failed login attempt")
            raise AuthError()

        updated = user_crud.set_online(self.store, user_id=user.id, online=True) or user
        logger.info(f"User logged in: {updated.username}")
        return self._open_session(updated.public(), "Login successful")

    def logout(self, token: str, user_data: Dict[str, Any]) -> bool:
        """Mark the user offline and drop the session. Never fails."""
        user_id = user_data.get("user_id")
        if user_id:
            user_crud.set_online(self.store, user_id=uuid.UUID(str(user_id)), online=False)
        return remove_session(token)

    def current_session(self, token: Optional[str]) -> Optional[UserPublic]:
        """Restore the session view for ``token``, or None."""
        if not token:
            return None
        data = get_session(token)
        if not data:
            return None
        return user_from_session(data)

    def _open_session(self, user: UserPublic, message: str) -> LoginResponse:
        token = new_token()
        create_session(token, session_payload(user))
        return LoginResponse(
            message=message,
            access_token=token,
            user=UserInfo.model_validate(user.model_dump()),
        )
