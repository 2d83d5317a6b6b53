"""
Application exceptions.

Each error carries a stable code and a human-readable message in
``detail``, so the HTTP layer can return it unchanged and the WebSocket
layer can forward it as an error frame.
"""
from typing import Optional

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base error with a stable code and message."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "ERROR"
    message: str = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(
            status_code=self.status_code,
            detail={"code": self.code, "message": self.message},
        )

    def __str__(self) -> str:
        return self.message


# --- Input ---

class ValidationError(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    message = "Invalid input"


# --- Credentials / session ---

class AuthError(AppException):
    """Bad credentials. Same message for unknown user and wrong password."""
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CREDENTIALS"
    message = "Invalid username or password"


class UsernameTaken(AuthError):
    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATE_NAME"
    message = "Username already exists"


class NotAuthenticated(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "NOT_AUTHENTICATED"
    message = "Not authenticated"


class SessionExpired(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "SESSION_EXPIRED"
    message = "Session expired or invalid. Please log in again."


# --- Rooms ---

class JoinError(AppException):
    code = "JOIN_ERROR"
    message = "Unable to join room"


class RoomNotFound(JoinError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "ROOM_NOT_FOUND"
    message = "Room not found"


class BadPassword(JoinError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "BAD_PASSWORD"
    message = "Invalid room password"


class RoomFull(JoinError):
    status_code = status.HTTP_409_CONFLICT
    code = "ROOM_FULL"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Room is full (limit: {limit} users)")


class DuplicateName(JoinError):
    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATE_NAME"
    message = "A room with this name already exists"


class NotFound(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Not found"


class NotAMember(AppException):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    message = "Join the room first."


# --- Infrastructure ---

class StoreUnavailable(AppException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "SERVICE_ERROR"
    message = "Chat store unavailable. Please try again."
