from .session_layer import (
    new_token,
    create_session,
    get_session,
    remove_session,
    extract_token,
)

__all__ = [
    "new_token",
    "create_session",
    "get_session",
    "remove_session",
    "extract_token",
]
