"""
Password digests for user accounts and private rooms.

This is a salted base64 encoding kept for compatibility with existing data.
It is reversible and NOT a security control; swap in an adaptive KDF
(bcrypt, scrypt, argon2) before storing real credentials.
"""
import base64
import hmac
from typing import Optional

from roomsync.core.config import settings


def hash_password(password: str, salt: Optional[str] = None) -> str:
    salted = password + (settings.PASSWORD_SALT if salt is None else salt)
    return base64.b64encode(salted.encode("utf-8")).decode("ascii")


def verify_password(password: str, hashed_password: Optional[str], salt: Optional[str] = None) -> bool:
    if not hashed_password:
        return False
    return hmac.compare_digest(hash_password(password, salt), hashed_password)
