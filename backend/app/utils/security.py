import base64
import hashlib
import secrets
from datetime import datetime, timedelta, timezone

import bcrypt

from ..config import RESET_TOKEN_EXPIRE_MINUTES


def _prehash(password: str) -> bytes:
    # bcrypt reads at most 72 bytes; a fixed 44-byte digest keeps every character significant.
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    """
    Salted one-way hash for storage in users.password.

    Raises ValueError for empty passwords.
    """
    if not password:
        raise ValueError("Password is required")

    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(_prehash(password), hashed.encode("utf-8"))
    except ValueError:
        # Stored value isn't a bcrypt hash.
        return False


def generate_reset_token() -> tuple[str, datetime]:
    """Returns (token, expires_at) for a single-use password reset link."""
    token = secrets.token_hex(20)
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=RESET_TOKEN_EXPIRE_MINUTES)
    return token, expires_at
