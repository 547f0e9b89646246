import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from .error_handlers import UnauthorizedError, get_error_message
from .jwt import TokenExpiredError, TokenInvalidError, decode_access_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    user: User
    token: str

    @property
    def user_id(self) -> int:
        return self.user.id


def _bearer_token(request: Request) -> str | None:
    header = (request.headers.get("Authorization") or "").strip()
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> AuthContext:
    """
    Resolve the bearer token on `request` to a stored user.

    Each failure raises UnauthorizedError with its own reason so the frontend
    can tell "log in again" (token_expired) apart from a bad or stale token.
    """
    token = _bearer_token(request)
    if not token:
        raise UnauthorizedError(get_error_message("missing_token"), reason="missing_token")

    try:
        user_id = decode_access_token(token)
    except TokenExpiredError:
        raise UnauthorizedError(get_error_message("token_expired"), reason="token_expired") from None
    except TokenInvalidError as e:
        logger.info("Rejected token: %s", e)
        raise UnauthorizedError(get_error_message("invalid_token"), reason="invalid_token") from None

    # Deleted after the token was issued.
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UnauthorizedError(get_error_message("user_not_found"), reason="user_not_found")

    return AuthContext(user=user, token=token)
