from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from ..config import ACCESS_TOKEN_EXPIRE_DAYS, SECRET_KEY

ALGORITHM = "HS256"


class TokenError(Exception):
    pass


class TokenExpiredError(TokenError):
    pass


class TokenInvalidError(TokenError):
    pass


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def issue_token(user_id: int) -> str:
    return create_access_token({"sub": str(user_id)})


def decode_access_token(token: str) -> int:
    """
    Returns the user id embedded in `token`.

    Raises TokenExpiredError once `exp` has passed (checked before anything else
    about the claims) and TokenInvalidError for bad signatures, garbage input or
    a missing/non-numeric subject.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError("Token expired") from None
    except JWTError as e:
        raise TokenInvalidError(f"Invalid token: {e}") from None

    # python-jose treats exp == now as still valid; expiry is inclusive here.
    exp = payload.get("exp")
    if exp is not None and int(exp) <= int(datetime.now(timezone.utc).timestamp()):
        raise TokenExpiredError("Token expired")

    sub = payload.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise TokenInvalidError("Token has no valid subject") from None
