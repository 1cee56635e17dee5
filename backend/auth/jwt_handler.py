from datetime import datetime, timedelta, timezone

import jwt

from backend.core import config


class InvalidToken(Exception):
    pass


def create_access_token(user_id: int, expires_days: int | None = None) -> str:
    expire_days = config.JWT_EXPIRES_DAYS if expires_days is None else expires_days
    now = datetime.now(timezone.utc)
    payload = {"sub": str(user_id), "iat": now, "exp": now + timedelta(days=expire_days)}
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def verify_access_token(token: str) -> int:
    """Return the user id a token was issued for.

    Raises ``InvalidToken`` for bad signatures, malformed or expired tokens
    and tokens without a numeric subject.
    """
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise InvalidToken(str(exc)) from exc

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError) as exc:
        raise InvalidToken("Invalid token subject") from exc
