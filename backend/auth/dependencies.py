import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from backend.auth import jwt_handler
from backend.core.errors import Forbidden, Unauthenticated
from backend.database import get_db, is_storable_id
from backend.models.user import User

logger = logging.getLogger(__name__)

# auto_error is off so a missing header is reported as 401 by us, not 403.
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Not authorized, no token")

    try:
        user_id = jwt_handler.verify_access_token(credentials.credentials)
    except jwt_handler.InvalidToken as exc:
        logger.info("Rejected token: %s", exc)
        raise Unauthenticated("Not authorized, token failed") from exc

    user = db.get(User, user_id) if is_storable_id(user_id) else None
    if user is None:
        raise Unauthenticated("Not authorized, user not found")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise Forbidden("Not authorized as an admin")
    return current_user
