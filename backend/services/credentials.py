import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.auth import jwt_handler
from backend.auth.passwords import hash_password, verify_password
from backend.core.errors import Conflict, InvalidCredentials, NotFound
from backend.database import is_storable_id
from backend.models.user import User
from backend.schemas.user import normalize_email

logger = logging.getLogger(__name__)

USER_EXISTS_MESSAGE = 'User already exists'
INVALID_CREDENTIALS_MESSAGE = 'Invalid credentials'
PROFILE_FIELDS = ('name', 'phone', 'notifications')


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id) if is_storable_id(user_id) else None
    if user is None:
        raise NotFound('User not found')
    return user


def register(db: Session, name: str, email: str, password: str) -> tuple[User, str]:
    if find_user_by_email(db, email) is not None:
        raise Conflict(USER_EXISTS_MESSAGE)

    user = User(
        name=name,
        email=normalize_email(email),
        hashed_password=hash_password(password),
        is_admin=False,
        notifications=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict(USER_EXISTS_MESSAGE) from exc
    db.refresh(user)

    logger.info('Registered user %s', user.id)
    return user, jwt_handler.create_access_token(user.id)


def login(db: Session, email: str, password: str) -> tuple[User, str]:
    user = find_user_by_email(db, email)
    # Same error for unknown email and wrong password.
    if user is None or not verify_password(password, user.hashed_password):
        logger.warning('Failed login attempt')
        raise InvalidCredentials(INVALID_CREDENTIALS_MESSAGE)

    return user, jwt_handler.create_access_token(user.id)


def update_profile(db: Session, user: User, changes: dict) -> User:
    for field, value in changes.items():
        if field in PROFILE_FIELDS:
            setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


def update_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.hashed_password):
        raise InvalidCredentials('Current password is incorrect', status_code=400)

    user.hashed_password = hash_password(new_password)
    db.commit()
    logger.info('Password changed for user %s', user.id)


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.id.asc()).all()


def toggle_admin(db: Session, user_id: int) -> User:
    user = get_user_or_404(db, user_id)
    user.is_admin = not user.is_admin
    db.commit()
    db.refresh(user)

    logger.info('User %s admin flag set to %s', user.id, user.is_admin)
    return user


def promote_admin(db: Session, email: str) -> User:
    user = find_user_by_email(db, email)
    if user is None:
        raise NotFound('User not found')

    user.is_admin = True
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int) -> None:
    user = get_user_or_404(db, user_id)
    db.delete(user)
    db.commit()
    logger.info('Deleted user %s', user_id)
