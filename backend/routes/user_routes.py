from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_user, require_admin
from backend.database import get_db
from backend.models.user import User
from backend.schemas.user import (
    MessageResponse,
    PasswordUpdateRequest,
    ProfileUpdateRequest,
    UserResponse,
)
from backend.services import credentials

router = APIRouter(tags=['users'])


@router.put('/profile', response_model=UserResponse)
def update_profile(
    data: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return credentials.update_profile(db, current_user, data.provided_changes())


@router.put('/password', response_model=MessageResponse)
def update_password(
    data: PasswordUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    credentials.update_password(db, current_user, data.current_password, data.new_password)
    return MessageResponse(message='Password updated successfully')


@router.get('', response_model=list[UserResponse])
def list_users(
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return credentials.list_users(db)


@router.delete('/{user_id}', response_model=MessageResponse)
def delete_user(
    user_id: int,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    credentials.delete_user(db, user_id)
    return MessageResponse(message='User removed')


@router.put('/{user_id}/toggle-admin', response_model=UserResponse)
def toggle_admin(
    user_id: int,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return credentials.toggle_admin(db, user_id)
