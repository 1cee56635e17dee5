from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_user
from backend.database import get_db
from backend.models.user import User
from backend.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from backend.services import credentials

router = APIRouter(tags=['auth'])


@router.post('/register', response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    user, token = credentials.register(db, data.name, data.email, data.password)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post('/login', response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user, token = credentials.login(db, data.email, data.password)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.get('/me', response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
