import logging
from typing import Optional
from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.user import User
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    MessageResponse,
    RefreshRequest,
    RefreshResponse,
)
from app.schemas.user import UserCreate, UserResponse
from app.services.auth import get_password_hash, get_current_timestamp
from app.services.errors import AuthError
from app.services.sessions import SessionManager, SessionTokens
from app.api.deps import get_current_user, get_session_manager, raise_auth_error

router = APIRouter()
logger = logging.getLogger(__name__)

REFRESH_COOKIE_MAX_AGE = settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60


def set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=REFRESH_COOKIE_MAX_AGE,
        path=settings.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        path=settings.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
    )


def build_token_response(tokens: SessionTokens) -> dict:
    return {
        "access_token": tokens.access_token,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "user": UserResponse.model_validate(tokens.user),
    }


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """Регистрация нового пользователя"""
    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="email is already registered",
        )

    user = User(
        name=user_data.name,
        email=user_data.email,
        password_hash=get_password_hash(user_data.password),
        created_at=get_current_timestamp(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Зарегистрирован пользователь: '{user.email}' (ID: {user.id})")
    return user


@router.post("/login", response_model=LoginResponse)
def login(
    login_data: LoginRequest,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
):
    """Авторизация по email и паролю; refresh token уходит в HTTP-only cookie"""
    result = sessions.login(login_data.email, login_data.password)
    if isinstance(result, AuthError):
        raise_auth_error(result)

    # Очищаем старые истекшие токены пользователя
    sessions.cleanup_expired_tokens(user_id=result.user.id)

    set_refresh_cookie(response, result.refresh_token)
    return build_token_response(result)


@router.post("/refresh", response_model=RefreshResponse)
def refresh_token(
    response: Response,
    refresh_data: Optional[RefreshRequest] = None,
    cookie_token: Optional[str] = Cookie(default=None, alias=settings.REFRESH_COOKIE_NAME),
    sessions: SessionManager = Depends(get_session_manager),
):
    """Обновление access token с ротацией refresh token"""
    raw_token = cookie_token or (refresh_data.refresh_token if refresh_data else None)
    if not raw_token:
        raise_auth_error(AuthError.unauthorized("refresh token not found"))

    result = sessions.refresh(raw_token)
    if isinstance(result, AuthError):
        raise_auth_error(result)

    set_refresh_cookie(response, result.refresh_token)
    return build_token_response(result)


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    logout_data: Optional[LogoutRequest] = None,
    cookie_token: Optional[str] = Cookie(default=None, alias=settings.REFRESH_COOKIE_NAME),
    sessions: SessionManager = Depends(get_session_manager),
):
    """Выход: отзыв всей семьи токенов этой сессии (идемпотентно)"""
    raw_token = cookie_token or (logout_data.refresh_token if logout_data else None)
    sessions.logout(raw_token)
    clear_refresh_cookie(response)
    return MessageResponse(message="logged out")


@router.post("/logout-all", response_model=MessageResponse)
def logout_all(
    response: Response,
    current_user: User = Depends(get_current_user),
    sessions: SessionManager = Depends(get_session_manager),
):
    """Выход со всех устройств"""
    sessions.logout_all(current_user.id)
    clear_refresh_cookie(response)
    return MessageResponse(message="all sessions terminated")


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Получить информацию о текущем пользователе"""
    return current_user
