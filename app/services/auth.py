import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pytz import utc

from app.config import settings
from app.services.errors import AuthError

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

INVALID_ACCESS_TOKEN = "invalid access token"
EXPIRED_ACCESS_TOKEN = "access token expired"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверка пароля (сравнение за постоянное время внутри passlib)"""
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify_password() -> None:
    """Холостая проверка пароля для неизвестного email: выравнивает время ответа"""
    pwd_context.dummy_verify()


def get_password_hash(password: str) -> str:
    """Хеширование пароля"""
    return pwd_context.hash(password)


def utc_now() -> datetime:
    return datetime.now(utc)


def format_timestamp(value: datetime) -> str:
    """UTC ISO timestamp с микросекундами: строковое сравнение совпадает с хронологическим"""
    return value.astimezone(utc).isoformat(timespec="microseconds")


def get_current_timestamp() -> str:
    """Получить текущий timestamp в ISO формате"""
    return format_timestamp(utc_now())


@dataclass(frozen=True)
class AccessTokenClaims:
    user_id: str
    email: str
    issuer: str
    audience: str
    jti: str
    expires_at: datetime


def create_access_token(
    user_id: str,
    email: str,
    expires_delta: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> str:
    """Создание JWT токена"""
    issued_at = now or utc_now()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": user_id,
        "email": email,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: str) -> Union[AccessTokenClaims, AuthError]:
    """Проверка подписи, issuer/audience и срока действия. Без обращения к БД."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except ExpiredSignatureError:
        return AuthError.unauthorized(EXPIRED_ACCESS_TOKEN)
    except JWTError:
        return AuthError.unauthorized(INVALID_ACCESS_TOKEN)

    user_id = payload.get("sub")
    email = payload.get("email")
    jti = payload.get("jti")
    if not user_id or email is None or not jti:
        return AuthError.unauthorized(INVALID_ACCESS_TOKEN)

    return AccessTokenClaims(
        user_id=user_id,
        email=email,
        issuer=payload["iss"],
        audience=payload["aud"],
        jti=jti,
        expires_at=datetime.fromtimestamp(payload["exp"], utc),
    )


def generate_refresh_token() -> str:
    """Генерация случайного refresh token (непрозрачная строка, не JWT)"""
    return secrets.token_urlsafe(32)


def hash_refresh_token(token: str) -> str:
    """Детерминированный хеш refresh token (без соли), по нему ищется запись в БД"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
