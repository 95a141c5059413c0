"""Сессии пользователей: access token + ротируемый refresh token.

Каждый вход открывает новую "семью" (family) refresh-токенов. Каждый refresh
отзывает предъявленный токен и выдает преемника в той же семье, поэтому в
семье всегда не более одного живого токена. Повторное предъявление уже
отозванного токена означает, что у токена две копии (клиент и злоумышленник),
и тогда отзывается вся семья.
"""
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterator, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.refresh_token import RefreshToken
from app.models.user import User
from app.services.auth import (
    create_access_token,
    dummy_verify_password,
    format_timestamp,
    generate_refresh_token,
    hash_refresh_token,
    utc_now,
    verify_password,
)
from app.services.errors import AuthError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "invalid email or password"
INVALID_REFRESH_TOKEN = "invalid refresh token"
REUSED_REFRESH_TOKEN = "token already used, all sessions terminated"
EXPIRED_REFRESH_TOKEN = "refresh token expired"


@dataclass(frozen=True)
class SessionTokens:
    access_token: str
    refresh_token: str
    user: User
    family: str


class SessionManager:
    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = utc_now,
        refresh_token_ttl: Optional[timedelta] = None,
        revoked_retention: Optional[timedelta] = None,
    ) -> None:
        self.db = db
        self._clock = clock
        self.refresh_token_ttl = refresh_token_ttl or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        self.revoked_retention = revoked_retention or timedelta(days=settings.REFRESH_TOKEN_RETENTION_DAYS)

    def login(self, email: str, password: str) -> Union[SessionTokens, AuthError]:
        """Вход по email и паролю. Одинаковая ошибка для неизвестного email и неверного пароля."""
        normalized_email = email.strip().lower()
        user = self.db.query(User).filter(User.email == normalized_email).first()

        if user is None:
            dummy_verify_password()
            logger.warning(f"Неудачная попытка входа: '{normalized_email}'")
            return AuthError.unauthorized(INVALID_CREDENTIALS)

        if not verify_password(password, user.password_hash):
            logger.warning(f"Неудачная попытка входа: '{normalized_email}'")
            return AuthError.unauthorized(INVALID_CREDENTIALS)

        family = str(uuid.uuid4())
        with self._transaction():
            raw_token = self._issue_refresh_token(user.id, family, self._clock())

        logger.info(f"Успешный вход пользователя: '{user.email}' (ID: {user.id}, family: {family})")
        return SessionTokens(
            access_token=create_access_token(user.id, user.email),
            refresh_token=raw_token,
            user=user,
            family=family,
        )

    def refresh(self, raw_token: str) -> Union[SessionTokens, AuthError]:
        """Ротация refresh token с обнаружением повторного использования"""
        stored = self._find(raw_token)
        if stored is None:
            logger.warning("Попытка использовать неизвестный refresh token")
            return AuthError.unauthorized(INVALID_REFRESH_TOKEN)

        now = self._clock()

        if stored.is_revoked:
            return self._handle_reuse(stored, now)

        if stored.expires_at <= format_timestamp(now):
            with self._transaction():
                self._revoke_token(stored.id, now)
            logger.warning(f"Истекший refresh token (family: {stored.family})")
            return AuthError.unauthorized(EXPIRED_REFRESH_TOKEN)

        user = self.db.query(User).filter(User.id == stored.user_id).first()
        if user is None:
            return AuthError.unauthorized(INVALID_REFRESH_TOKEN)

        with self._transaction():
            # Условный UPDATE: из двух одновременных ротаций одного токена выигрывает одна
            if self._revoke_token(stored.id, now) == 0:
                new_raw_token = None
            else:
                new_raw_token = self._issue_refresh_token(user.id, stored.family, now)

        if new_raw_token is None:
            return self._handle_reuse(stored, now)

        logger.info(f"Обновлен токен для пользователя ID: {user.id} (family: {stored.family})")
        return SessionTokens(
            access_token=create_access_token(user.id, user.email),
            refresh_token=new_raw_token,
            user=user,
            family=stored.family,
        )

    def logout(self, raw_token: Optional[str]) -> int:
        """Выход: отзывает всю семью предъявленного токена. Возвращает число отозванных токенов."""
        if not raw_token:
            return 0

        stored = self._find(raw_token)
        if stored is None:
            return 0

        with self._transaction():
            revoked = self._revoke_family(stored.family, self._clock())
        logger.info(f"Выход пользователя ID: {stored.user_id}, отозвано токенов: {revoked}")
        return revoked

    def logout_all(self, user_id: str) -> int:
        """Отзыв всех сессий пользователя на всех устройствах"""
        now = format_timestamp(self._clock())
        with self._transaction():
            revoked = self.db.query(RefreshToken).filter(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked_at.is_(None),
            ).update({RefreshToken.revoked_at: now}, synchronize_session="fetch")
        logger.info(f"Завершены все сессии пользователя ID: {user_id}, отозвано токенов: {revoked}")
        return revoked

    def cleanup_expired_tokens(self, user_id: Optional[str] = None) -> int:
        """Удаляет истекшие токены и токены, отозванные раньше окна хранения. Возвращает число удаленных."""
        now = self._clock()
        now_iso = format_timestamp(now)
        revoked_before = format_timestamp(now - self.revoked_retention)

        query = self.db.query(RefreshToken).filter(
            (RefreshToken.expires_at < now_iso)
            | (RefreshToken.revoked_at.isnot(None) & (RefreshToken.revoked_at < revoked_before))
        )
        if user_id:
            query = query.filter(RefreshToken.user_id == user_id)

        with self._transaction():
            deleted = query.delete(synchronize_session="fetch")
        if deleted:
            logger.info(f"Удалено устаревших refresh token: {deleted}")
        return deleted

    def _handle_reuse(self, stored: RefreshToken, now: datetime) -> AuthError:
        with self._transaction():
            revoked = self._revoke_family(stored.family, now)
        logger.warning(
            f"Повторное использование refresh token: пользователь ID {stored.user_id}, "
            f"family {stored.family} отозвана ({revoked} токенов)"
        )
        return AuthError.unauthorized(REUSED_REFRESH_TOKEN)

    def _find(self, raw_token: str) -> Optional[RefreshToken]:
        token_hash = hash_refresh_token(raw_token)
        return self.db.query(RefreshToken).filter(RefreshToken.token_hash == token_hash).first()

    def _issue_refresh_token(self, user_id: str, family: str, now: datetime) -> str:
        raw_token = generate_refresh_token()
        self.db.add(
            RefreshToken(
                user_id=user_id,
                token_hash=hash_refresh_token(raw_token),
                family=family,
                expires_at=format_timestamp(now + self.refresh_token_ttl),
                created_at=format_timestamp(now),
            )
        )
        return raw_token

    def _revoke_token(self, token_id: str, now: datetime) -> int:
        return self.db.query(RefreshToken).filter(
            RefreshToken.id == token_id,
            RefreshToken.revoked_at.is_(None),
        ).update({RefreshToken.revoked_at: format_timestamp(now)}, synchronize_session="fetch")

    def _revoke_family(self, family: str, now: datetime) -> int:
        return self.db.query(RefreshToken).filter(
            RefreshToken.family == family,
            RefreshToken.revoked_at.is_(None),
        ).update({RefreshToken.revoked_at: format_timestamp(now)}, synchronize_session="fetch")

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        """commit при успехе, rollback при ошибке БД"""
        try:
            yield
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
