import enum
from dataclasses import dataclass


class ErrorKind(str, enum.Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


_STATUS_CODES = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
}


@dataclass(frozen=True)
class AuthError:
    """Ошибка, возвращаемая сервисами аутентификации вместо исключения.

    HTTP-слой превращает ее в ответ с кодом status_code_for(kind).
    """

    kind: ErrorKind
    reason: str

    @classmethod
    def unauthorized(cls, reason: str) -> "AuthError":
        return cls(ErrorKind.UNAUTHORIZED, reason)

    @classmethod
    def forbidden(cls, reason: str) -> "AuthError":
        return cls(ErrorKind.FORBIDDEN, reason)

    @classmethod
    def not_found(cls, reason: str) -> "AuthError":
        return cls(ErrorKind.NOT_FOUND, reason)

    @property
    def status_code(self) -> int:
        return status_code_for(self.kind)


def status_code_for(kind: ErrorKind) -> int:
    return _STATUS_CODES[kind]
