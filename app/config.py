import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./taskflow.db")
    DB_AUTO_CREATE: bool = os.getenv("DB_AUTO_CREATE", "true").lower() == "true"

    # JWT
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-in-production")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    JWT_ISSUER: str = os.getenv("JWT_ISSUER", "taskflow")
    JWT_AUDIENCE: str = os.getenv("JWT_AUDIENCE", "taskflow-api")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))

    # Refresh tokens
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
    # Сколько дней хранить отозванные токены (нужны для обнаружения повторного использования)
    REFRESH_TOKEN_RETENTION_DAYS: int = int(os.getenv("REFRESH_TOKEN_RETENTION_DAYS", "30"))
    REFRESH_COOKIE_NAME: str = os.getenv("REFRESH_COOKIE_NAME", "refresh_token")
    REFRESH_COOKIE_PATH: str = os.getenv("REFRESH_COOKIE_PATH", "/api/v1/auth")

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # CORS
    CORS_ORIGINS: list[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if origin.strip()
    ]

    # Server
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def COOKIE_SECURE(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
