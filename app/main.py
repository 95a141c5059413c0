import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import Database
from app.api.v1 import auth, projects, lists, tasks

# Настройка логирования
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Сборка приложения; БД создается здесь, если не передана снаружи (тесты)"""
    if database is None:
        database = Database(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.DB_AUTO_CREATE:
            database.create_all()
        logger.info(f"TaskFlow API запущен (environment={settings.ENVIRONMENT})")
        yield
        database.dispose()

    app = FastAPI(title="TaskFlow API", version="1.0.0", lifespan=lifespan)
    app.state.db = database

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Подключение роутеров
    app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(projects.router, prefix="/api/v1", tags=["projects"])
    app.include_router(lists.router, prefix="/api/v1", tags=["lists"])
    app.include_router(tasks.router, prefix="/api/v1", tags=["tasks"])

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    return app


app = create_app()
