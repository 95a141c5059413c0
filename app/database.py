import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()
logger = logging.getLogger(__name__)


class Database:
    """Подключение к БД: engine + фабрика сессий.

    Создается один раз при старте процесса и передается туда, где нужен доступ
    к хранилищу. Закрывается через dispose() при остановке.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        engine_kwargs = {"echo": echo, "future": True}
        if url.startswith("sqlite"):
            # SQLite: соединение используется из потоков пула FastAPI
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # In-memory БД живет только в одном соединении
                engine_kwargs["poolclass"] = StaticPool
        self.engine = create_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    def create_all(self) -> None:
        """Создание таблиц (для dev и тестов, в production используется alembic)"""
        import app.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables ensured")

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Сессия для кода вне HTTP-запроса (скрипты, фоновые задачи)"""
        db = self.session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")


def get_database(request: Request) -> Database:
    database: Optional[Database] = getattr(request.app.state, "db", None)
    if database is None:
        raise RuntimeError("Database is not configured on the application")
    return database


def get_db(request: Request) -> Iterator[Session]:
    """Dependency: сессия БД на время запроса"""
    database = get_database(request)
    with database.session() as db:
        yield db
