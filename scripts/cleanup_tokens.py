#!/usr/bin/env python3
"""
Очистка истекших и давно отозванных refresh токенов
Использование:
    python3 scripts/cleanup_tokens.py
    python3 scripts/cleanup_tokens.py --retention-days 14

Удобно запускать по cron / systemd timer.
"""
import sys
import os
import argparse
import logging
from datetime import timedelta

# Добавляем корневую директорию в путь
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import settings
from app.database import Database
from app.services.sessions import SessionManager

logger = logging.getLogger("cleanup_tokens")


def cleanup_tokens(database: Database, retention_days: int) -> int:
    with database.session() as db:
        sessions = SessionManager(db, revoked_retention=timedelta(days=retention_days))
        return sessions.cleanup_expired_tokens()


def main():
    parser = argparse.ArgumentParser(description="Удалить истекшие refresh токены")
    parser.add_argument(
        "--retention-days",
        type=int,
        default=settings.REFRESH_TOKEN_RETENTION_DAYS,
        help="Сколько дней хранить отозванные токены",
    )
    parser.add_argument("--database-url", help="URL базы данных", default=settings.DATABASE_URL)
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    database = Database(args.database_url)
    try:
        deleted = cleanup_tokens(database, args.retention_days)
    finally:
        database.dispose()

    logger.info(f"Удалено refresh токенов: {deleted}")


if __name__ == "__main__":
    main()
