#!/usr/bin/env python3
"""
Запуск API TaskFlow под uvicorn
Использование:
    python3 run.py
    python3 run.py --port 9000 --reload
"""
import argparse
import os

import uvicorn

from app.config import settings


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Запуск TaskFlow API")
    parser.add_argument("--host", default=settings.HOST, help="Адрес (по умолчанию HOST из настроек)")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Порт (по умолчанию PORT из настроек)")
    parser.add_argument(
        "--reload",
        action="store_true",
        default=os.environ.get("RELOAD", "false").lower() == "true",
        help="Перезапуск при изменении кода, только для разработки",
    )
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    if args.reload and settings.ENVIRONMENT == "production":
        raise SystemExit("--reload недоступен в production")

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
