#!/usr/bin/env python3
"""
Скрипт для создания пользователя
Использование:
    python3 scripts/create_user.py
    python3 scripts/create_user.py --email admin@example.com --name Admin --password Secret123
"""
import argparse
import getpass
import os
import sys
import termios
import tty

# Добавляем корневую директорию в путь
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.database import Database
from app.models.user import User
from app.schemas.user import UserCreate
from app.services.auth import get_password_hash, get_current_timestamp


def read_masked_password(prompt: str = "Пароль: ", mask: str = "*") -> str:
    """Ввод пароля: в терминале каждый символ показывается маской.

    Если stdin не терминал (pipe, CI), используется getpass без эха.
    """
    if not sys.stdin.isatty():
        return getpass.getpass(prompt)

    fd = sys.stdin.fileno()
    saved = termios.tcgetattr(fd)
    chars = []
    sys.stdout.write(prompt)
    sys.stdout.flush()
    try:
        tty.setraw(fd)
        for char in iter(lambda: sys.stdin.read(1), ""):
            if char in ("\r", "\n"):
                break
            if char == "\x03":
                raise KeyboardInterrupt
            if char in ("\x7f", "\b"):
                if chars:
                    chars.pop()
                    sys.stdout.write("\b \b")
            elif char.isprintable():
                chars.append(char)
                sys.stdout.write(mask)
            sys.stdout.flush()
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)
        sys.stdout.write("\n")

    return "".join(chars)


def create_user(database: Database, user_data: UserCreate) -> bool:
    """Создать пользователя; False, если email занят или БД вернула ошибку"""
    with database.session() as db:
        existing_user = db.query(User).filter(User.email == user_data.email).first()
        if existing_user:
            print(f"Ошибка: Пользователь '{user_data.email}' уже существует")
            return False

        user = User(
            name=user_data.name,
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            created_at=get_current_timestamp(),
        )

        try:
            db.add(user)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            print(f"Ошибка при создании пользователя: {e}")
            return False

        print(f"✓ Пользователь '{user.email}' успешно создан!")
        print(f"  ID: {user.id}")
        return True


def main():
    parser = argparse.ArgumentParser(description="Создать пользователя TaskFlow")
    parser.add_argument("--email", help="Email", default=None)
    parser.add_argument("--name", help="Имя", default=None)
    parser.add_argument("--password", help="Пароль", default=None)
    parser.add_argument("--database-url", help="URL базы данных", default=settings.DATABASE_URL)

    args = parser.parse_args()

    # Если аргументы не переданы, запрашиваем интерактивно
    email = args.email or input("Введите email: ").strip()
    name = args.name or input("Введите имя: ").strip()
    password = args.password or read_masked_password("Введите пароль: ").strip()

    try:
        user_data = UserCreate(email=email, name=name, password=password)
    except ValidationError as e:
        for error in e.errors():
            print(f"Ошибка: {error['msg']}")
        sys.exit(1)

    database = Database(args.database_url)
    try:
        if not create_user(database, user_data):
            sys.exit(1)
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
