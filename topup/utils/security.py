# topup/utils/security.py

"""
Хэширование паролей и выпуск/проверка JWT токенов.
Пароли: passlib с sha256_crypt (без проблем с bcrypt на Windows).
Токены: PyJWT, HS256. В payload кладём "sub" и "role" ("admin" или "user").
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jwt import encode, decode
from passlib.context import CryptContext

from topup.config import settings

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["sha256_crypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Хэширует пароль.

    :param password: строка пароля
    :return: хэшированный пароль в виде строки
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Проверяет совпадение пароля с его хэшем.
    Пустой или битый хэш считается несовпадением.
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Создаёт JWT токен.
    Вход: dict (например {"sub": "admin", "role": "admin"})
    Выход: JWT строка
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    return encode(to_encode, settings.AUTH_SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Декодирует токен. ExpiredSignatureError / InvalidTokenError пробрасываются."""
    return decode(token, settings.AUTH_SECRET_KEY, algorithms=[ALGORITHM])
