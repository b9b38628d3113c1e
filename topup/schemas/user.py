# topup/schemas/user.py

from pydantic import BaseModel
from typing import Optional

class AdminLogin(BaseModel):
    """
    Вход администратора. Поля необязательные, чтобы отсутствие
    логина/пароля давало 400 с понятным сообщением, а не ошибку валидации.
    """
    username: Optional[str] = None
    password: Optional[str] = None

class AdminToken(BaseModel):
    message: str
    token: str

class UserCredentials(BaseModel):
    """Регистрация и вход покупателя: identifier - email или телефон."""
    identifier: Optional[str] = None
    password: Optional[str] = None

class UserToken(BaseModel):
    token: str

class MessageResponse(BaseModel):
    message: str
