# topup/models/account.py

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from topup.utils.database import Base

class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False)     # логин
    password_hash = Column(String, nullable=False)             # хэш пароля


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    identifier = Column(String, unique=True, nullable=False)   # email или телефон
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
