# topup/models/order.py

import secrets
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Float, DateTime, Integer, ForeignKey
from topup.utils.database import Base


def new_order_id() -> str:
    """24 hex-символа, как ObjectId. Служит ключом комнаты realtime."""
    return secrets.token_hex(12)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(24), primary_key=True, default=new_order_id)

    user_email         = Column(String, nullable=True, index=True)                    # владелец по email
    user_id            = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)  # владелец-аккаунт
    game_id            = Column(String, nullable=True)                                # ID в игре
    username           = Column(String, nullable=True)                                # ник в игре
    server_id          = Column(String, nullable=True)                                # сервер
    package_name       = Column(String, nullable=True)                                # пакет
    price              = Column(Float, nullable=True)                                 # цена
    payment_method     = Column(String, nullable=True)                                # способ оплаты
    transaction_id     = Column(String, nullable=True)                                # номер транзакции
    order_note         = Column(Text, nullable=True)                                  # комментарий
    payment_screenshot = Column(String, nullable=False, default="")                   # URI скриншота оплаты
    receiver           = Column(String, nullable=False, default="N/A")
    status             = Column(String, nullable=False, default="pending")
    created_at         = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at         = Column(DateTime(timezone=True), nullable=True)               # пусто до первой смены статуса
