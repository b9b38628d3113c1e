# topup/schemas/order.py

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class OrderStatus(str, Enum):
    """
    Известные статусы заказа. PENDING - единственный начальный.
    Админ может передать и свою метку, она сохраняется как есть.
    """
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    REJECTED = "rejected"


def normalize_status(value: Optional[str]) -> str:
    """
    Приводит статус от админа к сохраняемому виду.
    Известные статусы - к значению enum без учёта регистра, остальные - как есть.
    Пустая строка возвращается пустой (проверку делает сервис).
    """
    label = (value or "").strip()
    try:
        return OrderStatus(label.lower()).value
    except ValueError:
        return label


# JSON-поля в camelCase: gameId, packageName, createdAt ...
class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


# ────────────── Схема для CREATE ──────────────
class OrderCreate(CamelModel):
    """
    Поля заказа от покупателя. Поле status, если пришло, игнорируется.
    Кроме типа цены ничего не проверяется.
    """
    email: Optional[str] = None
    game_id: Optional[str] = None
    username: Optional[str] = None
    server_id: Optional[str] = None
    package_name: Optional[str] = None
    price: Optional[float] = None
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    order_note: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def empty_price_is_none(cls, v):
        # из multipart формы пустое поле приходит как ""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class StatusUpdate(BaseModel):
    status: Optional[str] = None


# ────────────── Схема для RESPONSE ──────────────
class Order(CamelModel):
    id: str
    user_email: Optional[str] = None
    user_id: Optional[int] = None
    game_id: Optional[str] = None
    username: Optional[str] = None
    server_id: Optional[str] = None
    package_name: Optional[str] = None
    price: Optional[float] = None
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    order_note: Optional[str] = None
    payment_screenshot: str = ""
    receiver: str = "N/A"
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OrderCreated(BaseModel):
    message: str
    order: Order


class StatusUpdated(BaseModel):
    message: str
    order: Order
