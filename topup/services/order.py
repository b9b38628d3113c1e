# topup/services/order.py

from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.future import select
from fastapi import Request

from topup.models.order import Order as OrderModel, utcnow
from topup.schemas.order import OrderCreate, OrderStatus, normalize_status
from topup.services.notify import SUBMITTED_MESSAGE
from topup.utils.errors import BadRequest, NotFound


def _as_utc(value: datetime) -> datetime:
    # SQLite возвращает datetime без tzinfo
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def next_updated_at(previous: Optional[datetime]) -> datetime:
    """Время обновления строго больше предыдущего, даже если часы не сдвинулись."""
    now = utcnow()
    if previous is not None and now <= _as_utc(previous):
        now = _as_utc(previous) + timedelta(microseconds=1)
    return now


async def create_order_service(
    order: OrderCreate,
    request: Request,
    proof_url: str = "",
    user=None,
) -> OrderModel:
    """
    Создание нового заказа.
    Статус всегда pending, что бы ни прислал клиент.
    Владелец - email из формы, иначе авторизованный покупатель.
    Уведомление отправляется только после commit.
    """
    db = request.state.db
    log = request.app.state.log
    notifier = request.app.state.notifier

    data = order.model_dump(exclude={"email"})
    db_order = OrderModel(
        **data,
        user_email=order.email or None,
        user_id=user.id if user is not None else None,
        payment_screenshot=proof_url or "",
        status=OrderStatus.PENDING.value,
        created_at=utcnow(),
        updated_at=None,
    )
    db.add(db_order)
    await db.commit()
    await db.refresh(db_order)

    await log.log_info("order", "Заказ создан", {"id": db_order.id, "email": db_order.user_email})
    await notifier.notify(db_order, OrderStatus.PENDING.value, SUBMITTED_MESSAGE)
    return db_order


async def list_orders_service(
    request: Request,
    email: Optional[str] = None,
    user_id: Optional[int] = None,
) -> list[OrderModel]:
    """
    Заказы владельца, сначала новые.
    Без ключа владельца - пустой список, не ошибка.
    """
    db = request.state.db
    log = request.app.state.log

    if email:
        condition = OrderModel.user_email == email
    elif user_id is not None:
        condition = OrderModel.user_id == user_id
    else:
        return []

    result = await db.execute(
        select(OrderModel).where(condition).order_by(OrderModel.created_at.desc())
    )
    orders = list(result.scalars().all())

    await log.log_info("order", f"{len(orders)} заказов загружено", {"email": email, "user_id": user_id})
    return orders


async def list_all_orders_service(request: Request) -> list[OrderModel]:
    """
    Все заказы (для админа).
    """
    db = request.state.db
    log = request.app.state.log

    result = await db.execute(select(OrderModel).order_by(OrderModel.created_at.desc()))
    orders = list(result.scalars().all())

    await log.log_info("order", f"{len(orders)} заказов загружено (админ)")
    return orders


async def update_status_service(id: str, new_status: Optional[str], request: Request) -> OrderModel:
    """
    Смена статуса заказа админом.
    Пустой статус - 400 до любых запросов в базу; нет заказа - 404 без записи.
    """
    db = request.state.db
    log = request.app.state.log
    notifier = request.app.state.notifier

    status = normalize_status(new_status)
    if not status:
        await log.log_warning("order", "Пустой статус", {"id": id})
        raise BadRequest("Missing status")

    result = await db.execute(select(OrderModel).where(OrderModel.id == id))
    db_order = result.scalar_one_or_none()
    if db_order is None:
        await log.log_error("order", "Заказ не найден для обновления", {"id": id})
        raise NotFound("Order not found")

    previous = db_order.status
    db_order.status = status
    db_order.updated_at = next_updated_at(db_order.updated_at)
    db.add(db_order)
    await db.commit()
    await db.refresh(db_order)

    await log.log_info("order", "Статус заказа обновлён", {"id": id, "from": previous, "to": status})
    await notifier.notify(db_order, status)
    return db_order
