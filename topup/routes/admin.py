# topup/routes/admin.py

from typing import List

from fastapi import APIRouter, Depends, Request, status

from topup.schemas.order import Order, StatusUpdate, StatusUpdated
from topup.services.order import list_all_orders_service, update_status_service
from topup.routes.auth import get_current_admin

router = APIRouter()

# ────────────── READ ALL ──────────────
@router.get(
    "/orders",
    response_model=List[Order],
    status_code=status.HTTP_200_OK,
    summary="Все заказы",
    responses={
        200: {"description": "Список заказов успешно получен"},
        401: {"description": "Нет токена или токен неверный"},
        500: {"description": "Внутренняя ошибка сервера"},
    },
)
async def read_all_orders(request: Request, _=Depends(get_current_admin)):
    try:
        return await list_all_orders_service(request)
    except Exception as e:
        await request.app.state.log.log_error("admin", f"Ошибка при получении списка заказов: {str(e)}")
        raise


# ────────────── UPDATE STATUS ──────────────
@router.post(
    "/orders/{id}/status",
    response_model=StatusUpdated,
    status_code=status.HTTP_200_OK,
    summary="Сменить статус заказа",
    responses={
        200: {"description": "Статус обновлён"},
        400: {"description": "Нет статуса"},
        401: {"description": "Нет токена или токен неверный"},
        404: {"description": "Заказ не найден"},
        500: {"description": "Внутренняя ошибка сервера"},
    },
)
async def update_order_status(
    id: str,
    body: StatusUpdate,
    request: Request,
    admin=Depends(get_current_admin),
):
    try:
        db_order = await update_status_service(id, body.status, request)
    except Exception as e:
        await request.app.state.log.log_error("admin", f"Ошибка при обновлении статуса: {str(e)}", {"id": id, "admin": admin.username})
        raise
    return {"message": "Status updated", "order": Order.model_validate(db_order)}
