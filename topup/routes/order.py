# topup/routes/order.py

import json
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from topup.config import settings
from topup.schemas.order import Order, OrderCreate, OrderCreated
from topup.services.order import create_order_service, list_orders_service
from topup.services.uploads import discard_payment_proof, save_payment_proof
from topup.routes.auth import get_optional_user
from topup.utils.errors import BadRequest

router = APIRouter()

PROOF_FIELD = "paymentScreenshot"


async def read_order_payload(request: Request) -> tuple[dict, Optional[UploadFile]]:
    """
    Поля заказа из multipart-формы (со скриншотом) или из JSON.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            raw = await request.json()
        except json.JSONDecodeError:
            raise BadRequest("Invalid JSON body")
        if not isinstance(raw, dict):
            raise BadRequest("Invalid JSON body")
        return raw, None

    form = await request.form()
    upload = form.get(PROOF_FIELD)
    raw = {k: v for k, v in form.items() if not isinstance(v, UploadFile)}
    return raw, upload if isinstance(upload, UploadFile) else None


# ────────────── CREATE ──────────────
@router.post(
    "/order",
    response_model=OrderCreated,
    status_code=status.HTTP_200_OK,
    summary="Оформить заказ",
    response_description="Возвращает созданный заказ со статусом pending",
    responses={
        200: {"description": "Заказ создан"},
        400: {"description": "Неверные данные запроса"},
        500: {"description": "Внутренняя ошибка сервера"},
    },
)
async def create_order(request: Request, user=Depends(get_optional_user)):
    raw, upload = await read_order_payload(request)
    try:
        order = OrderCreate.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise BadRequest(f"{field}: {first.get('msg')}")

    proof_url = ""
    try:
        proof_url = await save_payment_proof(upload, request, settings.UPLOADS_DIR)
        db_order = await create_order_service(order, request, proof_url=proof_url, user=user)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при создании заказа: {str(e)}")
        # заказа нет - файл ни на что не ссылается
        await discard_payment_proof(proof_url, request, settings.UPLOADS_DIR)
        raise

    return {"message": "Order placed successfully", "order": Order.model_validate(db_order)}


# ────────────── ИСТОРИЯ ПО EMAIL ──────────────
@router.get(
    "/orders",
    response_model=List[Order],
    status_code=status.HTTP_200_OK,
    summary="Заказы по email",
    response_description="Сначала новые; без email - пустой список",
    responses={
        200: {"description": "Список заказов"},
        500: {"description": "Внутренняя ошибка сервера"},
    },
)
async def read_orders(request: Request, email: Optional[str] = None):
    try:
        return await list_orders_service(request, email=email)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка истории заказов: {str(e)}", {"email": email})
        raise
