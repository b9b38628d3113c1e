# topup/routes/auth.py

from datetime import timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import OAuth2PasswordBearer
from jwt import ExpiredSignatureError, InvalidTokenError

from topup.config import settings
from topup.schemas.order import Order
from topup.schemas.user import AdminLogin, AdminToken, UserCredentials, UserToken, MessageResponse
from topup.services.account import read_admin_service, read_user_service, create_user_service
from topup.services.order import list_orders_service
from topup.utils.errors import BadRequest, Unauthorized
from topup.utils.security import create_access_token, decode_access_token, verify_password

router = APIRouter()

# auto_error=False: отсутствие токена отдаём как {"error": "No token"}
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/login", auto_error=False)

ROLE_ADMIN = "admin"
ROLE_USER = "user"


async def decode_token(token: Optional[str], request: Request) -> dict:
    """
    Проверяет JWT и возвращает payload.

    **Статусы:**
    - 401 Unauthorized – токен отсутствует, истёк или неверный
    """
    log = request.app.state.log
    if not token:
        raise Unauthorized("No token")
    try:
        return decode_access_token(token)
    except ExpiredSignatureError:
        await log.log_warning("auth", "Токен истёк")
        raise Unauthorized("Token expired")
    except InvalidTokenError:
        await log.log_warning("auth", "Неверный токен")
        raise Unauthorized("Invalid token")


async def get_current_admin(request: Request, token: Optional[str] = Depends(oauth2_scheme)):
    """Администратор из Bearer токена."""
    payload = await decode_token(token, request)
    username = payload.get("sub")
    if payload.get("role") != ROLE_ADMIN or not username:
        raise Unauthorized("Invalid token")

    admin = await read_admin_service(username, request)
    if admin is None:
        raise Unauthorized("Invalid token")
    return admin


async def get_current_user(request: Request, token: Optional[str] = Depends(oauth2_scheme)):
    """Покупатель из Bearer токена."""
    payload = await decode_token(token, request)
    if payload.get("role") != ROLE_USER:
        raise Unauthorized("Invalid token")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token")

    user = await read_user_service(request, id=user_id)
    if user is None:
        raise Unauthorized("User not found")
    return user


async def get_optional_user(request: Request, token: Optional[str] = Depends(oauth2_scheme)):
    """
    Покупатель, если прислан валидный токен покупателя; иначе None.
    Заказ можно оформить без входа, поэтому просроченный или чужой токен
    не ошибка - заказ просто становится анонимным.
    """
    if not token:
        return None
    try:
        return await get_current_user(request, token)
    except Unauthorized as e:
        await request.app.state.log.log_warning("auth", f"Токен покупателя не принят, заказ без аккаунта: {e.detail}")
        return None


# ────────────── ВХОД АДМИНИСТРАТОРА ──────────────
@router.post(
    "/login",
    response_model=AdminToken,
    summary="Вход администратора",
    responses={
        200: {"description": "Токен выдан"},
        400: {"description": "Нет логина или пароля"},
        401: {"description": "Неверный логин или пароль"},
    },
)
async def admin_login(body: AdminLogin, request: Request):
    log = request.app.state.log
    if not body.username or not body.password:
        raise BadRequest("Missing username or password")

    admin = await read_admin_service(body.username, request)
    if admin is None or not verify_password(body.password, admin.password_hash):
        await log.log_warning("auth", "Неудачная попытка входа", {"username": body.username})
        raise Unauthorized("Invalid username or password")

    token = create_access_token(
        data={"sub": admin.username, "role": ROLE_ADMIN},
        expires_delta=timedelta(minutes=settings.ADMIN_TOKEN_EXPIRE_MINUTES),
    )
    await log.log_info("auth", "Администратор вошёл", {"username": admin.username})
    return {"message": "Login successful", "token": token}


# ────────────── РЕГИСТРАЦИЯ ПОКУПАТЕЛЯ ──────────────
@router.post(
    "/auth/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Регистрация покупателя",
    responses={
        201: {"description": "Покупатель зарегистрирован"},
        400: {"description": "Нет identifier или пароля"},
        409: {"description": "Identifier уже занят"},
    },
)
async def register_user(body: UserCredentials, request: Request):
    if not body.identifier or not body.password:
        raise BadRequest("Missing fields")
    await create_user_service(body.identifier, body.password, request)
    return {"message": "Registered successfully"}


# ────────────── ВХОД ПОКУПАТЕЛЯ ──────────────
@router.post(
    "/auth/login",
    response_model=UserToken,
    summary="Вход покупателя",
    responses={
        200: {"description": "Токен выдан"},
        400: {"description": "Нет identifier или пароля"},
        401: {"description": "Покупатель не найден или неверный пароль"},
    },
)
async def user_login(body: UserCredentials, request: Request):
    log = request.app.state.log
    if not body.identifier or not body.password:
        raise BadRequest("Missing fields")

    user = await read_user_service(request, identifier=body.identifier)
    if user is None:
        raise Unauthorized("User not found")
    if not verify_password(body.password, user.password_hash):
        await log.log_warning("auth", "Неверный пароль покупателя", {"identifier": body.identifier})
        raise Unauthorized("Wrong password")

    token = create_access_token(
        data={"sub": str(user.id), "role": ROLE_USER},
        expires_delta=timedelta(minutes=settings.USER_TOKEN_EXPIRE_MINUTES),
    )
    return {"token": token}


# ────────────── ИСТОРИЯ ЗАКАЗОВ ПОКУПАТЕЛЯ ──────────────
@router.get(
    "/auth/orders",
    response_model=List[Order],
    summary="Мои заказы",
    responses={
        200: {"description": "Заказы покупателя, сначала новые"},
        401: {"description": "Нет токена или токен неверный"},
    },
)
async def my_orders(request: Request, user=Depends(get_current_user)):
    return await list_orders_service(request, user_id=user.id)
