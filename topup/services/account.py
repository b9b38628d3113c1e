# topup/services/account.py

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.future import select
from fastapi import Request

from topup.models.account import Admin as AdminModel, User as UserModel
from topup.utils.errors import Conflict
from topup.utils.security import hash_password


async def read_admin_service(username: str, request: Request) -> Optional[AdminModel]:
    """
    Администратор по логину или None.
    """
    db = request.state.db
    result = await db.execute(select(AdminModel).where(AdminModel.username == username))
    return result.scalar_one_or_none()


async def read_user_service(request: Request, identifier: Optional[str] = None, id: Optional[int] = None) -> Optional[UserModel]:
    """
    Покупатель по identifier или по ID, либо None.
    """
    db = request.state.db
    if id is not None:
        query = select(UserModel).where(UserModel.id == id)
    else:
        query = select(UserModel).where(UserModel.identifier == identifier)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def create_user_service(identifier: str, password: str, request: Request) -> UserModel:
    """
    Регистрация покупателя. Занятый identifier - 409.
    """
    db = request.state.db
    log = request.app.state.log

    if await read_user_service(request, identifier=identifier) is not None:
        await log.log_warning("auth", "Identifier уже занят", {"identifier": identifier})
        raise Conflict("Identifier already exists")

    db_user = UserModel(identifier=identifier, password_hash=hash_password(password))
    db.add(db_user)
    try:
        await db.commit()
    except IntegrityError:
        # параллельная регистрация с тем же identifier
        await db.rollback()
        raise Conflict("Identifier already exists")
    await db.refresh(db_user)

    await log.log_info("auth", "Покупатель зарегистрирован", {"id": db_user.id})
    return db_user
