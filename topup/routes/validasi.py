# topup/routes/validasi.py

from typing import Optional

import httpx
from fastapi import APIRouter, Request

from topup.utils.errors import BadRequest, BadGateway, Internal

router = APIRouter()


@router.get(
    "/validasi",
    summary="Проверка игрового ID",
    responses={
        200: {"description": "Ник и страна игрока", "content": {"application/json": {"example": {"nickname": "Player1", "country": "Myanmar"}}}},
        400: {"description": "Нет id или serverid"},
        502: {"description": "Внешний сервис недоступен"},
    },
)
async def validasi(request: Request, id: Optional[str] = None, serverid: Optional[str] = None):
    log = request.app.state.log
    player_lookup = request.app.state.player_lookup
    if not id or not serverid:
        raise BadRequest("Missing id or serverid")
    if not player_lookup.configured:
        await log.log_error("validasi", "VALIDASI_URL не задан")
        raise Internal("Validation service not configured")

    try:
        return await player_lookup.lookup(id, serverid)
    except (httpx.HTTPError, ValueError) as e:
        await log.log_error("validasi", f"Ошибка проверки ID: {e!r}", {"id": id, "serverid": serverid})
        raise BadGateway("Validation service error")
