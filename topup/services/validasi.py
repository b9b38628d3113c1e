# topup/services/validasi.py

"""
Проверка игрового ID через внешний сервис.
Сервис возвращает JSON с полями "in-game-nickname" и "country" (код страны),
мы отдаём {nickname, country} с полным названием страны.
"""

import json
import os
from functools import lru_cache
from typing import Optional

import httpx

COUNTRIES_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "countries.json")


@lru_cache(maxsize=1)
def load_countries() -> dict[str, str]:
    """Код страны -> название. Файл: список {countryName, countryShortCode}."""
    with open(COUNTRIES_PATH, "r", encoding="utf-8") as f:
        items = json.load(f)
    return {c["countryShortCode"]: c["countryName"] for c in items}


def country_name(code: Optional[str]) -> str:
    if not code:
        return "Unknown"
    return load_countries().get(code.upper(), "Unknown")


async def lookup_player(
    game_id: str,
    server_id: str,
    base_url: str,
    timeout: float = 10.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict:
    """
    GET base_url?id=&serverid=. Ошибки httpx пробрасываются - роут отвечает 502.
    Ответ не-объект (список, null) - ValueError, тоже 502.
    """
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        response = await client.get(base_url, params={"id": game_id, "serverid": server_id})
        response.raise_for_status()
        data = response.json()

    if not isinstance(data, dict):
        raise ValueError(f"unexpected lookup response: {type(data).__name__}")

    return {
        "nickname": data.get("in-game-nickname"),
        "country": country_name(data.get("country")),
    }


class PlayerLookup:
    """
    Настроенный клиент проверки ID: адрес сервиса, таймаут и транспорт httpx.
    Создаётся в setup_state и лежит в app.state.player_lookup.
    """

    def __init__(self, base_url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    async def lookup(self, game_id: str, server_id: str) -> dict:
        return await lookup_player(game_id, server_id, self.base_url, timeout=self.timeout, transport=self.transport)
