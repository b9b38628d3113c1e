# topup/services/realtime.py

"""
Realtime-шлюз поверх Socket.IO.

Клиент подключается и шлёт событие "register" с ключом комнаты
(ID заказа или пользователя). Сервер рассылает в комнату события
"order_status" {status, message}.

Членство в комнатах хранится здесь, в памяти процесса, и теряется
при рестарте - клиент должен заново отправить register после переподключения.
"""

from collections import defaultdict
from typing import Any, Optional

import socketio

ORDER_STATUS_EVENT = "order_status"


def create_socket_server(cors_origins: list[str] | str = "*") -> socketio.AsyncServer:
    # engineio понимает "все источники" только как строку "*"
    if isinstance(cors_origins, list) and "*" in cors_origins:
        cors_origins = "*"
    return socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=cors_origins)


def room_from_payload(data: Any) -> Optional[str]:
    """
    Ключ комнаты из payload события register.
    Поддерживается строка/число или dict с room / orderId / userId.
    """
    if isinstance(data, dict):
        for key in ("room", "orderId", "userId"):
            if data.get(key) not in (None, ""):
                return str(data[key])
        return None
    if data in (None, ""):
        return None
    return str(data)


class RealtimeGateway:
    """
    Реестр подписок: комната -> множество sid, и обратно sid -> комнаты.
    Все методы вызываются из одного event loop, блокировки не нужны.
    """

    def __init__(self, sio, log=None):
        self.sio = sio
        self.log = log
        self.rooms: dict[str, set[str]] = defaultdict(set)
        self.memberships: dict[str, set[str]] = defaultdict(set)

    # ==========================================================
    # ПОДПИСКИ
    # ==========================================================
    def subscribe(self, sid: str, room) -> None:
        room = str(room)
        self.rooms[room].add(sid)
        self.memberships[sid].add(room)

    def remove(self, sid: str) -> None:
        """Соединение закрыто - убираем sid из всех комнат."""
        for room in self.memberships.pop(sid, set()):
            members = self.rooms.get(room)
            if members is None:
                continue
            members.discard(sid)
            if not members:
                del self.rooms[room]

    def members(self, room) -> set[str]:
        return set(self.rooms.get(str(room), ()))

    # ==========================================================
    # ПУБЛИКАЦИЯ
    # ==========================================================
    async def publish(self, room, event: str, payload: dict) -> int:
        """
        Отправляет событие всем подписчикам комнаты.
        Нет подписчиков - ничего не делаем. Возвращает число получателей.
        """
        sids = self.members(room)
        for sid in sids:
            # отключившиеся клиенты отбрасываются самим Socket.IO
            await self.sio.emit(event, payload, to=sid)
        return len(sids)

    # ==========================================================
    # ОБРАБОТЧИКИ SOCKET.IO
    # ==========================================================
    def attach(self) -> None:
        self.sio.on("connect", self.on_connect)
        self.sio.on("register", self.on_register)
        self.sio.on("disconnect", self.on_disconnect)

    async def on_connect(self, sid, environ, auth=None):
        if self.log:
            await self.log.log_info("socket", "Клиент подключился", {"sid": sid})

    async def on_register(self, sid, data):
        room = room_from_payload(data)
        if room is None:
            if self.log:
                await self.log.log_warning("socket", "register без ключа комнаты", {"sid": sid})
            return None
        self.subscribe(sid, room)
        if self.log:
            await self.log.log_info("socket", "Клиент вошёл в комнату", {"sid": sid, "room": room})
        return None

    async def on_disconnect(self, sid, *args):
        self.remove(sid)
        if self.log:
            await self.log.log_info("socket", "Клиент отключился", {"sid": sid})
