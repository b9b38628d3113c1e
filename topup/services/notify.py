# topup/services/notify.py

"""
Рассылка уведомлений о смене статуса заказа.

Два независимых канала:
  A) realtime - событие order_status в комнату с ID заказа;
  B) Telegram - текст оператору через Bot API sendMessage.

Вызывается только после commit: клиент не должен увидеть статус,
которого ещё нет в базе. Канал B запускается отдельной задачей,
его ошибки пишутся в лог и не влияют на ответ клиенту.
"""

import asyncio
import datetime
from typing import Optional

import httpx

from topup.services.realtime import ORDER_STATUS_EVENT

SUBMITTED_MESSAGE = "Your order was submitted successfully!"


def status_message(status: str) -> str:
    return f"Your order is now {status.upper()}"


def build_telegram_text(order, status: str, now: Optional[datetime.datetime] = None) -> str:
    now = now or datetime.datetime.now()
    return "\n".join([
        "📣 Order Update",
        f"Order ID: {order.id}",
        f"User: {order.username}",
        f"Package: {order.package_name}",
        f"Game ID: {order.game_id}",
        f"Server: {order.server_id}",
        f"Payment: {order.payment_method}",
        f"TX: {order.transaction_id}",
        f"Status: {status}",
        f"Time: {now:%d.%m.%Y %H:%M:%S}",
    ])


class Notifier:
    def __init__(
        self,
        gateway,
        log,
        bot_token: str = "",
        chat_id: str = "",
        api_base: str = "https://api.telegram.org",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.gateway = gateway
        self.log = log
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.transport = transport  # подменяется в тестах на httpx.MockTransport
        self.tasks: set[asyncio.Task] = set()

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    async def notify(self, order, status: str, message: Optional[str] = None) -> None:
        payload = {"status": status, "message": message or status_message(status)}
        room = str(order.id)

        try:
            count = await self.gateway.publish(room, ORDER_STATUS_EVENT, payload)
            await self.log.log_info("notify", "order_status отправлен", {"room": room, "status": status, "recipients": count})
        except Exception as e:
            await self.log.log_error("notify", f"Ошибка realtime-уведомления: {e!r}", {"room": room})

        if self.telegram_enabled:
            # текст собираем сейчас: объект заказа может измениться до запуска задачи
            text = build_telegram_text(order, status)
            task = asyncio.create_task(self.send_telegram(text, room))
            self.tasks.add(task)
            task.add_done_callback(self.tasks.discard)

    async def send_telegram(self, text: str, order_id: str = "") -> bool:
        """POST {chat_id, text} в Bot API. Любая ошибка - в лог, наружу не пробрасывается."""
        url = f"{self.api_base}/bot{self.bot_token}/sendMessage"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json={"chat_id": self.chat_id, "text": text})
                response.raise_for_status()
        except httpx.HTTPError as e:
            await self.log.log_error("telegram", f"Telegram error: {e!r}", {"order_id": order_id})
            return False

        await self.log.log_info("telegram", "Сообщение оператору отправлено", {"order_id": order_id})
        return True

    async def drain(self) -> None:
        """Дожидается отправки всех запущенных сообщений (shutdown, тесты)."""
        if self.tasks:
            await asyncio.gather(*list(self.tasks), return_exceptions=True)
