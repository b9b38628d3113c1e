"""
Test the two notification channels: realtime room event and Telegram webhook.
"""

import datetime
import json
from types import SimpleNamespace

import httpx
import pytest

from conftest import telegram_notifier
from topup.services.notify import Notifier, build_telegram_text, status_message


def make_order(**overrides):
    fields = dict(
        id="65f0c0ffee0000000000abcd",
        username="Mg Mg",
        package_name="100 Diamonds",
        game_id="123",
        server_id="456",
        payment_method="KBZPay",
        transaction_id="TX-1",
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_status_message_uppercases():
    assert status_message("completed") == "Your order is now COMPLETED"
    assert status_message("on hold") == "Your order is now ON HOLD"


def test_build_telegram_text_lists_order_fields():
    now = datetime.datetime(2026, 10, 19, 14, 30, 5)
    text = build_telegram_text(make_order(), "processing", now)

    lines = text.splitlines()
    assert lines[0] == "📣 Order Update"
    assert "Order ID: 65f0c0ffee0000000000abcd" in lines
    assert "User: Mg Mg" in lines
    assert "Package: 100 Diamonds" in lines
    assert "Game ID: 123" in lines
    assert "Server: 456" in lines
    assert "Payment: KBZPay" in lines
    assert "TX: TX-1" in lines
    assert "Status: processing" in lines
    assert "Time: 19.10.2026 14:30:05" in lines


@pytest.mark.asyncio
async def test_notify_publishes_to_order_room(gateway, sio, log):
    order = make_order()
    gateway.subscribe("sid-1", order.id)
    notifier = Notifier(gateway, log)

    await notifier.notify(order, "completed")

    assert sio.events_for("sid-1") == [
        ("order_status", {"status": "completed", "message": "Your order is now COMPLETED"})
    ]
    assert notifier.tasks == set()


@pytest.mark.asyncio
async def test_notify_uses_explicit_message(gateway, sio, log):
    order = make_order()
    gateway.subscribe("sid-1", order.id)

    await Notifier(gateway, log).notify(order, "pending", "Your order was submitted successfully!")

    assert sio.events_for("sid-1") == [
        ("order_status", {"status": "pending", "message": "Your order was submitted successfully!"})
    ]


@pytest.mark.asyncio
async def test_telegram_disabled_without_token_or_chat(gateway, log):
    assert not Notifier(gateway, log).telegram_enabled
    assert not Notifier(gateway, log, bot_token="TOKEN").telegram_enabled
    assert not Notifier(gateway, log, chat_id="42").telegram_enabled
    assert Notifier(gateway, log, bot_token="TOKEN", chat_id="42").telegram_enabled


@pytest.mark.asyncio
async def test_telegram_posts_chat_id_and_text(gateway, log):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"ok": True})

    notifier = telegram_notifier(gateway, log, handler)
    await notifier.notify(make_order(), "completed")
    await notifier.drain()

    assert len(requests) == 1
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://telegram.test/botTOKEN/sendMessage"
    body = json.loads(request.content)
    assert body["chat_id"] == "42"
    assert "Status: completed" in body["text"]


@pytest.mark.asyncio
async def test_telegram_failure_is_swallowed(gateway, sio, log):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    order = make_order()
    gateway.subscribe("sid-1", order.id)
    notifier = telegram_notifier(gateway, log, handler)

    await notifier.notify(order, "rejected")
    await notifier.drain()

    # realtime channel still delivered
    assert sio.events_for("sid-1")[0][1]["status"] == "rejected"


@pytest.mark.asyncio
async def test_send_telegram_reports_http_error_status(gateway, log):
    notifier = telegram_notifier(gateway, log, lambda request: httpx.Response(403, json={"ok": False}))

    assert await notifier.send_telegram("hello", "order-1") is False


@pytest.mark.asyncio
async def test_realtime_failure_does_not_stop_telegram(log):
    class BrokenGateway:
        async def publish(self, room, event, payload):
            raise RuntimeError("socket layer down")

    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"ok": True})

    notifier = telegram_notifier(BrokenGateway(), log, handler)
    await notifier.notify(make_order(), "completed")
    await notifier.drain()

    assert len(requests) == 1
