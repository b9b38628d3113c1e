"""
Shared fixtures: temporary SQLite database, fake Socket.IO server,
httpx client bound to the FastAPI app.
"""

import os
import shutil
import tempfile

# окружение задаём до импорта topup: settings читаются при импорте
_TMP = tempfile.mkdtemp(prefix="topup-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["LOG_DIR"] = os.path.join(_TMP, "log")
os.environ["LOG_PRINT"] = "0"
os.environ["UPLOADS_DIR"] = os.path.join(_TMP, "uploads")
os.environ["AUTH_SECRET_KEY"] = "test-secret"
os.environ["ADMIN_USERNAME"] = ""
os.environ["ADMIN_PASSWORD"] = ""
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["TELEGRAM_CHAT_ID"] = ""
os.environ["VALIDASI_URL"] = ""

import httpx
import pytest
import pytest_asyncio

from topup.main import app
from topup.models.account import Admin, User  # noqa: F401
from topup.models.order import Order  # noqa: F401
from topup.services.notify import Notifier
from topup.services.realtime import RealtimeGateway
from topup.services.validasi import PlayerLookup
from topup.utils.database import AsyncSessionLocal, Base, engine
from topup.utils.log import Log
from topup.utils.security import create_access_token, hash_password

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret"


class FakeSocketServer:
    """Records emits and handler registrations instead of talking to clients."""

    def __init__(self):
        self.emitted = []
        self.handlers = {}

    def on(self, event, handler=None, namespace=None):
        self.handlers[event] = handler

    async def emit(self, event, data=None, to=None, **kwargs):
        self.emitted.append((event, data, to))

    def events_for(self, sid):
        return [(event, data) for event, data, to in self.emitted if to == sid]


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_TMP, ignore_errors=True)


@pytest_asyncio.fixture
async def db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest_asyncio.fixture
async def log():
    log = Log(log_dir=os.environ["LOG_DIR"], log_print=False)
    yield log
    await log.shutdown()


@pytest.fixture
def sio():
    return FakeSocketServer()


@pytest.fixture
def gateway(sio, log):
    return RealtimeGateway(sio, log)


@pytest_asyncio.fixture
async def client(db, log, gateway):
    app.state.log = log
    app.state.gateway = gateway
    app.state.notifier = Notifier(gateway, log)
    app.state.player_lookup = PlayerLookup("")
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    await app.state.notifier.drain()


@pytest_asyncio.fixture
async def admin(db):
    async with AsyncSessionLocal() as session:
        session.add(Admin(username=ADMIN_USERNAME, password_hash=hash_password(ADMIN_PASSWORD)))
        await session.commit()
    return ADMIN_USERNAME


@pytest.fixture
def admin_headers(admin):
    token = create_access_token({"sub": admin, "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


def telegram_notifier(gateway, log, handler):
    """Notifier with Telegram enabled and requests routed to a MockTransport handler."""
    return Notifier(
        gateway,
        log,
        bot_token="TOKEN",
        chat_id="42",
        api_base="https://telegram.test",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )
