# topup/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
import httpx
import socketio
import uvicorn
from dotenv import load_dotenv
from contextlib import asynccontextmanager
from typing import Optional

from topup.config import settings
from topup.utils.log import Log
from topup.utils.database import init_db
from topup.utils.errors import install_error_handlers
from topup.middleware.db_middleware import DBSessionMiddleware
from topup.services.realtime import RealtimeGateway, create_socket_server
from topup.services.notify import Notifier
from topup.services.uploads import UPLOADS_URL_PATH
from topup.services.validasi import PlayerLookup

import os
import multiprocessing

# --- загрузка переменных окружения ---
load_dotenv()

# --- sync логгер для раннего старта ---
boot_log = Log()
if os.environ.get("RUN_MAIN") == "true" or multiprocessing.current_process().name == "MainProcess":
    boot_log.log_info_sync(target="startup", message="Импорты main.py выполнены")

# --- Socket.IO сервер (оборачивает FastAPI, см. asgi_app ниже) ---
sio = create_socket_server(settings.cors_origins)


def setup_state(
    app: FastAPI,
    log: Log,
    telegram_transport: Optional[httpx.AsyncBaseTransport] = None,
    validasi_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """
    Кладёт в app.state логгер, realtime-шлюз, рассыльщик уведомлений
    и клиент проверки игрового ID. Транспорты httpx по умолчанию сетевые.
    """
    app.state.log = log
    app.state.gateway = RealtimeGateway(sio, log)
    app.state.gateway.attach()
    app.state.notifier = Notifier(
        app.state.gateway,
        log,
        bot_token=settings.TELEGRAM_BOT_TOKEN,
        chat_id=settings.TELEGRAM_CHAT_ID,
        api_base=settings.TELEGRAM_API_BASE,
        timeout=settings.TELEGRAM_TIMEOUT,
        transport=telegram_transport,
    )
    app.state.player_lookup = PlayerLookup(
        settings.VALIDASI_URL,
        timeout=settings.VALIDASI_TIMEOUT,
        transport=validasi_transport,
    )


# ────────────── Lifespan ──────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    boot_log.log_info_sync(target="startup", message="lifespan: startup начат")

    # Инициализация БД
    admin = await init_db()
    boot_log.log_info_sync(target="startup", message="База инициализирована")
    if admin:
        boot_log.log_info_sync(target="startup", message=f"Создан администратор {admin}")

    setup_state(app, Log())
    await app.state.log.log_info(target="startup", message="Async Log, realtime и уведомления инициализированы")
    if not app.state.notifier.telegram_enabled:
        await app.state.log.log_warning(target="startup", message="Telegram не настроен, канал отключён")

    yield

    # shutdown
    await app.state.notifier.drain()
    await app.state.log.log_info(target="shutdown", message="Остановка приложения")
    await app.state.log.shutdown()
    boot_log.log_info_sync(target="shutdown", message="Log корректно завершён")

# ────────────── Создаём FastAPI приложение ──────────────
app = FastAPI(title="Top-up Order API", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# DB middleware для request.state.db
app.add_middleware(DBSessionMiddleware)

# ошибки в виде {"error": "..."}
install_error_handlers(app)

@app.get("/health")
def health():
    return {"ok": True}

# ────────────── Скриншоты оплаты ──────────────
os.makedirs(settings.UPLOADS_DIR, exist_ok=True)
app.mount(UPLOADS_URL_PATH, StaticFiles(directory=settings.UPLOADS_DIR), name="uploads")

# ────────────── Подключение роутов ──────────────
from topup.routes import auth, order, admin, validasi

app.include_router(auth.router, tags=["auth"])
app.include_router(order.router, tags=["order"])
app.include_router(admin.router, prefix="/admin", tags=["admin"])
app.include_router(validasi.router, prefix="/api", tags=["validasi"])

# ────────────── ASGI: Socket.IO + FastAPI ──────────────
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)

# ────────────── Запуск uvicorn ──────────────
if __name__ == "__main__":
    boot_log.log_info_sync(target="startup", message="Запуск uvicorn.run")
    uvicorn.run(
        "topup.main:asgi_app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "3000")),
        log_level="info",
    )
