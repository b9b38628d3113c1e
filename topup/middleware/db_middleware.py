# topup/middleware/db_middleware.py

from starlette.types import ASGIApp, Receive, Scope, Send
from topup.utils.database import AsyncSessionLocal

class DBSessionMiddleware:
    """
    Одна AsyncSession на HTTP-запрос в request.state.db.
    Websocket/lifespan пропускаем без сессии.
    """

    def __init__(self, app: ASGIApp, session_factory=None):
        self.app = app
        self.session_factory = session_factory or AsyncSessionLocal

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # убедимся, что state есть
        state = scope.setdefault("state", {})
        state["db"] = self.session_factory()
        try:
            await self.app(scope, receive, send)
        finally:
            # закрываем сессию только после завершения запроса
            await state["db"].close()
