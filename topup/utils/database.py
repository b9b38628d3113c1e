# topup/utils/database.py

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.future import select
from topup.config import settings
from topup.utils.security import hash_password

# ────────────── Base для моделей ──────────────
Base = declarative_base()  # базовый класс для всех моделей SQLAlchemy

# ────────────── Асинхронный движок ──────────────
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False  # True можно включить для отладки SQL
)

# ────────────── Асинхронная сессия ──────────────
# expire_on_commit=False: после commit заказ ещё нужен для уведомлений и ответа
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# ────────────── Инициализация базы данных ──────────────
async def init_db():
    """
    Создаёт все таблицы в базе данных (если ещё не созданы).
    Если в настройках задан ADMIN_USERNAME/ADMIN_PASSWORD и администратора
    с таким логином ещё нет - создаёт его. Пароль хранится в виде хэша.
    """
    # модели должны быть импортированы до create_all
    from topup.models.account import Admin
    import topup.models.order  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if not (settings.ADMIN_USERNAME and settings.ADMIN_PASSWORD):
        return None

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(Admin).where(Admin.username == settings.ADMIN_USERNAME))
        if result.scalar_one_or_none() is not None:
            return None

        admin = Admin(
            username=settings.ADMIN_USERNAME,
            password_hash=hash_password(settings.ADMIN_PASSWORD),
        )
        session.add(admin)
        await session.commit()
        return admin.username
