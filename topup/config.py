# topup/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./topup.db"

    AUTH_SECRET_KEY: str = "change_this_secret"
    ADMIN_TOKEN_EXPIRE_MINUTES: int = 720       # 12 часов
    USER_TOKEN_EXPIRE_MINUTES: int = 10080      # 7 дней
    ADMIN_USERNAME: str = ""                    # первый админ, если задан
    ADMIN_PASSWORD: str = ""

    TELEGRAM_BOT_TOKEN: str = ""                # пусто = канал выключен
    TELEGRAM_CHAT_ID: str = ""
    TELEGRAM_API_BASE: str = "https://api.telegram.org"
    TELEGRAM_TIMEOUT: float = 10.0

    UPLOADS_DIR: str = "uploads"
    VALIDASI_URL: str = ""                      # сервис проверки ID игрока
    VALIDASI_TIMEOUT: float = 10.0

    CORS_ORIGINS: str = "*"

    LOG_DIR: str = "log"
    LOG_PRINT: str = "1"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
