import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Database
    POSTGRES_CONNECTION_STRING: str = os.getenv("POSTGRES_CONNECTION_STRING", "")
    CREATE_TABLES: bool = os.getenv("CREATE_TABLES", "0") == "1"

    # Cart service (пусто — корзина в той же БД)
    CART_SERVICE_URL: str = os.getenv("CART_SERVICE_URL", "")
    API_TOKEN: str = os.getenv("API_TOKEN", "")

    # Checkout
    ORDER_NUMBER_MAX_ATTEMPTS: int = int(os.getenv("ORDER_NUMBER_MAX_ATTEMPTS", "3"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def DATABASE_URL(self) -> str:
        """Асинхронный URL для приложения"""
        override = os.getenv("DATABASE_URL")
        if override:
            return override
        return self.POSTGRES_CONNECTION_STRING.replace("postgres://", "postgresql+asyncpg://")

    @property
    def SYNC_DATABASE_URL(self) -> str:
        """Синхронный URL для Alembic"""
        return self.POSTGRES_CONNECTION_STRING.replace("postgres://", "postgresql://")


settings = Settings()
