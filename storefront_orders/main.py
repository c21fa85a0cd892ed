import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from storefront_orders.config import settings
from storefront_orders.presentation.api import router
from storefront_orders import database
from storefront_orders.infrastructure.db_schema import metadata

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    database.init_db()

    # В проде схему создает alembic, create_all — для локального запуска
    if settings.CREATE_TABLES:
        async with database.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        logger.info("Таблицы созданы")

    yield

    logger.info("Приложение останавливается...")
    await database.dispose_db()


app = FastAPI(
    title="Storefront Order Service",
    description="Оформление заказов и жизненный цикл статусов",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "healthy"}
