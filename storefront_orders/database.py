from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, async_sessionmaker, create_async_engine

from storefront_orders.config import settings


def make_engine(url: str | None = None) -> AsyncEngine:
    return create_async_engine(url or settings.DATABASE_URL, pool_pre_ping=True)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, expire_on_commit=False, autoflush=False)


engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


def init_db(url: str | None = None) -> async_sessionmaker[AsyncSession]:
    """Ленивая инициализация движка, чтобы импорт модуля не требовал БД"""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is None:
        engine = make_engine(url)
        AsyncSessionLocal = make_session_factory(engine)
    return AsyncSessionLocal


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return init_db()


async def dispose_db() -> None:
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
    engine = None
    AsyncSessionLocal = None
