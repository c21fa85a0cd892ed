from contextlib import asynccontextmanager
from typing import Callable
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront_orders.application.interfaces import CartSnapshotProvider
from storefront_orders.infrastructure.repositories import (
    SQLAlchemyOrderRepository,
    SQLAlchemyCartRepository
)


CartProviderFactory = Callable[[AsyncSession], CartSnapshotProvider]


class UnitOfWork:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cart_provider_factory: CartProviderFactory = SQLAlchemyCartRepository
    ):
        self._session_factory = session_factory
        self._cart_provider_factory = cart_provider_factory

    @asynccontextmanager
    async def __call__(self):
        # При отмене запроса (CancelledError) сессия закрывается и незавершенная транзакция откатывается
        async with self._session_factory() as session:
            try:
                uow_impl = _UnitOfWorkImpl(session, self._cart_provider_factory(session))
                yield uow_impl
                # Если commit не вызван — rollback
                await session.rollback()
            except Exception:
                await session.rollback()
                raise


class _UnitOfWorkImpl:
    def __init__(self, session: AsyncSession, carts: CartSnapshotProvider):
        self._session = session
        self.orders = SQLAlchemyOrderRepository(session)
        self.carts = carts

    async def commit(self):
        await self._session.commit()

    async def rollback(self):
        await self._session.rollback()
