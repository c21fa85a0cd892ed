import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from storefront_orders.database import make_session_factory
from storefront_orders.domain.models import Actor, ActorRole
from storefront_orders.infrastructure.db_schema import metadata
from storefront_orders.infrastructure.unit_of_work import UnitOfWork

from helpers import CUSTOMER_ID, OTHER_CUSTOMER_ID, ADMIN_ID


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def uow(session_factory):
    return UnitOfWork(session_factory)


@pytest.fixture
def customer():
    return Actor(id=CUSTOMER_ID, role=ActorRole.CUSTOMER)


@pytest.fixture
def other_customer():
    return Actor(id=OTHER_CUSTOMER_ID, role=ActorRole.CUSTOMER)


@pytest.fixture
def admin():
    return Actor(id=ADMIN_ID, role=ActorRole.ADMIN)
