import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import insert

from storefront_orders.domain.models import Order, OrderLineItem, OrderStatus
from storefront_orders.infrastructure.db_schema import carts_tbl, cart_items_tbl, products_tbl
from storefront_orders.infrastructure.repositories import SQLAlchemyOrderRepository


CUSTOMER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_CUSTOMER_ID = "22222222-2222-2222-2222-222222222222"
ADMIN_ID = "99999999-9999-9999-9999-999999999999"


async def seed_cart(session_factory, user_id, lines):
    """lines: [(product_id, name, qty, price)]"""
    async with session_factory() as session:
        cart_id = str(uuid.uuid4())
        await session.execute(insert(carts_tbl).values(id=cart_id, user_id=user_id))
        for product_id, name, qty, price in lines:
            await session.execute(
                insert(products_tbl).prefix_with("OR IGNORE").values(id=product_id, name=name, price=price)
            )
            await session.execute(
                insert(cart_items_tbl).values(
                    id=str(uuid.uuid4()), cart_id=cart_id, product_id=product_id, qty=qty, price=price
                )
            )
        await session.commit()


def build_order(user_id, status=OrderStatus.PENDING, order_number=None, placed_at=None, items=None):
    now = placed_at or datetime.now(timezone.utc)
    order_id = str(uuid.uuid4())
    items = items or [("prod-1", "Kopi Arabika", 2, Decimal("5000"))]
    line_items = [
        OrderLineItem(
            id=str(uuid.uuid4()),
            order_id=order_id,
            product_id=product_id,
            name_snapshot=name,
            unit_price=price,
            quantity=qty,
        )
        for product_id, name, qty, price in items
    ]
    return Order(
        id=order_id,
        order_number=order_number or f"ORD-{uuid.uuid4().hex[:10].upper()}",
        user_id=user_id,
        status=status,
        total_price=sum((item.subtotal for item in line_items), Decimal("0")),
        address_snapshot={"address_id": "addr-1"},
        placed_at=now,
        created_at=now,
        updated_at=now,
        items=line_items,
    )


async def seed_order(session_factory, user_id, status=OrderStatus.PENDING, **kwargs):
    order = build_order(user_id, status, **kwargs)
    async with session_factory() as session:
        repo = SQLAlchemyOrderRepository(session)
        await repo.create(order)
        for item in order.items:
            await repo.add_item(item)
        await session.commit()
    return order


async def seed_orders(session_factory, user_id, count, status=OrderStatus.PENDING):
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return [
        await seed_order(session_factory, user_id, status, placed_at=base + timedelta(minutes=i))
        for i in range(count)
    ]


async def fetch_order(session_factory, order_id):
    async with session_factory() as session:
        return await SQLAlchemyOrderRepository(session).get_by_id(order_id)
