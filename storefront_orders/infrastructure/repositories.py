from typing import Optional, List, Tuple
from datetime import datetime, timezone
from sqlalchemy import select, insert, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_orders.domain.models import Order, OrderLineItem, OrderStatus, CartLine
from storefront_orders.infrastructure.db_schema import (
    orders_tbl, order_items_tbl, carts_tbl, cart_items_tbl, products_tbl
)
from storefront_orders.application.interfaces import OrderRepository, CartSnapshotProvider


class SQLAlchemyOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, order: Order) -> None:
        stmt = insert(orders_tbl).values(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            status=order.status,
            total_price=order.total_price,
            address_snapshot=order.address_snapshot,
            note=order.note,
            receipt_no=order.receipt_no,
            placed_at=order.placed_at,
            created_at=order.created_at,
            updated_at=order.updated_at
        )
        await self._session.execute(stmt)

    async def add_item(self, item: OrderLineItem) -> None:
        stmt = insert(order_items_tbl).values(
            id=item.id,
            order_id=item.order_id,
            product_id=item.product_id,
            name_snapshot=item.name_snapshot,
            unit_price=item.unit_price,
            quantity=item.quantity,
            total_price=item.subtotal
        )
        await self._session.execute(stmt)

    async def get_by_id(self, order_id: str, for_update: bool = False) -> Optional[Order]:
        stmt = select(orders_tbl).where(orders_tbl.c.id == order_id)
        if for_update:
            # На SQLite FOR UPDATE не рендерится, на Postgres — блокировка строки
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def get_items(self, order_id: str) -> List[OrderLineItem]:
        result = await self._session.execute(
            select(order_items_tbl)
            .where(order_items_tbl.c.order_id == order_id)
            .order_by(order_items_tbl.c.name_snapshot.asc(), order_items_tbl.c.id.asc())
        )
        return [self._item_to_domain(row) for row in result.fetchall()]

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        expected_status: OrderStatus,
        receipt_no: Optional[str] = None
    ) -> Optional[Order]:
        values = {"status": status, "updated_at": datetime.now(timezone.utc)}
        if receipt_no is not None:
            values["receipt_no"] = receipt_no
        stmt = (
            update(orders_tbl)
            .where(orders_tbl.c.id == order_id, orders_tbl.c.status == expected_status)
            .values(**values)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(order_id)

    async def list_by_user(self, user_id: str, limit: int, offset: int) -> Tuple[List[Order], int]:
        return await self._paginate([orders_tbl.c.user_id == user_id], limit, offset)

    async def list_admin(
        self,
        status: Optional[OrderStatus],
        search: Optional[str],
        limit: int,
        offset: int
    ) -> Tuple[List[Order], int]:
        conditions = []
        if status is not None:
            conditions.append(orders_tbl.c.status == status)
        if search:
            conditions.append(
                func.lower(orders_tbl.c.order_number).contains(search.lower(), autoescape=True)
            )
        return await self._paginate(conditions, limit, offset)

    async def _paginate(self, conditions, limit: int, offset: int) -> Tuple[List[Order], int]:
        total = await self._session.scalar(
            select(func.count()).select_from(orders_tbl).where(*conditions)
        )
        result = await self._session.execute(
            select(orders_tbl)
            .where(*conditions)
            .order_by(orders_tbl.c.placed_at.desc(), orders_tbl.c.order_number.desc())
            .limit(limit)
            .offset(offset)
        )
        return [self._to_domain(row) for row in result.fetchall()], total or 0

    def _to_domain(self, row) -> Order:
        """Трансформация DB → Domain"""
        return Order(
            id=row.id,
            order_number=row.order_number,
            user_id=row.user_id,
            status=OrderStatus(row.status),
            total_price=row.total_price,
            address_snapshot=row.address_snapshot,
            note=row.note,
            receipt_no=row.receipt_no,
            placed_at=row.placed_at,
            created_at=row.created_at,
            updated_at=row.updated_at
        )

    def _item_to_domain(self, row) -> OrderLineItem:
        return OrderLineItem(
            id=row.id,
            order_id=row.order_id,
            product_id=row.product_id,
            name_snapshot=row.name_snapshot,
            unit_price=row.unit_price,
            quantity=row.quantity
        )


class SQLAlchemyCartRepository(CartSnapshotProvider):
    """Корзина в той же БД: очистка идет в той же транзакции, что и заказ"""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_snapshot(self, customer_id: str) -> List[CartLine]:
        result = await self._session.execute(
            select(
                cart_items_tbl.c.product_id,
                cart_items_tbl.c.qty,
                cart_items_tbl.c.price,
                products_tbl.c.name
            )
            .select_from(
                cart_items_tbl
                .join(carts_tbl, carts_tbl.c.id == cart_items_tbl.c.cart_id)
                .outerjoin(products_tbl, products_tbl.c.id == cart_items_tbl.c.product_id)
            )
            .where(carts_tbl.c.user_id == customer_id)
            .order_by(cart_items_tbl.c.created_at.asc(), cart_items_tbl.c.id.asc())
        )
        return [
            CartLine(
                product_id=row.product_id,
                name=row.name or "",
                quantity=row.qty,
                unit_price=row.price
            )
            for row in result.fetchall()
        ]

    async def clear(self, customer_id: str) -> None:
        cart_ids = select(carts_tbl.c.id).where(carts_tbl.c.user_id == customer_id)
        await self._session.execute(
            delete(cart_items_tbl).where(cart_items_tbl.c.cart_id.in_(cart_ids))
        )
