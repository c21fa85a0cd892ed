from typing import List, Optional
from pydantic import BaseModel

from storefront_orders.domain.models import Actor, Order, parse_order_id
from storefront_orders.domain.status_policy import parse_status
from storefront_orders.domain.exceptions import (
    InvalidOrderIdError, OrderNotFoundError, UnauthorizedError
)


CUSTOMER_DEFAULT_LIMIT = 10
ADMIN_DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class Page(BaseModel):
    items: List[Order]
    page: int
    limit: int
    total: int


def normalize_pagination(page: Optional[int], limit: Optional[int], default_limit: int) -> tuple[int, int]:
    """page < 1 → 1; limit вне [1, 100] → значение по умолчанию для представления"""
    page = page if page and page >= 1 else 1
    limit = limit if limit and 1 <= limit <= MAX_LIMIT else default_limit
    return page, limit


class OrderQueryService:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def list_for_customer(self, actor: Actor, page: Optional[int] = None, limit: Optional[int] = None) -> Page:
        page, limit = normalize_pagination(page, limit, CUSTOMER_DEFAULT_LIMIT)
        async with self._uow() as uow:
            orders, total = await uow.orders.list_by_user(actor.id, limit, (page - 1) * limit)
        return Page(items=orders, page=page, limit=limit, total=total)

    async def list_for_admin(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None
    ) -> Page:
        page, limit = normalize_pagination(page, limit, ADMIN_DEFAULT_LIMIT)
        status_filter = None
        if status:
            status_filter = parse_status(status)
            if status_filter is None:
                # Фильтр по равенству: неизвестный статус не совпадет ни с одним заказом
                return Page(items=[], page=page, limit=limit, total=0)

        async with self._uow() as uow:
            orders, total = await uow.orders.list_admin(
                status_filter, (search or "").strip() or None, limit, (page - 1) * limit
            )
        return Page(items=orders, page=page, limit=limit, total=total)

    async def detail(self, order_id: str, actor: Actor) -> Order:
        try:
            oid = parse_order_id(order_id)
        except ValueError:
            raise InvalidOrderIdError()

        async with self._uow() as uow:
            order = await uow.orders.get_by_id(oid)
            if not order:
                raise OrderNotFoundError(f"Заказ {oid} не найден")
            if not actor.is_staff and not order.belongs_to(actor):
                raise UnauthorizedError()

            # Ошибка чтения позиций пробрасывается, заказ без позиций не отдаем
            items = await uow.orders.get_items(oid)

        return order.model_copy(update={"items": items})
