import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import IntegrityError

from storefront_orders.domain.models import (
    Actor, Order, OrderLineItem, OrderStatus, CartLine, cart_total, generate_order_number
)
from storefront_orders.domain.exceptions import CartEmptyError, OrderFailedError


logger = logging.getLogger(__name__)


class CheckoutDTO(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    address_id: str = Field(min_length=1)
    note: Optional[str] = None


class _OrderNumberTaken(Exception):
    pass


def merge_lines(lines: List[CartLine]) -> List[CartLine]:
    """Одна позиция на пару (товар, цена): дубликаты складываются, разные цены не смешиваются"""
    merged: dict[tuple, CartLine] = {}
    for line in lines:
        key = (line.product_id, line.unit_price)
        if key in merged:
            existing = merged[key]
            merged[key] = existing.model_copy(update={"quantity": existing.quantity + line.quantity})
        else:
            merged[key] = line
    return list(merged.values())


class CheckoutUseCase:
    def __init__(self, unit_of_work, max_attempts: int = 3):
        self._uow = unit_of_work
        self._max_attempts = max(1, max_attempts)

    async def __call__(self, actor: Actor, data: CheckoutDTO) -> Order:
        logger.info(f"Checkout для пользователя {actor.id}")

        # 1. Снимок корзины — вне пишущей транзакции
        async with self._uow() as uow:
            lines = merge_lines(await uow.carts.get_snapshot(actor.id))

        # 2. Пустая корзина — транзакция не открывается
        if not lines:
            raise CartEmptyError()

        # 3. Сумма в Decimal
        total = cart_total(lines)

        for attempt in range(1, self._max_attempts + 1):
            # 4. Номер заказа
            order = self._build_order(actor, data, lines, total)
            try:
                await self._persist(order, actor.id)
            except _OrderNumberTaken:
                if attempt < self._max_attempts:
                    logger.warning(f"Номер {order.order_number} занят, повтор (попытка {attempt})")
                    continue
                logger.error(f"Не удалось подобрать уникальный номер заказа за {attempt} попыток")
                raise OrderFailedError()
            except Exception as e:
                logger.error(f"Checkout для {actor.id} откатан: {e}")
                raise OrderFailedError() from e

            logger.info(f"Заказ создан: {order.order_number} ({order.id}), сумма {order.total_price}")
            return order

        raise OrderFailedError()

    async def _persist(self, order: Order, customer_id: str) -> None:
        # 5-8. Заказ, позиции, очистка корзины и commit в одной транзакции
        async with self._uow() as uow:
            try:
                await uow.orders.create(order)
            except IntegrityError as e:
                raise _OrderNumberTaken() from e

            for item in order.items:
                await uow.orders.add_item(item)

            await uow.carts.clear(customer_id)
            await uow.commit()

    def _build_order(self, actor: Actor, data: CheckoutDTO, lines: List[CartLine], total) -> Order:
        now = datetime.now(timezone.utc)
        order_id = str(uuid.uuid4())
        items = [
            OrderLineItem(
                id=str(uuid.uuid4()),
                order_id=order_id,
                product_id=line.product_id,
                name_snapshot=line.name or line.product_id,
                unit_price=line.unit_price,
                quantity=line.quantity
            )
            for line in lines
        ]
        return Order(
            id=order_id,
            order_number=generate_order_number(now),
            user_id=actor.id,
            status=OrderStatus.PENDING,
            total_price=total,
            address_snapshot={"address_id": data.address_id},
            note=data.note or None,
            placed_at=now,
            created_at=now,
            updated_at=now,
            items=items
        )
