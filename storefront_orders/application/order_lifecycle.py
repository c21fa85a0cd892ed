import logging
from typing import Optional

from storefront_orders.domain.models import Actor, ActorRole, Order, OrderStatus, parse_order_id
from storefront_orders.domain.status_policy import check_transition, check_cancel, parse_status
from storefront_orders.domain.exceptions import (
    ConcurrentUpdateError,
    InvalidOrderIdError,
    OrderNotFoundError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


def _valid_id(order_id: str) -> str:
    try:
        return parse_order_id(order_id)
    except ValueError:
        raise InvalidOrderIdError()


class OrderLifecycleService:
    """Отмена и смена статуса заказа.

    Каждый метод работает в одной транзакции: строка заказа читается с блокировкой,
    запись идет через compare-and-set по статусу. Любой выход без commit — rollback.
    """

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def cancel(self, order_id: str, actor: Actor) -> None:
        oid = _valid_id(order_id)

        async with self._uow() as uow:
            order = await self._load(uow, oid)

            if not order.belongs_to(actor):
                logger.warning(f"Пользователь {actor.id} пытался отменить чужой заказ {oid}")
                raise UnauthorizedError()

            # Правило отмены проверяется раньше общей таблицы переходов
            decision = check_cancel(order.status)
            if not decision.allowed:
                logger.warning(f"Заказ {oid} не может быть отменен (status: {order.status.value})")
                decision.raise_if_denied()

            check_transition(order.status, OrderStatus.CANCELLED, actor.role).raise_if_denied()

            await self._write(uow, order, OrderStatus.CANCELLED)
            await uow.commit()

        logger.info(f"Заказ {oid} отмечен CANCELLED пользователем {actor.id}")

    async def advance_as_admin(
        self,
        order_id: str,
        actor: Actor,
        next_status,
        receipt_no: Optional[str] = None
    ) -> Order:
        oid = _valid_id(order_id)
        if not actor.is_staff:
            raise UnauthorizedError()

        async with self._uow() as uow:
            order = await self._load(uow, oid)
            updated = await self._advance(uow, order, actor, next_status, receipt_no)
            await uow.commit()

        return updated

    async def advance_as_customer(
        self,
        order_id: str,
        actor: Actor,
        next_status=OrderStatus.COMPLETED
    ) -> Order:
        oid = _valid_id(order_id)

        async with self._uow() as uow:
            order = await self._load(uow, oid)

            # Проверка владельца внутри транзакции, до commit
            if actor.role != ActorRole.CUSTOMER or not order.belongs_to(actor):
                logger.warning(f"Пользователь {actor.id} пытался изменить чужой заказ {oid}")
                raise UnauthorizedError()

            updated = await self._advance(uow, order, actor, next_status, None)
            await uow.commit()

        return updated

    async def _load(self, uow, order_id: str) -> Order:
        order = await uow.orders.get_by_id(order_id, for_update=True)
        if not order:
            raise OrderNotFoundError(f"Заказ {order_id} не найден")
        return order

    async def _advance(self, uow, order: Order, actor: Actor, next_status, receipt_no: Optional[str]) -> Order:
        target = parse_status(next_status)
        decision = check_transition(order.status, next_status, actor.role, receipt_no)
        if not decision.allowed:
            logger.warning(
                f"Переход {order.status.value} -> {next_status} для заказа {order.id} "
                f"отклонен ({decision.reason}, роль {actor.role.value})"
            )
            decision.raise_if_denied()

        # Накладная пишется только при переходе в SHIPPED
        receipt = receipt_no.strip() if target == OrderStatus.SHIPPED else None
        updated = await self._write(uow, order, target, receipt)
        logger.info(
            f"Заказ {order.id}: {order.status.value} -> {target.value} ({actor.role.value} {actor.id})"
        )
        return updated

    async def _write(self, uow, order: Order, target: OrderStatus, receipt_no: Optional[str] = None) -> Order:
        updated = await uow.orders.update_status(
            order.id, target, expected_status=order.status, receipt_no=receipt_no
        )
        if updated is None:
            logger.warning(f"Заказ {order.id} изменен параллельно, ожидался статус {order.status.value}")
            raise ConcurrentUpdateError()
        return updated
