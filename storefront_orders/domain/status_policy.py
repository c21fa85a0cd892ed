"""Таблица переходов статусов заказа.

Чистая логика без БД: по (текущий статус, запрошенный статус, роль, накладная)
возвращает разрешение или отказ с конкретной ошибкой.
"""
from typing import Optional, Type
from pydantic import BaseModel

from storefront_orders.domain.models import OrderStatus, ActorRole
from storefront_orders.domain.exceptions import (
    DomainException,
    CannotCancelError,
    InvalidStatusTransitionError,
    ReceiptRequiredError,
)


TRANSITIONS: dict[tuple[OrderStatus, OrderStatus], frozenset[ActorRole]] = {
    (OrderStatus.PENDING, OrderStatus.CANCELLED): frozenset({ActorRole.CUSTOMER, ActorRole.ADMIN}),
    (OrderStatus.PENDING, OrderStatus.PAID): frozenset({ActorRole.SYSTEM, ActorRole.ADMIN}),
    (OrderStatus.PAID, OrderStatus.PROCESSING): frozenset({ActorRole.ADMIN}),
    (OrderStatus.PROCESSING, OrderStatus.SHIPPED): frozenset({ActorRole.ADMIN}),
    (OrderStatus.SHIPPED, OrderStatus.COMPLETED): frozenset({ActorRole.CUSTOMER, ActorRole.ADMIN}),
}


class TransitionDecision(BaseModel):
    allowed: bool
    error: Optional[Type[DomainException]] = None

    @property
    def reason(self) -> Optional[str]:
        return self.error.kind if self.error else None

    def raise_if_denied(self) -> None:
        if not self.allowed:
            raise self.error()


ALLOW = TransitionDecision(allowed=True)


def _deny(error: Type[DomainException]) -> TransitionDecision:
    return TransitionDecision(allowed=False, error=error)


def parse_status(value) -> Optional[OrderStatus]:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().upper())
    except ValueError:
        return None


def check_transition(current, requested, role: ActorRole, receipt_no: Optional[str] = None) -> TransitionDecision:
    current_status = parse_status(current)
    next_status = parse_status(requested)
    if current_status is None or next_status is None:
        return _deny(InvalidStatusTransitionError)

    roles = TRANSITIONS.get((current_status, next_status))
    if roles is None or role not in roles:
        return _deny(InvalidStatusTransitionError)

    if next_status == OrderStatus.SHIPPED and not (receipt_no or "").strip():
        return _deny(ReceiptRequiredError)

    return ALLOW


def check_cancel(current) -> TransitionDecision:
    """Бизнес-правило: отменить можно только PENDING заказ"""
    if parse_status(current) != OrderStatus.PENDING:
        return _deny(CannotCancelError)
    return ALLOW
