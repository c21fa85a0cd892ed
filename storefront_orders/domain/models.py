import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Денежная сумма в масштабе колонки БД: 2 знака, округление half-up"""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ActorRole(str, Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"


class Actor(BaseModel):
    """Кто выполняет действие. Передается явно в каждый use case"""
    id: str
    role: ActorRole

    @property
    def is_staff(self) -> bool:
        return self.role in (ActorRole.ADMIN, ActorRole.SYSTEM)


class CartLine(BaseModel):
    """Value Object — строка снимка корзины"""
    product_id: str
    name: str = ""
    quantity: int = Field(gt=0)
    unit_price: Decimal

    @field_validator("unit_price")
    @classmethod
    def _round_price(cls, value: Decimal) -> Decimal:
        # Цена приводится к масштабу БД до подсчета суммы
        return to_money(value)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class OrderLineItem(BaseModel):
    """Позиция заказа. Имя и цена — снимок на момент оформления"""
    id: str
    order_id: str
    product_id: str
    name_snapshot: str
    unit_price: Decimal
    quantity: int = Field(gt=0)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class Order(BaseModel):
    """Domain Entity — заказ"""
    id: str
    order_number: str
    user_id: str
    status: OrderStatus
    total_price: Decimal
    address_snapshot: dict
    note: Optional[str] = None
    receipt_no: Optional[str] = None
    placed_at: datetime
    created_at: datetime
    updated_at: datetime
    items: list[OrderLineItem] = []

    def belongs_to(self, actor: Actor) -> bool:
        return self.user_id == actor.id


def cart_total(lines: list[CartLine]) -> Decimal:
    """Сумма заказа: точная сумма unit_price * quantity, без float"""
    return sum((line.subtotal for line in lines), Decimal("0"))


def generate_order_number(now: datetime | None = None) -> str:
    """ORD-<UTC timestamp>-<6 hex>. Уникальность гарантирует unique-индекс в БД"""
    now = now or datetime.now(timezone.utc)
    return f"ORD-{now.strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:6].upper()}"


def parse_order_id(order_id: str) -> str:
    """Нормализует UUID заказа, ValueError если формат неверный"""
    return str(uuid.UUID(str(order_id)))
