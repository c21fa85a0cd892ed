from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from storefront_orders.domain.models import Order, OrderLineItem, OrderStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckoutRequest(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    address_id: str = Field(min_length=1)
    note: Optional[str] = None


class AdminStatusRequest(_CamelModel):
    status: str = Field(min_length=1)
    receipt_no: Optional[str] = None


class OrderSummaryResponse(_CamelModel):
    id: str
    order_number: str
    status: OrderStatus
    receipt_no: Optional[str] = None
    total_price: Decimal
    placed_at: datetime

    @classmethod
    def from_domain(cls, order: Order):
        return cls(
            id=order.id,
            order_number=order.order_number,
            status=order.status,
            receipt_no=order.receipt_no,
            total_price=order.total_price,
            placed_at=order.placed_at
        )


class OrderItemResponse(_CamelModel):
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    subtotal: Decimal

    @classmethod
    def from_domain(cls, item: OrderLineItem):
        return cls(
            product_id=item.product_id,
            name=item.name_snapshot,
            unit_price=item.unit_price,
            quantity=item.quantity,
            subtotal=item.subtotal
        )


class OrderDetailResponse(OrderSummaryResponse):
    user_id: str
    note: Optional[str] = None
    address_snapshot: dict
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemResponse]

    @classmethod
    def from_domain(cls, order: Order):
        return cls(
            id=order.id,
            order_number=order.order_number,
            status=order.status,
            receipt_no=order.receipt_no,
            total_price=order.total_price,
            placed_at=order.placed_at,
            user_id=order.user_id,
            note=order.note,
            address_snapshot=order.address_snapshot,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[OrderItemResponse.from_domain(item) for item in order.items]
        )


class PaginationResponse(_CamelModel):
    page: int
    limit: int
    total: int
    status: Optional[str] = None
    search: Optional[str] = None


class OrderListResponse(_CamelModel):
    orders: List[OrderSummaryResponse]
    pagination: PaginationResponse


class MessageResponse(BaseModel):
    message: str


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    detail: ErrorDetail
