from sqlalchemy import (
    Table, Column, String, Integer, Numeric, Enum, DateTime, JSON, Text, MetaData, ForeignKey, Index
)
from sqlalchemy.sql import func

from storefront_orders.domain.models import OrderStatus

metadata = MetaData()

MONEY = Numeric(14, 2, asdecimal=True)


orders_tbl = Table(
    "orders",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("order_number", String(40), nullable=False, unique=True),
    Column("user_id", String(36), nullable=False, index=True),
    Column(
        "status",
        Enum(OrderStatus, name="order_status", native_enum=False, length=20),
        nullable=False,
        default=OrderStatus.PENDING
    ),
    Column("total_price", MONEY, nullable=False),
    Column("address_snapshot", JSON, nullable=False),
    Column("note", Text, nullable=True),
    Column("receipt_no", String(100), nullable=True),
    Column("placed_at", DateTime(timezone=True), nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
)

Index("ix_orders_status_placed_at", orders_tbl.c.status, orders_tbl.c.placed_at)


order_items_tbl = Table(
    "order_items",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("order_id", String(36), ForeignKey("orders.id"), nullable=False, index=True),
    Column("product_id", String(36), nullable=False),
    Column("name_snapshot", String(255), nullable=False),
    Column("unit_price", MONEY, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("total_price", MONEY, nullable=False)
)


# Корзина и каталог: сервис заказов только читает их и очищает корзину
products_tbl = Table(
    "products",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("price", MONEY, nullable=False)
)


carts_tbl = Table(
    "carts",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), nullable=False, unique=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)


cart_items_tbl = Table(
    "cart_items",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("cart_id", String(36), ForeignKey("carts.id"), nullable=False, index=True),
    Column("product_id", String(36), nullable=False),
    Column("qty", Integer, nullable=False),
    Column("price", MONEY, nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)
