from abc import ABC, abstractmethod
from typing import Optional, List, Tuple
from storefront_orders.domain.models import Order, OrderLineItem, OrderStatus, CartLine


class OrderRepository(ABC):
    @abstractmethod
    async def create(self, order: Order) -> None:
        pass

    @abstractmethod
    async def add_item(self, item: OrderLineItem) -> None:
        pass

    @abstractmethod
    async def get_by_id(self, order_id: str, for_update: bool = False) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_items(self, order_id: str) -> List[OrderLineItem]:
        pass

    @abstractmethod
    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        expected_status: OrderStatus,
        receipt_no: Optional[str] = None
    ) -> Optional[Order]:
        """Compare-and-set: обновляет только если статус все еще expected_status"""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str, limit: int, offset: int) -> Tuple[List[Order], int]:
        pass

    @abstractmethod
    async def list_admin(
        self,
        status: Optional[OrderStatus],
        search: Optional[str],
        limit: int,
        offset: int
    ) -> Tuple[List[Order], int]:
        pass


class CartSnapshotProvider(ABC):
    @abstractmethod
    async def get_snapshot(self, customer_id: str) -> List[CartLine]:
        pass

    @abstractmethod
    async def clear(self, customer_id: str) -> None:
        pass

