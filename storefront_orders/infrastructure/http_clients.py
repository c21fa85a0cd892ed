import httpx
import logging
from decimal import Decimal
from typing import List

from storefront_orders.domain.models import CartLine
from storefront_orders.domain.exceptions import CartServiceError
from storefront_orders.application.interfaces import CartSnapshotProvider

logger = logging.getLogger(__name__)


class HTTPCartClient(CartSnapshotProvider):
    """Корзина во внешнем сервисе.

    clear() вызывается до commit заказа: если очистка упала, заказ откатывается.
    Если упал сам commit после успешной очистки, корзина останется пустой без заказа.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        self._base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._timeout = timeout
        self._transport = transport

    def _headers(self, customer_id: str) -> dict:
        return {"X-API-Key": self._api_token, "X-User-Id": customer_id}

    async def get_snapshot(self, customer_id: str) -> List[CartLine]:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    f"{self._base_url}/api/v1/cart",
                    headers=self._headers(customer_id),
                    timeout=self._timeout
                )

                if response.status_code == 200:
                    items = response.json().get("items") or []
                    return [
                        CartLine(
                            product_id=item["productId"],
                            name=item.get("name", ""),
                            quantity=item["qty"],
                            unit_price=Decimal(str(item["price"]))
                        )
                        for item in items
                    ]
                elif response.status_code == 404:
                    return []
                else:
                    raise CartServiceError(f"Cart service ошибка: {response.status_code}")

        except httpx.RequestError as e:
            logger.error(f"Cart service ошибка подключения: {e}")
            raise CartServiceError(f"Cart service не доступен: {str(e)}")

    async def clear(self, customer_id: str) -> None:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.delete(
                    f"{self._base_url}/api/v1/cart",
                    headers=self._headers(customer_id),
                    timeout=self._timeout
                )

                if response.status_code not in (200, 204):
                    raise CartServiceError(f"Cart service не очистил корзину: {response.status_code}")

        except httpx.RequestError as e:
            logger.error(f"Cart service ошибка подключения: {e}")
            raise CartServiceError(f"Cart service не доступен: {str(e)}")
