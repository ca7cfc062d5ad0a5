"""
Adapter: Order repository.

Implements OrderRepository over the PostgREST `orders` table. Cart
lines are stored as a JSON array in `product_details`.
"""

from bazar.domain.marketplace.entities import NewOrder, Order
from bazar.domain.marketplace.ports import OrderRepository
from bazar.infrastructure.marketplace.rows import order_from_row, order_to_row
from bazar.infrastructure.marketplace.supabase_client import SupabaseClient

ORDERS_PATH = "/rest/v1/orders"
NEWEST_FIRST = "created_at.desc"
SELLER_SELECT = "*,buyer_profile:buyer_id(full_name,email)"


class SupabaseOrderRepository(OrderRepository):
    """Concrete adapter for buyer orders."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def insert(self, order: NewOrder) -> Order:
        rows = await self._client.request(
            "POST",
            ORDERS_PATH,
            json=order_to_row(order),
            headers={"Prefer": "return=representation"},
        )
        row = rows[0] if isinstance(rows, list) else rows
        return order_from_row(row)

    async def list_by_buyer(self, buyer_id: str) -> list[Order]:
        rows = await self._client.request(
            "GET",
            ORDERS_PATH,
            params={"select": "*", "buyer_id": f"eq.{buyer_id}", "order": NEWEST_FIRST},
        ) or []
        return [order_from_row(row) for row in rows]

    async def list_by_seller(self, seller_id: str) -> list[Order]:
        rows = await self._client.request(
            "GET",
            ORDERS_PATH,
            params={
                "select": SELLER_SELECT,
                "seller_id": f"eq.{seller_id}",
                "order": NEWEST_FIRST,
            },
        ) or []
        return [order_from_row(row) for row in rows]
