"""
Adapter: Product repository.

Implements ProductRepository over the PostgREST `products` table.
"""

import logging
from typing import Optional

from bazar.domain.marketplace.entities import NewProduct, Product
from bazar.domain.marketplace.errors import NotFoundError, ProductNotFoundError
from bazar.domain.marketplace.ports import ProductRepository
from bazar.infrastructure.marketplace.rows import product_from_row, product_to_row
from bazar.infrastructure.marketplace.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

PRODUCTS_PATH = "/rest/v1/products"


class SupabaseProductRepository(ProductRepository):
    """Concrete adapter for listed products."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def list_all(self, category: Optional[str] = None) -> list[Product]:
        params = {"select": "*"}
        if category:
            params["category"] = f"eq.{category}"
        rows = await self._client.request("GET", PRODUCTS_PATH, params=params) or []
        return [product_from_row(row) for row in rows]

    async def list_by_seller(self, seller_id: str) -> list[Product]:
        rows = await self._client.request(
            "GET",
            PRODUCTS_PATH,
            params={"select": "*", "seller_id": f"eq.{seller_id}"},
        ) or []
        return [product_from_row(row) for row in rows]

    async def get_by_id(self, product_id: str) -> Product:
        try:
            row = await self._client.request(
                "GET",
                PRODUCTS_PATH,
                params={"select": "*", "id": f"eq.{product_id}"},
                headers={"Accept": "application/vnd.pgrst.object+json"},
            )
        except NotFoundError:
            raise ProductNotFoundError(product_id) from None
        return product_from_row(row)

    async def insert(self, product: NewProduct) -> Product:
        rows = await self._client.request(
            "POST",
            PRODUCTS_PATH,
            json=product_to_row(product),
            headers={"Prefer": "return=representation"},
        )
        row = rows[0] if isinstance(rows, list) else rows
        logger.debug("Inserted product id=%s", row.get("id"))
        return product_from_row(row)
