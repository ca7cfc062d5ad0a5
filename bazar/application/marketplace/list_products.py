"""
Use case: Browse the catalog.

Input: optional category ("Todas" or None means every category)
Output: list[ProductListing] with prices in the session currency
Side effects: None.
Failure cases: InvalidCategoryError for a category outside the catalog.
"""

import logging
from decimal import Decimal
from typing import Optional

from bazar.application.marketplace.dtos import ProductListing
from bazar.application.marketplace.session import SessionContext, require_role
from bazar.domain.marketplace.catalog import ALL_CATEGORIES, is_known_category
from bazar.domain.marketplace.currency import BCV_RATE, format_money
from bazar.domain.marketplace.entities import Currency, Product, UserRole
from bazar.domain.marketplace.errors import InvalidCategoryError
from bazar.domain.marketplace.ports import ProductRepository

logger = logging.getLogger(__name__)


class ListProductsUseCase:
    """Lists products for buyers, optionally by category."""

    def __init__(self, product_repo: ProductRepository, rate: Decimal = BCV_RATE) -> None:
        self._product_repo = product_repo
        self._rate = rate

    async def execute(
        self, category: Optional[str], currency: Currency
    ) -> list[ProductListing]:
        selected = None if not category or category == ALL_CATEGORIES else category
        if selected is not None and not is_known_category(selected):
            raise InvalidCategoryError(selected)

        products = await self._product_repo.list_all(category=selected)
        logger.debug("Catalog query category=%s returned %d", selected, len(products))
        return to_listings(products, currency, self._rate)


class ListSellerProductsUseCase:
    """Lists a seller's own products."""

    def __init__(self, product_repo: ProductRepository, rate: Decimal = BCV_RATE) -> None:
        self._product_repo = product_repo
        self._rate = rate

    async def execute(self, session: SessionContext) -> list[ProductListing]:
        require_role(session, UserRole.SELLER, "view seller inventory")
        products = await self._product_repo.list_by_seller(session.profile.id)
        return to_listings(products, session.currency, self._rate)


def to_listings(
    products: list[Product], currency: Currency, rate: Decimal = BCV_RATE
) -> list[ProductListing]:
    return [
        ProductListing(product=p, price_display=format_money(p.price_usd, currency, rate))
        for p in products
    ]
