"""
Use cases: Order histories for buyers and sellers.

Both listings are newest first. The seller listing carries the buyer's
name and email so the seller can follow up on a payment.
"""

import logging

from bazar.application.marketplace.session import SessionContext, require_role
from bazar.domain.marketplace.entities import Order, UserRole
from bazar.domain.marketplace.ports import OrderRepository

logger = logging.getLogger(__name__)


class ListBuyerOrdersUseCase:
    """Purchase history for the signed-in buyer."""

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    async def execute(self, session: SessionContext) -> list[Order]:
        require_role(session, UserRole.BUYER, "view purchases")
        return await self._order_repo.list_by_buyer(session.profile.id)


class ListSellerOrdersUseCase:
    """Orders received by the signed-in seller."""

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    async def execute(self, session: SessionContext) -> list[Order]:
        require_role(session, UserRole.SELLER, "view received orders")
        orders = await self._order_repo.list_by_seller(session.profile.id)
        logger.debug("Seller=%s has %d order(s)", session.profile.id, len(orders))
        return orders
