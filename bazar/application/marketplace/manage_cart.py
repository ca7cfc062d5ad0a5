"""
Use cases: Add to, remove from, clear and view the session cart.

The cart is per-session in-memory state. Adding looks the product up
once and freezes its price into the line; nothing is re-fetched
before checkout.
"""

import logging
from decimal import Decimal

from bazar.application.marketplace.dtos import CartView, CheckoutQuote, ProductListing
from bazar.application.marketplace.session import SessionContext, require_role
from bazar.domain.marketplace.currency import BCV_RATE, format_money, format_ves
from bazar.domain.marketplace.entities import CartLine, UserRole
from bazar.domain.marketplace.order_drafting import (
    DELIVERY_FEE_USD,
    checkout_total,
    group_by_seller,
)
from bazar.domain.marketplace.ports import ProductRepository

logger = logging.getLogger(__name__)


class ManageCartUseCase:
    """Cart mutations for a buyer session."""

    def __init__(
        self,
        product_repo: ProductRepository,
        rate: Decimal = BCV_RATE,
        delivery_fee: Decimal = DELIVERY_FEE_USD,
    ) -> None:
        self._product_repo = product_repo
        self._rate = rate
        self._delivery_fee = delivery_fee

    async def add(self, session: SessionContext, product_id: str) -> CartLine:
        """Append the product to the cart.

        Raises:
            ProductNotFoundError: If the product does not exist.
            RoleNotAllowedError: If the session is not a buyer.
        """
        require_role(session, UserRole.BUYER, "use a cart")
        product = await self._product_repo.get_by_id(product_id)
        line = session.cart.add(product)
        logger.debug(
            "Added product=%s to cart of user=%s (%d lines)",
            product_id,
            session.auth.user_id,
            len(session.cart),
        )
        return line

    def remove_first(self, session: SessionContext, product_id: str) -> bool:
        return session.cart.remove_first(product_id)

    def clear(self, session: SessionContext) -> None:
        session.cart.clear()

    def view(self, session: SessionContext) -> CartView:
        listings = [
            ProductListing(
                product=line.product,
                price_display=format_money(line.price_usd, session.currency, self._rate),
            )
            for line in session.cart.lines
        ]
        subtotal = session.cart.subtotal_usd()
        return CartView(
            listings=listings,
            subtotal_usd=subtotal,
            subtotal_display=format_money(subtotal, session.currency, self._rate),
        )

    def quote(self, session: SessionContext, delivery: bool) -> CheckoutQuote:
        """Price the checkout without placing it.

        Raises:
            EmptyCartError: If the cart has no lines.
        """
        lines = session.cart.lines
        total = checkout_total(lines, delivery, self._delivery_fee)
        return CheckoutQuote(
            seller_count=len(group_by_seller(lines)),
            total_usd=total,
            total_display=format_money(total, session.currency, self._rate),
            total_ves_display=format_ves(total, self._rate),
            delivery_fee_usd=self._delivery_fee,
            delivery_fee_display=format_money(
                self._delivery_fee, session.currency, self._rate
            ),
        )
