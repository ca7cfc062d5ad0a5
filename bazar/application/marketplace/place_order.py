"""
Use case: Check out the session cart.

Input: PlaceOrderCommand (delivery flag, payment reference, optional proof)
Output: PlaceOrderResult (one order per seller in the cart)
Side effects:
    - Uploads the payment proof to storage.
    - Writes one pending order per seller, in sequence.
    - Removes the drafted lines from the cart on success. Lines added
      while the checkout was running stay in the cart.
Failure cases:
    - EmptyCartError before any network call.
    - CheckoutInProgressError while another checkout holds the session.
    - RoleNotAllowedError for non-buyers.
    - A failed proof upload is logged; orders are written without proof.
    - OrderPersistenceError on the first failed order write. Remaining
      writes are skipped, earlier writes are kept and reported, and the
      cart is left intact.
"""

import logging
from decimal import Decimal
from typing import Sequence

from bazar.application.marketplace.dtos import (
    PlaceOrderCommand,
    PlaceOrderResult,
    UploadedFile,
)
from bazar.application.marketplace.session import SessionContext, require_role
from bazar.domain.marketplace.catalog import payment_proof_path
from bazar.domain.marketplace.entities import (
    CartLine,
    NewOrder,
    Order,
    OrderStatus,
    UserRole,
)
from bazar.domain.marketplace.errors import (
    CheckoutInProgressError,
    EmptyCartError,
    MarketplaceDomainError,
    OrderPersistenceError,
)
from bazar.domain.marketplace.order_drafting import (
    DELIVERY_FEE_USD,
    draft_orders,
    payment_ref_last4,
)
from bazar.domain.marketplace.ports import ObjectStoragePort, OrderRepository

logger = logging.getLogger(__name__)

ORDER_PLACED_MESSAGE = "Compra realizada con éxito! El vendedor verificará tu pago."


class PlaceOrderUseCase:
    """Turns a cart into per-seller pending orders."""

    def __init__(
        self,
        order_repo: OrderRepository,
        storage: ObjectStoragePort,
        delivery_fee: Decimal = DELIVERY_FEE_USD,
    ) -> None:
        self._order_repo = order_repo
        self._storage = storage
        self._delivery_fee = delivery_fee

    async def execute(
        self, session: SessionContext, command: PlaceOrderCommand
    ) -> PlaceOrderResult:
        """Run checkout for the session's cart.

        Args:
            session: The buyer's session; drafted lines leave its cart.
            command: Delivery flag, payment reference and optional proof.

        Returns:
            The created orders and the success notification.
        """
        require_role(session, UserRole.BUYER, "place orders")
        if session.cart.is_empty:
            raise EmptyCartError()
        if session.checkout_lock.locked():
            raise CheckoutInProgressError()

        async with session.checkout_lock:
            lines = session.cart.lines
            result = await self._checkout(session.profile.id, lines, command)
            session.cart.remove_lines(lines)
        return result

    async def _checkout(
        self, buyer_id: str, lines: Sequence[CartLine], command: PlaceOrderCommand
    ) -> PlaceOrderResult:
        logger.info(
            "Checkout for buyer=%s: %d line(s), delivery=%s",
            buyer_id,
            len(lines),
            command.delivery,
        )

        proof_url = await self._upload_proof(buyer_id, command.proof)
        drafts = draft_orders(lines, command.delivery, self._delivery_fee)
        last4 = payment_ref_last4(command.payment_ref)

        written: list[Order] = []
        for draft in drafts:
            new_order = NewOrder(
                buyer_id=buyer_id,
                seller_id=draft.seller_id,
                lines=draft.lines,
                total_amount_usd=draft.total_usd,
                payment_ref_last4=last4,
                payment_proof_url=proof_url,
                delivery_needed=draft.delivery_needed,
                status=OrderStatus.PENDING,
            )
            try:
                written.append(await self._order_repo.insert(new_order))
            except MarketplaceDomainError as exc:
                logger.error(
                    "Order write failed for seller=%s after %d written: %s",
                    draft.seller_id,
                    len(written),
                    exc.message,
                )
                raise OrderPersistenceError(
                    failed_seller_id=draft.seller_id,
                    written_order_ids=[o.id for o in written],
                    reason=exc.message,
                ) from exc

        total = sum((d.total_usd for d in drafts), Decimal("0"))
        logger.info(
            "Checkout complete for buyer=%s: %d order(s), total=%s USD",
            buyer_id,
            len(written),
            total,
        )
        return PlaceOrderResult(
            orders=written,
            proof_url=proof_url,
            total_usd=total,
            message=ORDER_PLACED_MESSAGE,
        )

    async def _upload_proof(self, buyer_id: str, proof: UploadedFile | None) -> str:
        if proof is None or not proof.data:
            return ""
        url = await self._storage.upload(
            proof.data, payment_proof_path(buyer_id), proof.content_type
        )
        if not url:
            logger.warning(
                "Payment proof upload failed for buyer=%s; recording order without proof.",
                buyer_id,
            )
            return ""
        return url
