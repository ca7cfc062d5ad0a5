"""
Per-seller order drafting.

Partitions cart lines by seller and computes one total per seller.
Pure: no IO, independent of how drafts are persisted.

The delivery fee is charged once per seller group, not once per
checkout. A cart spanning two sellers with delivery pays the fee twice.
"""

from decimal import Decimal
from typing import Iterable

from bazar.domain.marketplace.entities import CartLine, OrderDraft
from bazar.domain.marketplace.errors import EmptyCartError

DELIVERY_FEE_USD = Decimal("5")


def group_by_seller(lines: Iterable[CartLine]) -> dict[str, list[CartLine]]:
    """Group lines by seller id.

    Sellers appear in order of first appearance; each group keeps
    the lines' original relative order.
    """
    groups: dict[str, list[CartLine]] = {}
    for line in lines:
        groups.setdefault(line.seller_id, []).append(line)
    return groups


def draft_orders(
    lines: Iterable[CartLine],
    delivery: bool,
    delivery_fee: Decimal = DELIVERY_FEE_USD,
) -> list[OrderDraft]:
    """Build one order draft per distinct seller.

    Args:
        lines: Cart lines in cart order.
        delivery: Whether the buyer requested delivery.
        delivery_fee: Flat fee added to each seller group when delivery is set.

    Returns:
        Drafts in order of each seller's first appearance in the cart.

    Raises:
        EmptyCartError: If there are no lines.
    """
    groups = group_by_seller(lines)
    if not groups:
        raise EmptyCartError()

    fee = Decimal(delivery_fee) if delivery else Decimal("0")
    drafts = []
    for seller_id, seller_lines in groups.items():
        subtotal = sum((line.price_usd for line in seller_lines), Decimal("0"))
        drafts.append(
            OrderDraft(
                seller_id=seller_id,
                lines=tuple(seller_lines),
                total_usd=subtotal + fee,
                delivery_needed=delivery,
            )
        )
    return drafts


def checkout_total(
    lines: Iterable[CartLine],
    delivery: bool,
    delivery_fee: Decimal = DELIVERY_FEE_USD,
) -> Decimal:
    """Return what the buyer pays across all seller orders."""
    drafts = draft_orders(lines, delivery, delivery_fee)
    return sum((d.total_usd for d in drafts), Decimal("0"))


def payment_ref_last4(payment_ref: str) -> str:
    """Keep the last four characters; shorter references are kept whole."""
    return payment_ref[-4:]
