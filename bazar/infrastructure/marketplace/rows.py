"""
Row mapping between PostgREST JSON and domain entities.

Prices travel as JSON numbers; they are converted through str() so a
value like 19.99 becomes Decimal("19.99") rather than its binary float.
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from bazar.domain.marketplace.entities import (
    BuyerSummary,
    CartLine,
    NewOrder,
    NewProduct,
    Order,
    OrderStatus,
    Product,
    Profile,
    UserRole,
)

logger = logging.getLogger(__name__)


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.warning("Unparseable amount %r, using 0", value)
        return Decimal("0")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable timestamp %r", value)
        return None


def profile_from_row(row: dict[str, Any]) -> Profile:
    return Profile(
        id=row["id"],
        email=row.get("email") or "",
        role=UserRole(row.get("role") or UserRole.BUYER.value),
        full_name=row.get("full_name") or "",
        company_name=row.get("company_name"),
        logo_url=row.get("logo_url"),
    )


def profile_to_row(profile: Profile) -> dict[str, Any]:
    return {
        "id": profile.id,
        "email": profile.email,
        "role": profile.role.value,
        "full_name": profile.full_name,
        "company_name": profile.company_name,
        "logo_url": profile.logo_url,
    }


def product_from_row(row: dict[str, Any]) -> Product:
    return Product(
        id=str(row["id"]),
        seller_id=row["seller_id"],
        title=row.get("title") or "",
        description=row.get("description") or "",
        price_usd=to_decimal(row.get("price_usd")),
        category=row.get("category") or "",
        image_url=row.get("image_url") or "",
        created_at=parse_timestamp(row.get("created_at")),
    )


def product_to_row(product: NewProduct) -> dict[str, Any]:
    return {
        "seller_id": product.seller_id,
        "title": product.title,
        "description": product.description,
        "price_usd": float(product.price_usd),
        "category": product.category,
        "image_url": product.image_url,
    }


def line_to_item(line: CartLine) -> dict[str, Any]:
    """Serialize a cart line as one entry of an order's product_details."""
    product = line.product
    item = product_to_row(product)
    item["id"] = product.id
    item["quantity"] = line.quantity
    if product.created_at is not None:
        item["created_at"] = product.created_at.isoformat()
    return item


def item_to_line(item: dict[str, Any]) -> CartLine:
    return CartLine(product=product_from_row(item), quantity=int(item.get("quantity", 1)))


def order_to_row(order: NewOrder) -> dict[str, Any]:
    return {
        "buyer_id": order.buyer_id,
        "seller_id": order.seller_id,
        "product_details": [line_to_item(line) for line in order.lines],
        "total_amount_usd": float(order.total_amount_usd),
        "payment_ref_last4": order.payment_ref_last4,
        "payment_proof_url": order.payment_proof_url,
        "delivery_needed": order.delivery_needed,
        "status": order.status.value,
    }


def order_from_row(row: dict[str, Any]) -> Order:
    buyer_row = row.get("buyer_profile")
    buyer = None
    if isinstance(buyer_row, dict):
        buyer = BuyerSummary(
            full_name=buyer_row.get("full_name") or "",
            email=buyer_row.get("email") or "",
        )
    return Order(
        id=str(row["id"]),
        buyer_id=row["buyer_id"],
        seller_id=row["seller_id"],
        lines=tuple(item_to_line(item) for item in row.get("product_details") or []),
        total_amount_usd=to_decimal(row.get("total_amount_usd")),
        payment_ref_last4=row.get("payment_ref_last4") or "",
        delivery_needed=bool(row.get("delivery_needed")),
        status=OrderStatus(row.get("status") or OrderStatus.PENDING.value),
        payment_proof_url=row.get("payment_proof_url"),
        created_at=parse_timestamp(row.get("created_at")),
        buyer=buyer,
    )
