"""
Domain entities for the marketplace bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class UserRole(Enum):
    """Account role chosen at registration."""

    BUYER = "buyer"
    SELLER = "seller"


class OrderStatus(Enum):
    """Order lifecycle state. Orders are only ever created as PENDING."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Currency(Enum):
    """Display currency for prices."""

    USD = "USD"
    VES = "VES"


@dataclass(frozen=True)
class Profile:
    """Marketplace profile, keyed by the authentication identity id."""

    id: str
    email: str
    role: UserRole
    full_name: str
    company_name: Optional[str] = None
    logo_url: Optional[str] = None

    @property
    def is_seller(self) -> bool:
        return self.role is UserRole.SELLER


@dataclass(frozen=True)
class AuthSession:
    """Tokens issued by the identity service for a signed-in user."""

    user_id: str
    email: str
    access_token: str
    refresh_token: Optional[str] = None


@dataclass(frozen=True)
class SignUpResult:
    """Outcome of a sign-up.

    session is None when the identity service requires email
    confirmation before issuing tokens.
    """

    user_id: str
    session: Optional[AuthSession] = None


@dataclass(frozen=True)
class Product:
    """A listed product. Immutable once listed."""

    id: str
    seller_id: str
    title: str
    description: str
    price_usd: Decimal
    category: str
    image_url: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewProduct:
    """A product about to be listed (no id yet)."""

    seller_id: str
    title: str
    description: str
    price_usd: Decimal
    category: str
    image_url: str


@dataclass(frozen=True)
class CartLine:
    """A product snapshot in the cart.

    The price is frozen at add-to-cart time. Quantity is always 1;
    adding the same product twice yields two lines.
    """

    product: Product
    quantity: int = 1

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def seller_id(self) -> str:
        return self.product.seller_id

    @property
    def price_usd(self) -> Decimal:
        return self.product.price_usd


@dataclass(frozen=True)
class OrderDraft:
    """Per-seller order computed from a cart, before persistence."""

    seller_id: str
    lines: tuple[CartLine, ...]
    total_usd: Decimal
    delivery_needed: bool


@dataclass(frozen=True)
class NewOrder:
    """An order ready to be written to the backing store."""

    buyer_id: str
    seller_id: str
    lines: tuple[CartLine, ...]
    total_amount_usd: Decimal
    payment_ref_last4: str
    payment_proof_url: str
    delivery_needed: bool
    status: OrderStatus = OrderStatus.PENDING


@dataclass(frozen=True)
class BuyerSummary:
    """Buyer fields joined onto a seller-side order listing."""

    full_name: str
    email: str


@dataclass(frozen=True)
class Order:
    """A persisted order addressed to one seller."""

    id: str
    buyer_id: str
    seller_id: str
    lines: tuple[CartLine, ...]
    total_amount_usd: Decimal
    payment_ref_last4: str
    delivery_needed: bool
    status: OrderStatus
    payment_proof_url: Optional[str] = None
    created_at: Optional[datetime] = None
    buyer: Optional[BuyerSummary] = None
