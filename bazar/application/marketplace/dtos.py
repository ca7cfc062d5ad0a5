"""
Data Transfer Objects for the marketplace application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from bazar.domain.marketplace.entities import Order, Product, Profile


@dataclass(frozen=True)
class UploadedFile:
    """An image received from the client.

    Attributes:
        data: Raw file bytes.
        content_type: MIME type reported by the client.
        filename: Original file name, informational only.
    """

    data: bytes
    content_type: str = "application/octet-stream"
    filename: Optional[str] = None


@dataclass(frozen=True)
class SignInCommand:
    """Input DTO for password sign-in."""

    email: str
    password: str


@dataclass(frozen=True)
class SignInResult:
    """Output DTO for a successful sign-in.

    Attributes:
        access_token: Bearer token identifying the new session.
        profile: The signed-in user's profile.
    """

    access_token: str
    profile: Profile


@dataclass(frozen=True)
class RegisterAccountCommand:
    """Input DTO for account registration.

    Attributes:
        email: Login email.
        password: Login password.
        role: "buyer" or "seller".
        full_name: Display name.
        company_name: Seller-only company name.
        logo: Seller-only logo image.
    """

    email: str
    password: str
    role: str
    full_name: str
    company_name: Optional[str] = None
    logo: Optional[UploadedFile] = None


@dataclass(frozen=True)
class RegistrationResult:
    """Output DTO for registration.

    access_token and profile are set only when the identity service
    issued a session right away (no email confirmation required).
    """

    user_id: str
    message: str
    access_token: Optional[str] = None
    profile: Optional[Profile] = None


@dataclass(frozen=True)
class PlaceOrderCommand:
    """Input DTO for checkout.

    Attributes:
        delivery: Whether delivery was requested.
        payment_ref: Payment reference typed by the buyer.
        proof: Optional screenshot of the payment.
    """

    delivery: bool
    payment_ref: str
    proof: Optional[UploadedFile] = None


@dataclass(frozen=True)
class PlaceOrderResult:
    """Output DTO for a completed checkout."""

    orders: list[Order]
    proof_url: str
    total_usd: Decimal
    message: str


@dataclass(frozen=True)
class CreateProductCommand:
    """Input DTO for listing a product."""

    title: str
    description: str
    price_usd: Decimal
    category: str
    image: Optional[UploadedFile] = None


@dataclass(frozen=True)
class GenerateDescriptionQuery:
    """Input DTO for AI description generation."""

    title: str
    category: str


@dataclass(frozen=True)
class ProductListing:
    """A product with its price formatted in the session currency."""

    product: Product
    price_display: str


@dataclass(frozen=True)
class CartView:
    """Snapshot of a session cart for display."""

    listings: list[ProductListing] = field(default_factory=list)
    subtotal_usd: Decimal = Decimal("0")
    subtotal_display: str = ""


@dataclass(frozen=True)
class CheckoutQuote:
    """What the buyer will pay, shown before submitting payment.

    Attributes:
        seller_count: Number of orders the checkout will create.
        total_usd: Grand total including any delivery fees.
        total_display: total_usd in the session currency.
        total_ves_display: total_usd in bolívares, for the transfer.
        delivery_fee_usd: Fee charged per seller when delivery is chosen.
        delivery_fee_display: delivery_fee_usd in the session currency.
    """

    seller_count: int
    total_usd: Decimal
    total_display: str
    total_ves_display: str
    delivery_fee_usd: Decimal
    delivery_fee_display: str
