"""
Pydantic schemas for marketplace API request/response validation.

These schemas enforce input validation and define the API contract.
Multipart routes (registration, checkout, product creation) read form
fields directly and only use schemas for their responses.
No business logic belongs here.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

EMAIL_MAX_LEN = 254


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    open_sessions: int = 0


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    error: str
    detail: str | None = None


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


# ------------------------------------------------------------------
# Auth
# ------------------------------------------------------------------


class SignInRequest(BaseModel):
    """Request schema for password sign-in."""

    email: str = Field(..., min_length=3, max_length=EMAIL_MAX_LEN)
    password: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    """Request schema for password recovery. An empty email is rejected by the use case."""

    email: str = Field(default="", max_length=EMAIL_MAX_LEN)


class ProfileItem(BaseModel):
    """Public view of a marketplace profile."""

    id: str
    email: str
    role: str
    full_name: str
    company_name: str | None = None
    logo_url: str | None = None


class SignInResponse(BaseModel):
    """Response schema for sign-in.

    Attributes:
        access_token: Bearer token for every authenticated route.
        token_type: Always "bearer".
        profile: The signed-in profile.
    """

    access_token: str
    token_type: str = "bearer"
    profile: ProfileItem


class RegistrationResponse(BaseModel):
    """Response schema for registration.

    access_token and profile are present only when the account was
    signed in right away.
    """

    user_id: str
    message: str
    access_token: str | None = None
    profile: ProfileItem | None = None


# ------------------------------------------------------------------
# Session
# ------------------------------------------------------------------


class SessionResponse(BaseModel):
    """Current session state."""

    profile: ProfileItem
    currency: str
    cart_count: int


class CurrencyResponse(BaseModel):
    currency: str


# ------------------------------------------------------------------
# Catalog and cart
# ------------------------------------------------------------------


class CategoriesResponse(BaseModel):
    """Catalog categories plus the label meaning "all of them"."""

    all_label: str
    categories: list[str]


class ProductItem(BaseModel):
    """A product with its price formatted in the session currency."""

    id: str
    seller_id: str
    title: str
    description: str
    price_usd: Decimal
    category: str
    image_url: str
    created_at: datetime | None = None
    price_display: str


class ProductListResponse(BaseModel):
    products: list[ProductItem]


class AddCartItemRequest(BaseModel):
    """Request schema for adding a product to the cart."""

    product_id: str = Field(..., min_length=1)


class CartResponse(BaseModel):
    """Cart lines and subtotal in the session currency."""

    items: list[ProductItem]
    count: int
    subtotal_usd: Decimal
    subtotal_display: str
    currency: str


class CheckoutQuoteResponse(BaseModel):
    """Grand total for a checkout that has not been placed yet."""

    seller_count: int
    delivery: bool
    total_usd: Decimal
    total_display: str
    total_ves_display: str
    delivery_fee_usd: Decimal
    delivery_fee_display: str


class DescriptionRequest(BaseModel):
    """Request schema for AI description generation."""

    title: str = Field(default="", max_length=200)
    category: str = Field(..., min_length=1)


class DescriptionResponse(BaseModel):
    description: str


# ------------------------------------------------------------------
# Orders
# ------------------------------------------------------------------


class OrderLineItem(BaseModel):
    """One product snapshot inside an order."""

    product_id: str
    title: str
    price_usd: Decimal
    quantity: int
    image_url: str


class BuyerItem(BaseModel):
    full_name: str
    email: str


class OrderItem(BaseModel):
    """A persisted order addressed to one seller."""

    id: str
    buyer_id: str
    seller_id: str
    lines: list[OrderLineItem]
    total_amount_usd: Decimal
    payment_ref_last4: str
    payment_proof_url: str | None = None
    delivery_needed: bool
    status: str
    created_at: datetime | None = None
    buyer: BuyerItem | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderItem]


class CheckoutResponse(BaseModel):
    """Response schema for a completed checkout.

    Attributes:
        orders: One order per seller.
        proof_url: Public URL of the payment proof, empty if none.
        total_usd: Sum of all order totals.
        total_display: total_usd in the session currency.
        message: Confirmation shown to the buyer.
    """

    orders: list[OrderItem]
    proof_url: str
    total_usd: Decimal
    total_display: str
    message: str
