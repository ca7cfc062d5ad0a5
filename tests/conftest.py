"""
Shared fixtures and in-memory port fakes.

The fakes implement the domain ports without any network access so
use cases and API routes can be exercised end to end.
"""

from decimal import Decimal
from typing import Optional

import pytest

from bazar.application.marketplace.session import SessionContext, SessionRegistry
from bazar.domain.marketplace.entities import (
    AuthSession,
    NewOrder,
    NewProduct,
    Order,
    Product,
    Profile,
    SignUpResult,
    UserRole,
)
from bazar.domain.marketplace.errors import (
    AuthenticationError,
    BackendServiceError,
    ProductNotFoundError,
    ProfileConflictError,
    ProfileNotFoundError,
)
from bazar.domain.marketplace.ports import (
    DescriptionGeneratorPort,
    IdentityPort,
    ObjectStoragePort,
    OrderRepository,
    ProductRepository,
    ProfileRepository,
)


# ══════════════════════════════════════════════════════════════════════
# Builders
# ══════════════════════════════════════════════════════════════════════


def make_product(
    product_id: str = "p1",
    seller_id: str = "seller-a",
    price: str = "10.00",
    category: str = "Electrónica",
    title: Optional[str] = None,
) -> Product:
    return Product(
        id=product_id,
        seller_id=seller_id,
        title=title or f"Producto {product_id}",
        description="Descripción",
        price_usd=Decimal(price),
        category=category,
        image_url=f"https://img.test/{product_id}.png",
    )


def make_profile(user_id: str = "buyer-1", role: UserRole = UserRole.BUYER) -> Profile:
    return Profile(
        id=user_id,
        email=f"{user_id}@example.com",
        role=role,
        full_name=f"User {user_id}",
        company_name="Tienda" if role is UserRole.SELLER else None,
    )


def make_auth(user_id: str = "buyer-1", token: Optional[str] = None) -> AuthSession:
    return AuthSession(
        user_id=user_id,
        email=f"{user_id}@example.com",
        access_token=token or f"token-{user_id}",
    )


def make_session(
    user_id: str = "buyer-1", role: UserRole = UserRole.BUYER
) -> SessionContext:
    return SessionContext(auth=make_auth(user_id), profile=make_profile(user_id, role))


# ══════════════════════════════════════════════════════════════════════
# Fakes
# ══════════════════════════════════════════════════════════════════════


class FakeIdentity(IdentityPort):
    """Identity service that accepts one password per email."""

    def __init__(self, confirm_email: bool = False) -> None:
        self.confirm_email = confirm_email
        self.accounts: dict[str, tuple[str, str]] = {}
        self.signed_out: list[str] = []
        self.reset_requests: list[str] = []
        self.fail_sign_out = False

    def add_account(self, email: str, password: str, user_id: str) -> None:
        self.accounts[email] = (password, user_id)

    async def sign_up(self, email: str, password: str) -> SignUpResult:
        if email in self.accounts:
            raise AuthenticationError("User already registered")
        user_id = f"user-{len(self.accounts) + 1}"
        self.accounts[email] = (password, user_id)
        if self.confirm_email:
            return SignUpResult(user_id=user_id)
        return SignUpResult(user_id=user_id, session=make_auth(user_id))

    async def sign_in(self, email: str, password: str) -> AuthSession:
        stored = self.accounts.get(email)
        if stored is None or stored[0] != password:
            raise AuthenticationError("Invalid login credentials")
        return make_auth(stored[1])

    async def sign_out(self, access_token: str) -> None:
        if self.fail_sign_out:
            raise BackendServiceError("logout failed")
        self.signed_out.append(access_token)

    async def send_password_reset(self, email: str) -> None:
        self.reset_requests.append(email)


class FakeProfileRepository(ProfileRepository):
    """Profiles keyed by id. `appear_after` delays visibility by N lookups."""

    def __init__(self, appear_after: int = 0) -> None:
        self.rows: dict[str, Profile] = {}
        self.appear_after = appear_after
        self.lookups = 0

    async def get_by_id(self, user_id: str) -> Profile:
        self.lookups += 1
        if self.lookups <= self.appear_after or user_id not in self.rows:
            raise ProfileNotFoundError(user_id)
        return self.rows[user_id]

    async def insert(self, profile: Profile) -> None:
        if profile.id in self.rows:
            raise ProfileConflictError(profile.id)
        self.rows[profile.id] = profile


class FakeProductRepository(ProductRepository):
    def __init__(self, products: Optional[list[Product]] = None) -> None:
        self.products: dict[str, Product] = {p.id: p for p in products or []}

    async def list_all(self, category: Optional[str] = None) -> list[Product]:
        return [p for p in self.products.values() if category in (None, p.category)]

    async def list_by_seller(self, seller_id: str) -> list[Product]:
        return [p for p in self.products.values() if p.seller_id == seller_id]

    async def get_by_id(self, product_id: str) -> Product:
        if product_id not in self.products:
            raise ProductNotFoundError(product_id)
        return self.products[product_id]

    async def insert(self, product: NewProduct) -> Product:
        stored = Product(id=f"p{len(self.products) + 1}", **product.__dict__)
        self.products[stored.id] = stored
        return stored


class FakeOrderRepository(OrderRepository):
    """Stores orders in insertion order. `fail_for_seller` makes that write fail."""

    def __init__(self, fail_for_seller: Optional[str] = None) -> None:
        self.orders: list[Order] = []
        self.fail_for_seller = fail_for_seller

    async def insert(self, order: NewOrder) -> Order:
        if order.seller_id == self.fail_for_seller:
            raise BackendServiceError("insert failed")
        stored = Order(
            id=f"o{len(self.orders) + 1}",
            buyer_id=order.buyer_id,
            seller_id=order.seller_id,
            lines=order.lines,
            total_amount_usd=order.total_amount_usd,
            payment_ref_last4=order.payment_ref_last4,
            delivery_needed=order.delivery_needed,
            status=order.status,
            payment_proof_url=order.payment_proof_url,
        )
        self.orders.append(stored)
        return stored

    async def list_by_buyer(self, buyer_id: str) -> list[Order]:
        return [o for o in reversed(self.orders) if o.buyer_id == buyer_id]

    async def list_by_seller(self, seller_id: str) -> list[Order]:
        return [o for o in reversed(self.orders) if o.seller_id == seller_id]


class FakeStorage(ObjectStoragePort):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.uploads: dict[str, bytes] = {}

    async def upload(
        self, data: bytes, path: str, content_type: str = "application/octet-stream"
    ) -> Optional[str]:
        if self.fail:
            return None
        self.uploads[path] = data
        return f"https://cdn.test/{path}"


class FakeDescriptionGenerator(DescriptionGeneratorPort):
    def __init__(self, text: str = "Un producto excelente.") -> None:
        self.text = text
        self.calls: list[tuple[str, str]] = []

    async def generate(self, title: str, category: str) -> str:
        self.calls.append((title, category))
        return self.text


async def no_sleep(_seconds: float) -> None:
    return None


# ══════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def buyer_session() -> SessionContext:
    return make_session("buyer-1", UserRole.BUYER)


@pytest.fixture
def seller_session() -> SessionContext:
    return make_session("seller-a", UserRole.SELLER)
