"""
Port interfaces (ABCs) for the marketplace bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Optional

from bazar.domain.marketplace.entities import (
    AuthSession,
    NewOrder,
    NewProduct,
    Order,
    Product,
    Profile,
    SignUpResult,
)


class IdentityPort(ABC):
    """Port for the hosted identity service."""

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> SignUpResult:
        """Create an identity. Returns a session if one was issued."""
        raise NotImplementedError

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Authenticate with email and password.

        Raises:
            AuthenticationError: If the credentials are rejected.
        """
        raise NotImplementedError

    @abstractmethod
    async def sign_out(self, access_token: str) -> None:
        """Revoke the given access token."""
        raise NotImplementedError

    @abstractmethod
    async def send_password_reset(self, email: str) -> None:
        """Send a password recovery email."""
        raise NotImplementedError


class ProfileRepository(ABC):
    """Port for profile rows, keyed by identity id."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Profile:
        """Return the profile for user_id.

        Raises:
            ProfileNotFoundError: If no row exists (yet).
        """
        raise NotImplementedError

    @abstractmethod
    async def insert(self, profile: Profile) -> None:
        """Insert a profile row.

        Raises:
            ProfileConflictError: If a row already exists for the id.
        """
        raise NotImplementedError


class ProductRepository(ABC):
    """Port for listed products."""

    @abstractmethod
    async def list_all(self, category: Optional[str] = None) -> list[Product]:
        """Return all products, optionally filtered by category."""
        raise NotImplementedError

    @abstractmethod
    async def list_by_seller(self, seller_id: str) -> list[Product]:
        """Return products listed by one seller."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, product_id: str) -> Product:
        """Return a product.

        Raises:
            ProductNotFoundError: If no product has that id.
        """
        raise NotImplementedError

    @abstractmethod
    async def insert(self, product: NewProduct) -> Product:
        """List a new product and return it with its id."""
        raise NotImplementedError


class OrderRepository(ABC):
    """Port for order records."""

    @abstractmethod
    async def insert(self, order: NewOrder) -> Order:
        """Persist one order and return it with its id."""
        raise NotImplementedError

    @abstractmethod
    async def list_by_buyer(self, buyer_id: str) -> list[Order]:
        """Return a buyer's orders, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def list_by_seller(self, seller_id: str) -> list[Order]:
        """Return orders addressed to a seller, newest first.

        Each order carries the buyer's name and email.
        """
        raise NotImplementedError


class ObjectStoragePort(ABC):
    """Port for public file storage."""

    @abstractmethod
    async def upload(
        self, data: bytes, path: str, content_type: str = "application/octet-stream"
    ) -> Optional[str]:
        """Upload bytes to path and return the public URL, or None on failure."""
        raise NotImplementedError


class DescriptionGeneratorPort(ABC):
    """Port for generating marketing copy for a product."""

    @abstractmethod
    async def generate(self, title: str, category: str) -> str:
        """Return a short description. Never raises; returns a fallback text."""
        raise NotImplementedError
