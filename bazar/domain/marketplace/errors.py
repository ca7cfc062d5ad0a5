"""
Domain-specific errors for the marketplace bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class MarketplaceDomainError(Exception):
    """Base error for all marketplace domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class NotFoundError(MarketplaceDomainError):
    """Raised when a requested record does not exist."""


class ProfileNotFoundError(NotFoundError):
    """Raised when no profile row exists yet for an identity."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"Profile not found: {user_id}")
        self.user_id = user_id


class ProductNotFoundError(NotFoundError):
    """Raised when a product id does not match any listed product."""

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class ProfileUnavailableError(MarketplaceDomainError):
    """Raised when a profile never appeared after the bootstrap retries."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"No profile found for user {user_id} after retries")
        self.user_id = user_id


class ConflictError(MarketplaceDomainError):
    """Raised when an insert collides with an existing row."""


class ProfileConflictError(ConflictError):
    """Raised when a profile row already exists (e.g. double submission)."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"Profile already exists: {user_id}")
        self.user_id = user_id


class AuthenticationError(MarketplaceDomainError):
    """Raised when the identity service rejects credentials or a token.

    The message comes from the identity service and is shown verbatim.
    """


class SessionExpiredError(AuthenticationError):
    """Raised when the backing service rejects a signed-in user's token.

    The local session for that token is closed so the client signs in again.
    """


class SessionNotFoundError(MarketplaceDomainError):
    """Raised when a bearer token does not map to an open session."""

    def __init__(self) -> None:
        super().__init__("Session not found or expired")


class RoleNotAllowedError(MarketplaceDomainError):
    """Raised when a profile's role may not perform an operation."""

    def __init__(self, role: str, operation: str) -> None:
        super().__init__(f"Role '{role}' may not {operation}")
        self.role = role
        self.operation = operation


class CheckoutInProgressError(MarketplaceDomainError):
    """Raised when a checkout is submitted while another one is still running."""

    def __init__(self) -> None:
        super().__init__("A checkout for this cart is already in progress")


class EmptyCartError(MarketplaceDomainError):
    """Raised when checkout is attempted with an empty cart."""

    def __init__(self) -> None:
        super().__init__("Cart is empty")


class InvalidCategoryError(MarketplaceDomainError):
    """Raised when a category is not part of the catalog."""

    def __init__(self, category: str) -> None:
        super().__init__(f"Unknown category: {category}")
        self.category = category


class InvalidProductError(MarketplaceDomainError):
    """Raised when product input fails validation."""


class InvalidAccountError(MarketplaceDomainError):
    """Raised when account input fails validation."""


class UploadFailedError(MarketplaceDomainError):
    """Raised by storage adapters when an upload cannot complete.

    Use cases treat this as non-fatal and degrade to a missing URL.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Upload to {path} failed: {reason}")
        self.path = path
        self.reason = reason


class BackendServiceError(MarketplaceDomainError):
    """Raised for any other failure reported by the backing service."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class OrderPersistenceError(MarketplaceDomainError):
    """Raised when a per-seller order write fails during checkout.

    Writes already completed for earlier sellers are not rolled back;
    they are reported so the buyer and sellers can reconcile.
    """

    def __init__(
        self,
        failed_seller_id: str,
        written_order_ids: list[str],
        reason: str,
    ) -> None:
        super().__init__(
            f"Order write failed for seller {failed_seller_id} "
            f"after {len(written_order_ids)} successful write(s): {reason}"
        )
        self.failed_seller_id = failed_seller_id
        self.written_order_ids = written_order_ids
        self.reason = reason
