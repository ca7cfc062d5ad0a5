"""
Centralized error handlers for FastAPI.

Maps marketplace domain errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bazar.domain.marketplace.errors import (
    AuthenticationError,
    BackendServiceError,
    CheckoutInProgressError,
    ConflictError,
    EmptyCartError,
    InvalidAccountError,
    InvalidCategoryError,
    InvalidProductError,
    MarketplaceDomainError,
    NotFoundError,
    OrderPersistenceError,
    ProfileUnavailableError,
    RoleNotAllowedError,
    SessionExpiredError,
    SessionNotFoundError,
    UploadFailedError,
)

logger = logging.getLogger(__name__)

HTTP_401 = 401
HTTP_403 = 403
HTTP_404 = 404
HTTP_409 = 409
HTTP_422 = 422
HTTP_500 = 500
HTTP_502 = 502

ORDER_FAILED_MESSAGE = "Error procesando la compra."


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def _bearer_token(request: Request) -> str:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    return token.strip() if scheme.lower() == "bearer" else ""

def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
        """Handle missing profiles, products and rows."""
        logger.warning("Not found: %s", exc.message)
        return _error_response(HTTP_404, "Not found", exc.message)

    @app.exception_handler(ProfileUnavailableError)
    async def handle_profile_unavailable(
        _request: Request, exc: ProfileUnavailableError
    ) -> JSONResponse:
        """Handle profiles that never appeared after sign-in."""
        logger.warning("Profile unavailable for user=%s", exc.user_id)
        return _error_response(HTTP_404, "Profile not found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(_request: Request, exc: ConflictError) -> JSONResponse:
        logger.warning("Conflict: %s", exc.message)
        return _error_response(HTTP_409, "Conflict", exc.message)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication(
        _request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        """Surface the identity service's message verbatim."""
        logger.info("Authentication rejected: %s", exc.message)
        return _error_response(HTTP_401, "Authentication failed", exc.message)

    @app.exception_handler(SessionExpiredError)
    async def handle_session_expired(
        request: Request, exc: SessionExpiredError
    ) -> JSONResponse:
        """Drop the local session whose token the backend no longer accepts."""
        registry = getattr(request.app.state, "session_registry", None)
        token = _bearer_token(request)
        if registry is not None and token:
            registry.close(token)
        logger.info("Backend rejected session token: %s", exc.message)
        return _error_response(HTTP_401, "Session expired", exc.message)

    @app.exception_handler(SessionNotFoundError)
    async def handle_session_not_found(
        _request: Request, exc: SessionNotFoundError
    ) -> JSONResponse:
        return _error_response(HTTP_401, "Not signed in", exc.message)

    @app.exception_handler(RoleNotAllowedError)
    async def handle_role_not_allowed(
        _request: Request, exc: RoleNotAllowedError
    ) -> JSONResponse:
        logger.warning("Role %s attempted to %s", exc.role, exc.operation)
        return _error_response(HTTP_403, "Forbidden", exc.message)

    @app.exception_handler(CheckoutInProgressError)
    async def handle_checkout_in_progress(
        _request: Request, exc: CheckoutInProgressError
    ) -> JSONResponse:
        logger.warning("Rejected concurrent checkout: %s", exc.message)
        return _error_response(HTTP_409, "Checkout in progress", exc.message)

    @app.exception_handler(EmptyCartError)
    async def handle_empty_cart(_request: Request, exc: EmptyCartError) -> JSONResponse:
        return _error_response(HTTP_422, "Empty cart", exc.message)

    @app.exception_handler(InvalidCategoryError)
    async def handle_invalid_category(
        _request: Request, exc: InvalidCategoryError
    ) -> JSONResponse:
        logger.warning("Invalid category: %s", exc.category)
        return _error_response(HTTP_422, "Invalid category", exc.message)

    @app.exception_handler(InvalidProductError)
    async def handle_invalid_product(
        _request: Request, exc: InvalidProductError
    ) -> JSONResponse:
        return _error_response(HTTP_422, "Invalid product", exc.message)

    @app.exception_handler(InvalidAccountError)
    async def handle_invalid_account(
        _request: Request, exc: InvalidAccountError
    ) -> JSONResponse:
        return _error_response(HTTP_422, "Invalid account data", exc.message)

    @app.exception_handler(OrderPersistenceError)
    async def handle_order_persistence(
        _request: Request, exc: OrderPersistenceError
    ) -> JSONResponse:
        """Report partial checkout: which orders were written, which seller failed."""
        logger.error(
            "Checkout partially failed at seller=%s; written=%s",
            exc.failed_seller_id,
            exc.written_order_ids,
        )
        return JSONResponse(
            status_code=HTTP_502,
            content={
                "error": ORDER_FAILED_MESSAGE,
                "detail": exc.message,
                "failed_seller_id": exc.failed_seller_id,
                "written_order_ids": exc.written_order_ids,
            },
        )

    @app.exception_handler(UploadFailedError)
    async def handle_upload_failed(
        _request: Request, exc: UploadFailedError
    ) -> JSONResponse:
        logger.error("Upload failed: %s", exc.reason)
        return _error_response(HTTP_502, "Upload failed")

    @app.exception_handler(BackendServiceError)
    async def handle_backend_service(
        _request: Request, exc: BackendServiceError
    ) -> JSONResponse:
        logger.error("Backend service error (code=%s): %s", exc.code, exc.message)
        return _error_response(HTTP_502, "Backend service error", exc.message)

    @app.exception_handler(MarketplaceDomainError)
    async def handle_marketplace_domain(
        _request: Request, exc: MarketplaceDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled marketplace domain errors."""
        logger.error("Unhandled marketplace domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
