"""
Secure HTTP headers middleware.

Every response gets the restrictive defaults in SECURE_HEADERS.
Responses that carry per-user data (tokens, carts, orders, the
seller's inventory) are additionally marked as non-cacheable.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

SECURE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'self'",
}

PRIVATE_PATH_PREFIXES = (
    "/api/v1/auth",
    "/api/v1/session",
    "/api/v1/cart",
    "/api/v1/checkout",
    "/api/v1/orders",
    "/api/v1/seller",
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds security headers, plus no-store on per-user routes."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        response.headers.update(SECURE_HEADERS)
        if request.url.path.startswith(PRIVATE_PATH_PREFIXES):
            response.headers["Cache-Control"] = "no-store"
        return response
