"""
Thin async client for a Supabase project.

Wraps httpx.AsyncClient with the headers every Supabase service expects
(apikey plus a bearer token) and translates error payloads from GoTrue,
PostgREST and Storage into marketplace domain errors.

One instance is created per request and closed afterwards. The bearer
token starts as the anon key; authorize() swaps in a user token once
the request knows who is calling (or once sign-in/sign-up returns one).
"""

import logging
from typing import Any, Optional

import httpx

from bazar.domain.marketplace.errors import (
    AuthenticationError,
    BackendServiceError,
    ConflictError,
    MarketplaceDomainError,
    NotFoundError,
    SessionExpiredError,
)

logger = logging.getLogger(__name__)

NO_ROWS_CODE = "PGRST116"
UNIQUE_VIOLATION_CODE = "23505"
JWT_EXPIRED_CODE = "PGRST301"
AUTH_REJECTION_STATUSES = {400, 401, 403, 422}


class SupabaseClient:
    """Async HTTP client for GoTrue, PostgREST and Storage.

    Args:
        base_url: Supabase project URL.
        anon_key: Public anon key.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass a MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._anon_key = anon_key
        self._token = anon_key
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def is_authorized(self) -> bool:
        return self._token != self._anon_key

    def authorize(self, access_token: str) -> None:
        """Use access_token as the bearer for every following call."""
        self._token = access_token

    def _headers(self, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
        headers = {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {self._token}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, str]] = None,
        json: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[dict[str, str]] = None,
        auth_route: bool = False,
    ) -> Any:
        """Send a request and return the decoded JSON body (or None).

        Raises:
            NotFoundError: PostgREST reported zero rows for a single-row read.
            ConflictError: A unique constraint was violated.
            AuthenticationError: GoTrue rejected the call (auth routes only).
            BackendServiceError: Anything else, including transport errors.
        """
        try:
            response = await self._http.request(
                method,
                path,
                params=params,
                json=json,
                content=content,
                headers=self._headers(headers),
            )
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise BackendServiceError(f"Backend unreachable: {exc}") from exc

        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                return None

        error = translate_error(response, auth_route=auth_route)
        logger.warning(
            "%s %s -> %d (%s)", method, path, response.status_code, error.message
        )
        raise error

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "SupabaseClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def translate_error(
    response: httpx.Response, auth_route: bool = False
) -> MarketplaceDomainError:
    """Map a failed Supabase response onto a domain error."""
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}

    message = (
        payload.get("msg")
        or payload.get("error_description")
        or payload.get("message")
        or payload.get("error")
        or response.text
        or f"HTTP {response.status_code}"
    )
    raw_code = payload.get("code") or payload.get("error_code")
    code = str(raw_code) if raw_code is not None else None

    if code == NO_ROWS_CODE:
        return NotFoundError(message)
    if code == UNIQUE_VIOLATION_CODE or payload.get("statusCode") == "409":
        return ConflictError(message)
    if code == JWT_EXPIRED_CODE or (response.status_code == 401 and not auth_route):
        return SessionExpiredError(message)
    if auth_route and response.status_code in AUTH_REJECTION_STATUSES:
        return AuthenticationError(message)
    return BackendServiceError(message, code=code)
