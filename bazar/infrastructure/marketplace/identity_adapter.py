"""
Adapter: Supabase GoTrue identity service.

Implements IdentityPort over the /auth/v1 REST endpoints. When a call
yields a session, the shared client is authorized with the new access
token so later calls in the same request act as that user.
"""

import logging
from typing import Any, Optional

from bazar.domain.marketplace.entities import AuthSession, SignUpResult
from bazar.domain.marketplace.errors import AuthenticationError
from bazar.domain.marketplace.ports import IdentityPort
from bazar.infrastructure.marketplace.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class SupabaseIdentityAdapter(IdentityPort):
    """GoTrue-backed identity adapter."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def sign_up(self, email: str, password: str) -> SignUpResult:
        payload = await self._client.request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password},
            auth_route=True,
        ) or {}

        session = _parse_session(payload)
        user = payload.get("user") or payload
        user_id = user.get("id")
        if not user_id:
            raise AuthenticationError("Sign-up did not return a user")

        if session is not None:
            self._client.authorize(session.access_token)
        else:
            logger.info("Sign-up for user=%s awaits email confirmation", user_id)
        return SignUpResult(user_id=user_id, session=session)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        payload = await self._client.request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            auth_route=True,
        ) or {}

        session = _parse_session(payload)
        if session is None:
            raise AuthenticationError("Sign-in did not return a session")
        self._client.authorize(session.access_token)
        return session

    async def sign_out(self, access_token: str) -> None:
        self._client.authorize(access_token)
        await self._client.request("POST", "/auth/v1/logout", auth_route=True)

    async def send_password_reset(self, email: str) -> None:
        await self._client.request(
            "POST", "/auth/v1/recover", json={"email": email}, auth_route=True
        )


def _parse_session(payload: dict[str, Any]) -> Optional[AuthSession]:
    """Build an AuthSession from a GoTrue token payload, if it has one."""
    body = payload.get("session") or payload
    token = body.get("access_token") if isinstance(body, dict) else None
    if not token:
        return None
    user = body.get("user") or payload.get("user") or {}
    return AuthSession(
        user_id=user.get("id", ""),
        email=user.get("email", ""),
        access_token=token,
        refresh_token=body.get("refresh_token"),
    )
