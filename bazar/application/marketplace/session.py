"""
Per-user session state.

A SessionContext bundles what the UI used to keep as global state:
the auth session, the profile, the cart and the display currency.

Lifecycle:
    - SessionRegistry is created once at application startup.
    - open() on sign-in replaces any previous context for the same user
      and sweeps contexts that have been idle too long.
    - get() refreshes a context's idle clock, or drops it if it expired.
    - close() on sign-out, or when the backing service rejects the
      token, tears the context down (the cart is lost).
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from bazar.domain.marketplace.cart import Cart
from bazar.domain.marketplace.currency import toggle
from bazar.domain.marketplace.entities import AuthSession, Currency, Profile, UserRole
from bazar.domain.marketplace.errors import RoleNotAllowedError, SessionNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """State owned by one signed-in user.

    checkout_lock is held for the whole of a checkout so that a second
    submission cannot draft the same cart lines again.
    """

    auth: AuthSession
    profile: Profile
    cart: Cart = field(default_factory=Cart)
    currency: Currency = Currency.USD
    last_seen: float = 0.0
    checkout_lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, repr=False, compare=False
    )

    @property
    def access_token(self) -> str:
        return self.auth.access_token

    def toggle_currency(self) -> Currency:
        self.currency = toggle(self.currency)
        return self.currency


class SessionRegistry:
    """In-memory registry of open sessions, keyed by access token.

    Args:
        idle_timeout_seconds: Drop a context unused for this long.
            None keeps contexts until sign-out.
        clock: Monotonic time source.
    """

    def __init__(
        self,
        idle_timeout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._by_token: dict[str, SessionContext] = {}
        self._token_by_user: dict[str, str] = {}
        self._idle_timeout = idle_timeout_seconds
        self._clock = clock

    def __len__(self) -> int:
        return len(self._by_token)

    def open(self, auth: AuthSession, profile: Profile) -> SessionContext:
        """Create a fresh context, replacing the user's previous one."""
        self.purge_idle()
        previous = self._token_by_user.pop(auth.user_id, None)
        if previous is not None:
            self._by_token.pop(previous, None)
            logger.info("Replacing open session for user=%s", auth.user_id)

        context = SessionContext(auth=auth, profile=profile, last_seen=self._clock())
        self._by_token[auth.access_token] = context
        self._token_by_user[auth.user_id] = auth.access_token
        logger.info(
            "Session opened for user=%s role=%s",
            auth.user_id,
            profile.role.value,
        )
        return context

    def get(self, access_token: str) -> SessionContext:
        """Return the context for a token.

        Raises:
            SessionNotFoundError: If the token has no open session, or
                its session sat idle past the timeout.
        """
        context = self._by_token.get(access_token)
        if context is None:
            raise SessionNotFoundError()
        now = self._clock()
        if self._is_idle(context, now):
            logger.info("Session for user=%s expired while idle", context.auth.user_id)
            self.close(access_token)
            raise SessionNotFoundError()
        context.last_seen = now
        return context

    def close(self, access_token: str) -> None:
        """Tear down a session. Unknown tokens are ignored."""
        context = self._by_token.pop(access_token, None)
        if context is None:
            return
        self._token_by_user.pop(context.auth.user_id, None)
        context.cart.clear()
        logger.info("Session closed for user=%s", context.auth.user_id)

    def purge_idle(self) -> int:
        """Close every idle context. Returns how many were closed."""
        if self._idle_timeout is None:
            return 0
        now = self._clock()
        stale = [t for t, ctx in self._by_token.items() if self._is_idle(ctx, now)]
        for token in stale:
            self.close(token)
        return len(stale)

    def _is_idle(self, context: SessionContext, now: float) -> bool:
        return (
            self._idle_timeout is not None
            and now - context.last_seen > self._idle_timeout
        )


def require_role(session: SessionContext, role: UserRole, operation: str) -> None:
    """Raise RoleNotAllowedError unless the session's profile has role."""
    if session.profile.role is not role:
        raise RoleNotAllowedError(session.profile.role.value, operation)
