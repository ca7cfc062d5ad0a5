"""
Use case: Sign out the current session.

Input: the caller's SessionContext
Output: None
Side effects: Revokes the token remotely, closes the local session
    and with it the cart.
Failure cases: None surfaced. A failed remote revoke is logged and
    the local session is closed regardless.
"""

import logging

from bazar.application.marketplace.session import SessionContext, SessionRegistry
from bazar.domain.marketplace.errors import MarketplaceDomainError
from bazar.domain.marketplace.ports import IdentityPort

logger = logging.getLogger(__name__)


class SignOutUseCase:
    """Ends a session both remotely and locally."""

    def __init__(self, identity: IdentityPort, registry: SessionRegistry) -> None:
        self._identity = identity
        self._registry = registry

    async def execute(self, session: SessionContext) -> None:
        try:
            await self._identity.sign_out(session.access_token)
        except MarketplaceDomainError as exc:
            logger.warning(
                "Remote sign-out failed for user=%s: %s",
                session.auth.user_id,
                exc.message,
            )
        finally:
            self._registry.close(session.access_token)
