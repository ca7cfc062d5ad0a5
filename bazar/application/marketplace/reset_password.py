"""
Use case: Request a password recovery email.

Input: email address
Output: confirmation message
Failure cases: InvalidAccountError for an empty email;
    AuthenticationError / BackendServiceError from the identity service.
"""

import logging

from bazar.domain.marketplace.errors import InvalidAccountError
from bazar.domain.marketplace.ports import IdentityPort

logger = logging.getLogger(__name__)

MISSING_EMAIL_MESSAGE = "Ingresa tu correo primero."
RESET_SENT_MESSAGE = "Correo de recuperación enviado."


class ResetPasswordUseCase:
    """Sends a recovery email through the identity service."""

    def __init__(self, identity: IdentityPort) -> None:
        self._identity = identity

    async def execute(self, email: str) -> str:
        email = (email or "").strip().lower()
        if not email:
            raise InvalidAccountError(MISSING_EMAIL_MESSAGE)

        await self._identity.send_password_reset(email)
        logger.info("Password reset requested for %s", email)
        return RESET_SENT_MESSAGE
