"""
Use case: Sign in with email and password.

Input: SignInCommand (email, password)
Output: SignInResult (access token, profile)
Side effects: Opens a session context in the registry.
Failure cases: AuthenticationError (message shown verbatim),
    ProfileUnavailableError when the profile never appears.
"""

import logging

from bazar.application.marketplace.bootstrap_profile import BootstrapProfileUseCase
from bazar.application.marketplace.dtos import SignInCommand, SignInResult
from bazar.application.marketplace.session import SessionRegistry
from bazar.domain.marketplace.errors import ProfileUnavailableError
from bazar.domain.marketplace.ports import IdentityPort

logger = logging.getLogger(__name__)


class SignInUseCase:
    """Authenticates, loads the profile and opens a session."""

    def __init__(
        self,
        identity: IdentityPort,
        bootstrap: BootstrapProfileUseCase,
        registry: SessionRegistry,
    ) -> None:
        self._identity = identity
        self._bootstrap = bootstrap
        self._registry = registry

    async def execute(self, command: SignInCommand) -> SignInResult:
        email = command.email.strip().lower()
        logger.info("Sign-in requested for %s", email)

        auth = await self._identity.sign_in(email, command.password)
        profile = await self._bootstrap.execute(auth.user_id)
        if profile is None:
            raise ProfileUnavailableError(auth.user_id)

        self._registry.open(auth, profile)
        return SignInResult(access_token=auth.access_token, profile=profile)
