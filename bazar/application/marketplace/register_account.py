"""
Use case: Register a buyer or seller account.

Input: RegisterAccountCommand
Output: RegistrationResult
Side effects: Creates an identity, optionally uploads a seller logo,
    inserts the profile row, and opens a session when the identity
    service issued one straight away.
Failure cases:
    - InvalidAccountError for bad input.
    - AuthenticationError from the identity service (shown verbatim).
    - A duplicate profile insert (double submission) is ignored.
    - A failed logo upload is logged; the profile keeps an empty logo.
"""

import logging

from bazar.application.marketplace.bootstrap_profile import BootstrapProfileUseCase
from bazar.application.marketplace.dtos import (
    RegisterAccountCommand,
    RegistrationResult,
)
from bazar.application.marketplace.session import SessionRegistry
from bazar.domain.marketplace.catalog import logo_path
from bazar.domain.marketplace.entities import Profile, UserRole
from bazar.domain.marketplace.errors import InvalidAccountError, ProfileConflictError
from bazar.domain.marketplace.ports import (
    IdentityPort,
    ObjectStoragePort,
    ProfileRepository,
)

logger = logging.getLogger(__name__)

REGISTERED_MESSAGE = (
    "Registro exitoso! Por favor verifica tu correo si es necesario o inicia sesión."
)


class RegisterAccountUseCase:
    """Orchestrates sign-up, logo upload and profile creation."""

    def __init__(
        self,
        identity: IdentityPort,
        profile_repo: ProfileRepository,
        storage: ObjectStoragePort,
        bootstrap: BootstrapProfileUseCase,
        registry: SessionRegistry,
    ) -> None:
        self._identity = identity
        self._profile_repo = profile_repo
        self._storage = storage
        self._bootstrap = bootstrap
        self._registry = registry

    async def execute(self, command: RegisterAccountCommand) -> RegistrationResult:
        """Register an account.

        Args:
            command: Registration form data.

        Returns:
            The new user id and a confirmation message, plus an access
            token and profile when the user is signed in right away.
        """
        role = _parse_role(command.role)
        email = command.email.strip().lower()
        full_name = command.full_name.strip()
        if not email:
            raise InvalidAccountError("Email is required")
        if not full_name:
            raise InvalidAccountError("Full name is required")

        logger.info("Registering %s account for %s", role.value, email)
        signup = await self._identity.sign_up(email, command.password)

        # Uploads require an authenticated session (none while email
        # confirmation is pending).
        logo_url = ""
        if signup.session and role is UserRole.SELLER and command.logo:
            uploaded = await self._storage.upload(
                command.logo.data,
                logo_path(signup.user_id),
                command.logo.content_type,
            )
            if uploaded:
                logo_url = uploaded
            else:
                logger.warning(
                    "Logo upload failed during registration of user=%s",
                    signup.user_id,
                )

        company_name = None
        if role is UserRole.SELLER:
            company_name = (command.company_name or "").strip() or None

        profile = Profile(
            id=signup.user_id,
            email=email,
            role=role,
            full_name=full_name,
            company_name=company_name,
            logo_url=logo_url,
        )
        try:
            await self._profile_repo.insert(profile)
        except ProfileConflictError:
            logger.info("Profile for user=%s already exists, ignoring.", signup.user_id)

        if signup.session is None:
            return RegistrationResult(user_id=signup.user_id, message=REGISTERED_MESSAGE)

        loaded = await self._bootstrap.execute(signup.user_id)
        if loaded is None:
            return RegistrationResult(user_id=signup.user_id, message=REGISTERED_MESSAGE)

        self._registry.open(signup.session, loaded)
        return RegistrationResult(
            user_id=signup.user_id,
            message=REGISTERED_MESSAGE,
            access_token=signup.session.access_token,
            profile=loaded,
        )


def _parse_role(raw: str) -> UserRole:
    try:
        return UserRole((raw or "").strip().lower())
    except ValueError:
        raise InvalidAccountError(f"Unknown role: {raw}") from None
