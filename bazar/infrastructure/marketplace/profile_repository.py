"""
Adapter: Profile repository.

Implements ProfileRepository over the PostgREST `profiles` table.
"""

from bazar.domain.marketplace.entities import Profile
from bazar.domain.marketplace.errors import (
    ConflictError,
    NotFoundError,
    ProfileConflictError,
    ProfileNotFoundError,
)
from bazar.domain.marketplace.ports import ProfileRepository
from bazar.infrastructure.marketplace.rows import profile_from_row, profile_to_row
from bazar.infrastructure.marketplace.supabase_client import SupabaseClient

SINGLE_OBJECT = {"Accept": "application/vnd.pgrst.object+json"}


class SupabaseProfileRepository(ProfileRepository):
    """Reads and writes marketplace profiles."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def get_by_id(self, user_id: str) -> Profile:
        try:
            row = await self._client.request(
                "GET",
                "/rest/v1/profiles",
                params={"select": "*", "id": f"eq.{user_id}"},
                headers=SINGLE_OBJECT,
            )
        except NotFoundError:
            raise ProfileNotFoundError(user_id) from None
        return profile_from_row(row)

    async def insert(self, profile: Profile) -> None:
        try:
            await self._client.request(
                "POST",
                "/rest/v1/profiles",
                json=profile_to_row(profile),
                headers={"Prefer": "return=minimal"},
            )
        except ConflictError:
            raise ProfileConflictError(profile.id) from None
