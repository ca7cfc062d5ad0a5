"""
Use case: Load a user's profile right after authentication.

Input: user id of the authenticated identity
Output: Profile, or None when the row never appeared
Side effects: None.
Failure cases: Any profile lookup error other than NotFound propagates.

The profile row is written after the identity is created, so the
first lookups may miss it. NotFound is retried under a bounded policy.
"""

import asyncio
import logging
from typing import Optional

from bazar.domain.marketplace.entities import Profile
from bazar.domain.marketplace.errors import ProfileNotFoundError
from bazar.domain.marketplace.ports import ProfileRepository
from bazar.shared.retry import RetryPolicy, Sleeper

logger = logging.getLogger(__name__)


class BootstrapProfileUseCase:
    """Fetches a profile, tolerating a short creation lag."""

    def __init__(
        self,
        profile_repo: ProfileRepository,
        policy: RetryPolicy,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._profile_repo = profile_repo
        self._policy = policy
        self._sleep = sleep

    async def execute(self, user_id: str) -> Optional[Profile]:
        """Return the user's profile, or None after exhausting retries.

        Raises:
            MarketplaceDomainError: For any lookup failure other than NotFound.
        """
        try:
            return await self._policy.run(
                lambda: self._profile_repo.get_by_id(user_id),
                retry_on=(ProfileNotFoundError,),
                sleep=self._sleep,
                label=f"Profile lookup for user={user_id}",
            )
        except ProfileNotFoundError:
            logger.warning("No profile found for user=%s after retries.", user_id)
            return None
