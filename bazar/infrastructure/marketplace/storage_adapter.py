"""
Adapter: Supabase Storage.

Uploads go to a single public bucket with upsert enabled. Failures are
logged and reported as None; callers decide how to degrade.
"""

import logging
from typing import Optional

from bazar.domain.marketplace.errors import MarketplaceDomainError, UploadFailedError
from bazar.domain.marketplace.ports import ObjectStoragePort
from bazar.infrastructure.marketplace.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class SupabaseStorageAdapter(ObjectStoragePort):
    """Public-bucket object storage.

    Args:
        client: Request-scoped Supabase client.
        bucket: Bucket name (logos, product images and payment proofs
            share it).
    """

    def __init__(self, client: SupabaseClient, bucket: str = "images") -> None:
        self._client = client
        self._bucket = bucket

    def public_url(self, path: str) -> str:
        return f"{self._client.base_url}/storage/v1/object/public/{self._bucket}/{path}"

    async def upload(
        self, data: bytes, path: str, content_type: str = "application/octet-stream"
    ) -> Optional[str]:
        try:
            if not data:
                raise UploadFailedError(path, "empty file")
            await self._client.request(
                "POST",
                f"/storage/v1/object/{self._bucket}/{path}",
                content=data,
                headers={"Content-Type": content_type, "x-upsert": "true"},
            )
        except MarketplaceDomainError as exc:
            logger.error("Upload to %s/%s failed: %s", self._bucket, path, exc.message)
            return None

        logger.info("Uploaded %d bytes to %s/%s", len(data), self._bucket, path)
        return self.public_url(path)
