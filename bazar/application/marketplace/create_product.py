"""
Use case: List a new product as a seller.

Input: CreateProductCommand
Output: the stored Product
Side effects: Uploads the image (if any) and inserts the product row.
Failure cases:
    - RoleNotAllowedError for non-sellers.
    - InvalidProductError / InvalidCategoryError for bad input.
    - A failed image upload falls back to the placeholder image.
"""

import logging
from decimal import Decimal

from bazar.application.marketplace.dtos import CreateProductCommand
from bazar.application.marketplace.session import SessionContext, require_role
from bazar.domain.marketplace.catalog import is_known_category, product_image_path
from bazar.domain.marketplace.entities import NewProduct, Product, UserRole
from bazar.domain.marketplace.errors import InvalidCategoryError, InvalidProductError
from bazar.domain.marketplace.ports import ObjectStoragePort, ProductRepository

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE_URL = "https://picsum.photos/400/400"


class CreateProductUseCase:
    """Validates, uploads the image and lists the product."""

    def __init__(
        self,
        product_repo: ProductRepository,
        storage: ObjectStoragePort,
        placeholder_image_url: str = PLACEHOLDER_IMAGE_URL,
    ) -> None:
        self._product_repo = product_repo
        self._storage = storage
        self._placeholder_image_url = placeholder_image_url

    async def execute(
        self, session: SessionContext, command: CreateProductCommand
    ) -> Product:
        require_role(session, UserRole.SELLER, "list products")
        title = command.title.strip()
        if not title:
            raise InvalidProductError("Title is required")
        if command.price_usd <= Decimal("0"):
            raise InvalidProductError("Price must be greater than zero")
        if not is_known_category(command.category):
            raise InvalidCategoryError(command.category)

        seller_id = session.profile.id
        image_url = self._placeholder_image_url
        if command.image is not None and command.image.data:
            uploaded = await self._storage.upload(
                command.image.data,
                product_image_path(seller_id),
                command.image.content_type,
            )
            if uploaded:
                image_url = uploaded
            else:
                logger.warning(
                    "Product image upload failed for seller=%s; using placeholder.",
                    seller_id,
                )

        product = await self._product_repo.insert(
            NewProduct(
                seller_id=seller_id,
                title=title,
                description=command.description.strip(),
                price_usd=command.price_usd,
                category=command.category,
                image_url=image_url,
            )
        )
        logger.info("Seller=%s listed product=%s", seller_id, product.id)
        return product
