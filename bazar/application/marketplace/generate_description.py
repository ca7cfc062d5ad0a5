"""
Use case: Draft a product description with the generative-text service.

Input: GenerateDescriptionQuery (title, category)
Output: description text (possibly a fallback message)
Failure cases: InvalidProductError when the title is empty. Provider
    failures never surface; the port returns a fallback string.
"""

from bazar.application.marketplace.dtos import GenerateDescriptionQuery
from bazar.application.marketplace.session import SessionContext, require_role
from bazar.domain.marketplace.entities import UserRole
from bazar.domain.marketplace.errors import InvalidProductError
from bazar.domain.marketplace.ports import DescriptionGeneratorPort

MISSING_TITLE_MESSAGE = "Escribe el nombre del producto primero."


class GenerateDescriptionUseCase:
    def __init__(self, generator: DescriptionGeneratorPort) -> None:
        self._generator = generator

    async def execute(
        self, session: SessionContext, query: GenerateDescriptionQuery
    ) -> str:
        require_role(session, UserRole.SELLER, "generate descriptions")
        title = query.title.strip()
        if not title:
            raise InvalidProductError(MISSING_TITLE_MESSAGE)
        return await self._generator.generate(title, query.category)
