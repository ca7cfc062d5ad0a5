"""
Cart aggregator.

Client-local transient state owned by a single session. Lines are
never merged: adding a product twice yields two lines.
"""

from decimal import Decimal
from typing import Iterable

from bazar.domain.marketplace.entities import CartLine, Product


class Cart:
    """Ordered sequence of cart lines."""

    def __init__(self, lines: list[CartLine] | None = None) -> None:
        self._lines: list[CartLine] = list(lines or [])

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def add(self, product: Product) -> CartLine:
        """Append a new line for the product with quantity 1."""
        line = CartLine(product=product, quantity=1)
        self._lines.append(line)
        return line

    def remove_first(self, product_id: str) -> bool:
        """Remove the first line for product_id.

        Returns:
            True if a line was removed, False if none matched.
        """
        for index, line in enumerate(self._lines):
            if line.product_id == product_id:
                del self._lines[index]
                return True
        return False

    def remove_lines(self, lines: Iterable[CartLine]) -> None:
        """Remove exactly these line objects. Lines added since are kept."""
        taken = {id(line) for line in lines}
        self._lines = [line for line in self._lines if id(line) not in taken]

    def clear(self) -> None:
        self._lines.clear()

    def subtotal_usd(self) -> Decimal:
        return sum((line.price_usd for line in self._lines), Decimal("0"))
