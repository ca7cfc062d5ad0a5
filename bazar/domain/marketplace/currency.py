"""
Currency display for prices held in USD.

VES amounts are derived with the fixed BCV rate; there is no live
rate lookup. Pure functions, no IO.
"""

from decimal import ROUND_HALF_UP, Decimal

from bazar.domain.marketplace.entities import Currency

BCV_RATE = Decimal("45.00")
CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce a number or numeric string to a Decimal."""
    return value if isinstance(value, Decimal) else Decimal(str(value or "0"))


def round_money(value) -> Decimal:
    return to_money(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def usd_to_ves(amount_usd, rate=BCV_RATE) -> Decimal:
    return round_money(to_money(amount_usd) * to_money(rate))


def format_usd(amount_usd) -> str:
    """Format a USD amount, e.g. ``$10.00``."""
    return f"${round_money(amount_usd)}"


def format_ves(amount_usd, rate=BCV_RATE) -> str:
    """Format a USD amount converted to bolívares, e.g. ``Bs. 450.00``."""
    return f"Bs. {usd_to_ves(amount_usd, rate)}"


def format_money(amount_usd, currency: Currency, rate=BCV_RATE) -> str:
    """Format a USD amount in the requested display currency."""
    if currency is Currency.VES:
        return format_ves(amount_usd, rate)
    return format_usd(amount_usd)


def toggle(currency: Currency) -> Currency:
    """Flip between USD and VES."""
    return Currency.USD if currency is Currency.VES else Currency.VES
