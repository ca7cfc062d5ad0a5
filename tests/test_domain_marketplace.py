"""
Tests for the marketplace domain layer.

Pure functions and aggregates only; no ports, no IO.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from bazar.domain.marketplace.cart import Cart
from bazar.domain.marketplace.catalog import (
    ALL_CATEGORIES,
    CATEGORIES,
    is_known_category,
    logo_path,
    payment_proof_path,
    product_image_path,
    timestamp_ms,
)
from bazar.domain.marketplace.currency import (
    format_money,
    format_usd,
    format_ves,
    round_money,
    toggle,
    usd_to_ves,
)
from bazar.domain.marketplace.entities import Currency
from bazar.domain.marketplace.errors import EmptyCartError
from bazar.domain.marketplace.order_drafting import (
    checkout_total,
    draft_orders,
    group_by_seller,
    payment_ref_last4,
)

from conftest import make_product


class TestCurrency:
    """Display formatting for USD and VES."""

    def test_format_usd_two_decimals(self) -> None:
        assert format_usd(Decimal("10")) == "$10.00"

    def test_format_ves_uses_bcv_rate(self) -> None:
        assert format_ves(Decimal("10")) == "Bs. 450.00"

    def test_format_ves_custom_rate(self) -> None:
        assert format_ves(Decimal("2"), Decimal("36.5")) == "Bs. 73.00"

    def test_rounds_half_up(self) -> None:
        assert round_money(Decimal("0.125")) == Decimal("0.13")
        assert format_usd(Decimal("19.995")) == "$20.00"

    def test_usd_to_ves_accepts_floats_and_strings(self) -> None:
        assert usd_to_ves(1.1) == Decimal("49.50")
        assert usd_to_ves("3") == Decimal("135.00")

    def test_format_money_dispatches_on_currency(self) -> None:
        assert format_money(Decimal("1"), Currency.USD) == "$1.00"
        assert format_money(Decimal("1"), Currency.VES) == "Bs. 45.00"

    def test_toggle_flips_both_ways(self) -> None:
        assert toggle(Currency.USD) is Currency.VES
        assert toggle(Currency.VES) is Currency.USD


class TestCart:
    """Cart aggregate behavior."""

    def test_new_cart_is_empty(self) -> None:
        cart = Cart()
        assert cart.is_empty
        assert len(cart) == 0
        assert cart.subtotal_usd() == Decimal("0")

    def test_same_product_twice_gives_two_lines(self) -> None:
        cart = Cart()
        product = make_product("p1")
        cart.add(product)
        cart.add(product)
        assert len(cart) == 2
        assert all(line.quantity == 1 for line in cart.lines)

    def test_remove_first_only_removes_one_line(self) -> None:
        cart = Cart()
        cart.add(make_product("p1"))
        cart.add(make_product("p2"))
        cart.add(make_product("p1"))
        assert cart.remove_first("p1") is True
        assert [line.product_id for line in cart.lines] == ["p2", "p1"]

    def test_remove_missing_product_is_noop(self) -> None:
        cart = Cart()
        cart.add(make_product("p1"))
        assert cart.remove_first("nope") is False
        assert len(cart) == 1

    def test_subtotal_sums_frozen_prices(self) -> None:
        cart = Cart()
        cart.add(make_product("p1", price="10.50"))
        cart.add(make_product("p2", price="4.25"))
        assert cart.subtotal_usd() == Decimal("14.75")

    def test_remove_lines_keeps_lines_added_later(self) -> None:
        cart = Cart()
        product = make_product("p1")
        cart.add(product)
        snapshot = cart.lines
        later = cart.add(product)
        cart.remove_lines(snapshot)
        assert cart.lines == (later,)
        assert cart.lines[0] is later

    def test_lines_is_a_snapshot(self) -> None:
        cart = Cart()
        cart.add(make_product("p1"))
        snapshot = cart.lines
        cart.clear()
        assert len(snapshot) == 1
        assert cart.is_empty


class TestOrderDrafting:
    """Per-seller partitioning and totals."""

    def _lines(self, *specs):
        cart = Cart()
        for product_id, seller, price in specs:
            cart.add(make_product(product_id, seller_id=seller, price=price))
        return cart.lines

    def test_two_sellers_with_delivery(self) -> None:
        """A=10 and B=20 with delivery produce totals 15 and 25."""
        lines = self._lines(("p1", "A", "10"), ("p2", "B", "20"))
        drafts = draft_orders(lines, delivery=True)
        assert [(d.seller_id, d.total_usd) for d in drafts] == [
            ("A", Decimal("15")),
            ("B", Decimal("25")),
        ]
        assert all(d.delivery_needed for d in drafts)

    def test_without_delivery_no_fee(self) -> None:
        lines = self._lines(("p1", "A", "10"), ("p2", "A", "5"))
        drafts = draft_orders(lines, delivery=False)
        assert len(drafts) == 1
        assert drafts[0].total_usd == Decimal("15")
        assert drafts[0].delivery_needed is False

    def test_sellers_in_first_appearance_order(self) -> None:
        lines = self._lines(
            ("p1", "B", "1"), ("p2", "A", "1"), ("p3", "B", "1"), ("p4", "C", "1")
        )
        assert list(group_by_seller(lines)) == ["B", "A", "C"]
        drafts = draft_orders(lines, delivery=False)
        assert [line.product_id for line in drafts[0].lines] == ["p1", "p3"]

    def test_every_line_in_exactly_one_draft(self) -> None:
        lines = self._lines(("p1", "A", "1"), ("p2", "B", "2"), ("p3", "A", "3"))
        drafts = draft_orders(lines, delivery=False)
        assert sum(len(d.lines) for d in drafts) == len(lines)

    def test_custom_delivery_fee(self) -> None:
        lines = self._lines(("p1", "A", "10"))
        drafts = draft_orders(lines, delivery=True, delivery_fee=Decimal("3.50"))
        assert drafts[0].total_usd == Decimal("13.50")

    def test_empty_cart_rejected(self) -> None:
        with pytest.raises(EmptyCartError):
            draft_orders((), delivery=True)

    def test_checkout_total_charges_fee_per_seller(self) -> None:
        lines = self._lines(("p1", "A", "10"), ("p2", "B", "20"))
        assert checkout_total(lines, delivery=True) == Decimal("40")
        assert checkout_total(lines, delivery=False) == Decimal("30")

    @pytest.mark.parametrize(
        "ref, expected",
        [("12345678", "5678"), ("1234", "1234"), ("12", "12"), ("", "")],
    )
    def test_payment_ref_last4(self, ref: str, expected: str) -> None:
        assert payment_ref_last4(ref) == expected


class TestCatalog:
    """Categories and storage path conventions."""

    FIXED = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_all_label_is_not_a_category(self) -> None:
        assert ALL_CATEGORIES == "Todas"
        assert not is_known_category(ALL_CATEGORIES)

    def test_known_categories(self) -> None:
        assert len(CATEGORIES) == 10
        assert is_known_category("Electrónica")
        assert not is_known_category("Juguetes de otro mundo")

    def test_timestamp_is_milliseconds(self) -> None:
        assert timestamp_ms(self.FIXED) == 1714564800000

    def test_paths_are_namespaced(self) -> None:
        ts = timestamp_ms(self.FIXED)
        assert logo_path("u1", self.FIXED) == f"logos/u1_{ts}"
        assert product_image_path("s1", self.FIXED) == f"products/s1/{ts}"
        assert payment_proof_path("b1", self.FIXED) == f"payments/b1/{ts}"
