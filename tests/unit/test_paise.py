"""Tests for kb_common.paise: integer money utilities."""

from decimal import Decimal

from src.kb_common.paise import paise_to_display, round_to_paise, rupees_to_paise


class TestPaiseToDisplay:
    def test_basic(self) -> None:
        assert paise_to_display(80000) == "₹800.00"

    def test_zero(self) -> None:
        assert paise_to_display(0) == "₹0.00"

    def test_one_paisa(self) -> None:
        assert paise_to_display(1) == "₹0.01"

    def test_thousands_separator(self) -> None:
        assert paise_to_display(123450) == "₹1,234.50"

    def test_negative(self) -> None:
        assert paise_to_display(-1200) == "-₹12.00"


class TestRounding:
    def test_half_up(self) -> None:
        assert round_to_paise(Decimal("0.5")) == 1
        assert round_to_paise(Decimal("2.5")) == 3

    def test_below_half(self) -> None:
        assert round_to_paise(Decimal("1.4999")) == 1

    def test_rupees_to_paise(self) -> None:
        assert rupees_to_paise("12.345") == 1235
        assert rupees_to_paise(10) == 1000
        assert rupees_to_paise(Decimal("0.01")) == 1
