"""Tests for money helpers."""

from decimal import Decimal

from app.core.money import format_money, format_points, round_whole, to_decimal


class TestToDecimal:
    def test_float_goes_through_str(self):
        assert to_decimal(1.4) == Decimal("1.4")

    def test_none_is_zero(self):
        assert to_decimal(None) == Decimal(0)

    def test_passthrough(self):
        value = Decimal("99.50")
        assert to_decimal(value) is value
        assert to_decimal("12") == Decimal(12)


class TestRoundWhole:
    def test_halves_round_away_from_zero(self):
        assert round_whole(Decimal("0.5")) == 1
        assert round_whole(Decimal("2.5")) == 3
        assert round_whole(Decimal("-2.5")) == -3

    def test_truncates_nothing_else(self):
        assert round_whole(Decimal("1119.49")) == 1119


class TestFormatting:
    def test_whole_dollars(self):
        assert format_money(Decimal("4000")) == "$4,000"
        assert format_money(0) == "$0"

    def test_cents(self):
        assert format_money(Decimal("99.5")) == "$99.50"

    def test_negative(self):
        assert format_money(-595) == "-$595"

    def test_points(self):
        assert format_points(75000) == "75,000"
