"""
Unit tests per round2 e la conversione degli importi.
"""

from decimal import Decimal

import pytest

from app.core.money import round2, to_decimal


class TestRound2:
    """Arrotondamento a due decimali ROUND_HALF_UP."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("20.005"), Decimal("20.01")),
            (Decimal("2.675"), Decimal("2.68")),
            (Decimal("2.674"), Decimal("2.67")),
            (Decimal("-2.675"), Decimal("-2.68")),
            (10, Decimal("10.00")),
            ("0.125", Decimal("0.13")),
        ],
    )
    def test_half_up(self, value, expected):
        assert round2(value) == expected

    def test_float_uses_decimal_literal(self):
        """2.675 come float è 2.67499999... in binario: si arrotonda il letterale."""
        assert round2(2.675) == Decimal("2.68")
        assert round2(2 * 10.005) == Decimal("20.01")

    def test_result_has_two_decimal_places(self):
        assert round2(5).as_tuple().exponent == -2
        assert str(round2("7.1")) == "7.10"

    @pytest.mark.parametrize(
        "value",
        [0, 0.1 + 0.2, "1.005", "123456.789", Decimal("-0.005"), 99.995, "0.0049"],
    )
    def test_idempotent(self, value):
        once = round2(value)
        assert round2(once) == once


class TestToDecimal:
    def test_decimal_passthrough(self):
        value = Decimal("1.2345")
        assert to_decimal(value) is value

    def test_string_with_comma(self):
        assert to_decimal(" 12,50 ") == Decimal("12.50")

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(True)
