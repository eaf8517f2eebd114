"""
Unit tests for reorder math helpers.

Pure functions: no mocks needed.
"""

import pytest
from decimal import Decimal

from services.reorder_math import (
    NO_STOCKOUT_DAYS,
    calculate_days_until_stockout,
    calculate_order_quantity,
    calculate_shortfall,
    calculate_target_quantity,
    cap_at_maximum,
    minimum_order_quantity,
    round_up_to_multiple,
)


# ===================
# ROUNDING
# ===================

class TestRoundUpToMultiple:
    """Tests for round_up_to_multiple()."""

    @pytest.mark.parametrize("quantity,multiple,expected", [
        (80, 12, 84),
        (84, 12, 84),
        (1, 12, 12),
        (0, 12, 0),
        (84, 10, 90),
        (7, 1, 7),
        (7, 0, 7),
    ])
    def test_rounds_up(self, quantity, multiple, expected):
        """Rounds up to the next multiple, leaves it alone for multiple <= 1."""
        assert round_up_to_multiple(quantity, multiple) == expected


class TestMinimumOrderQuantity:
    """Tests for minimum_order_quantity()."""

    def test_case_pack_first(self):
        assert minimum_order_quantity(case_pack=12, reorder_multiple=5) == 12

    def test_multiple_when_no_case_pack(self):
        assert minimum_order_quantity(case_pack=1, reorder_multiple=5) == 5

    def test_single_unit_default(self):
        assert minimum_order_quantity() == 1


# ===================
# TARGET AND ORDER
# ===================

class TestCalculateTargetQuantity:
    """Tests for calculate_target_quantity()."""

    def test_velocity_times_supply_days(self):
        """2/day for 45 days = 90."""
        assert calculate_target_quantity(Decimal("2"), 45) == 90

    def test_rounds_up_fractional(self):
        """0.3/day for 10 days = 3 exactly; 0.35/day = 3.5 -> 4."""
        assert calculate_target_quantity(Decimal("0.3"), 10) == 3
        assert calculate_target_quantity(Decimal("0.35"), 10) == 4

    def test_no_velocity_uses_minimum_order(self):
        """No sales: order one case."""
        assert calculate_target_quantity(Decimal("0"), 45, case_pack=12) == 12

    def test_minimum_threshold_raises_target(self):
        """Target must clear stock_alert_min, not just reach it."""
        assert calculate_target_quantity(Decimal("1"), 5, stock_alert_min=20) == 21

    def test_minimum_threshold_below_target_ignored(self):
        assert calculate_target_quantity(Decimal("2"), 45, stock_alert_min=20) == 90

    def test_zero_minimum_ignored(self):
        assert calculate_target_quantity(Decimal("0"), 45, stock_alert_min=0) == 1

    def test_lead_time_and_safety_extend_horizon(self):
        """Optional horizon terms: 1/day × (10 + 5 + 3) = 18."""
        assert calculate_target_quantity(
            Decimal("1"), 10, lead_time_days=5, safety_days=3
        ) == 18


class TestCalculateShortfall:
    """Tests for calculate_shortfall()."""

    def test_shortfall(self):
        assert calculate_shortfall(90, Decimal("10")) == 80

    def test_negative_available_adds_to_shortfall(self):
        assert calculate_shortfall(45, Decimal("-3")) == 48

    def test_never_negative(self):
        assert calculate_shortfall(10, Decimal("50")) == 0

    def test_fractional_available_rounds_up(self):
        assert calculate_shortfall(10, Decimal("2.5")) == 8


class TestCalculateOrderQuantity:
    """Tests for calculate_order_quantity()."""

    def test_case_pack_rounding(self):
        """Shortfall 80 in cases of 12 -> 84."""
        assert calculate_order_quantity(90, Decimal("10"), case_pack=12) == 84

    def test_multiple_applied_after_case_pack(self):
        """84 -> 90 when the reorder multiple is 10."""
        assert calculate_order_quantity(90, Decimal("10"), case_pack=12, reorder_multiple=10) == 90

    def test_compatible_case_and_multiple(self):
        """Cases of 6, multiple of 24: 80 -> 84 -> 96."""
        result = calculate_order_quantity(90, Decimal("10"), case_pack=6, reorder_multiple=24)
        assert result == 96
        assert result % 6 == 0
        assert result % 24 == 0

    def test_no_rounding(self):
        assert calculate_order_quantity(90, Decimal("10")) == 80


class TestCapAtMaximum:
    """Tests for cap_at_maximum()."""

    def test_no_maximum(self):
        assert cap_at_maximum(400, None, Decimal("500")) == 400

    def test_caps_to_headroom(self):
        """90 available, max 100: at most 10 more."""
        assert cap_at_maximum(80, 100, Decimal("90")) == 10

    def test_under_headroom_unchanged(self):
        assert cap_at_maximum(5, 100, Decimal("90")) == 5

    def test_at_or_over_maximum_non_positive(self):
        assert cap_at_maximum(10, 100, Decimal("100")) == 0
        assert cap_at_maximum(10, 100, Decimal("120")) == -20

    def test_fractional_headroom_rounds_up(self):
        assert cap_at_maximum(80, 100, Decimal("90.5")) == 10


# ===================
# DAYS UNTIL STOCKOUT
# ===================

class TestCalculateDaysUntilStockout:
    """Tests for calculate_days_until_stockout()."""

    def test_available_over_velocity(self):
        assert calculate_days_until_stockout(Decimal("10"), Decimal("2")) == Decimal("5")

    def test_not_rounded(self):
        result = calculate_days_until_stockout(Decimal("10"), Decimal("3"))
        assert result == Decimal("10") / Decimal("3")

    def test_no_available_stock_is_zero(self):
        """Zero stays zero, it is not replaced by the sentinel."""
        assert calculate_days_until_stockout(Decimal("0"), Decimal("2")) == 0
        assert calculate_days_until_stockout(Decimal("-5"), Decimal("2")) == 0
        assert calculate_days_until_stockout(Decimal("0"), Decimal("0")) == 0

    def test_no_velocity_is_sentinel(self):
        assert calculate_days_until_stockout(Decimal("10"), Decimal("0")) == NO_STOCKOUT_DAYS
        assert NO_STOCKOUT_DAYS == Decimal("999")
