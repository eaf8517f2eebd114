"""
Reorder math: target stock, order quantity rounding and days until stockout.

Pure functions used by the candidate evaluator, one step per function.
The quantity pipeline runs in a fixed order:

    target -> shortfall vs available -> case pack -> reorder multiple -> max cap

Formula:
    horizon = supply_days + lead_time_days + safety_days
    target  = ceil(velocity × horizon), or the smallest sensible order
              (one case, one multiple, or 1 unit) when there are no sales
    target  = max(target, stock_alert_min + 1) when a minimum is set
"""

import math
from decimal import Decimal
from typing import Optional, Union

Number = Union[int, Decimal]

# Days-of-stock sentinel for items that aren't selling
NO_STOCKOUT_DAYS = Decimal("999")


def round_up_to_multiple(quantity: int, multiple: int) -> int:
    """
    Round quantity up to the next multiple.

    A multiple of 1 (or less) leaves the quantity unchanged.
    """
    if multiple <= 1:
        return quantity
    return -(-quantity // multiple) * multiple


def minimum_order_quantity(case_pack: int = 1, reorder_multiple: int = 1) -> int:
    """Smallest meaningful order: one case, else one multiple, else 1 unit."""
    if case_pack > 1:
        return case_pack
    if reorder_multiple > 1:
        return reorder_multiple
    return 1


def calculate_target_quantity(
    velocity: Number,
    supply_days: int,
    case_pack: int = 1,
    reorder_multiple: int = 1,
    stock_alert_min: Optional[int] = None,
    lead_time_days: int = 0,
    safety_days: int = 0,
) -> int:
    """
    Stock level an order should bring the item up to.

    Args:
        velocity: Daily average units sold
        supply_days: Days of supply to cover
        case_pack: Units per vendor case
        reorder_multiple: Additional ordering multiple
        stock_alert_min: Effective minimum threshold (None = unset)
        lead_time_days: Vendor lead time added to the horizon
        safety_days: Safety buffer added to the horizon

    Returns:
        Target stock in whole units
    """
    if velocity > 0:
        horizon = supply_days + lead_time_days + safety_days
        target = math.ceil(Decimal(velocity) * horizon)
    else:
        target = minimum_order_quantity(case_pack, reorder_multiple)

    # Clear the threshold, not just reach it
    if stock_alert_min is not None and stock_alert_min > 0:
        target = max(target, stock_alert_min + 1)

    return target


def calculate_shortfall(target: int, available: Number) -> int:
    """Units needed to lift available stock to target, never negative."""
    return math.ceil(max(Decimal("0"), Decimal(target) - Decimal(available)))


def calculate_order_quantity(
    target: int,
    available: Number,
    case_pack: int = 1,
    reorder_multiple: int = 1,
) -> int:
    """
    Shortfall to target, rounded up to full cases and then to the reorder
    multiple. The second rounding can inflate an already case-rounded value.
    """
    quantity = calculate_shortfall(target, available)
    quantity = round_up_to_multiple(quantity, case_pack)
    return round_up_to_multiple(quantity, reorder_multiple)


def cap_at_maximum(
    quantity: int,
    stock_alert_max: Optional[int],
    available: Number,
) -> int:
    """
    Limit an order so available + order doesn't exceed the maximum.

    stock_alert_max of None means unlimited. The result can be zero or
    negative when available is already at or above the maximum.
    """
    if stock_alert_max is None:
        return quantity
    return math.ceil(min(Decimal(quantity), Decimal(stock_alert_max) - Decimal(available)))


def calculate_days_until_stockout(available: Number, velocity: Number) -> Decimal:
    """
    Days until available stock runs out at the current daily velocity.

    Not rounded. Returns 0 with no available stock and 999 when there
    is stock but no velocity.
    """
    if available <= 0:
        return Decimal("0")
    if velocity <= 0:
        return NO_STOCKOUT_DAYS
    return Decimal(available) / Decimal(velocity)
