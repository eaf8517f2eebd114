"""
Replenishment candidate evaluator: core decision logic.

Decides for each snapshot row whether to reorder, how urgently and how
many units. Pure functions of (candidate, config): no I/O, no clock, no
shared state. The snapshot provider returns unfiltered rows; this module
is the only place the reorder rules live.

Per candidate (all stock math on available = on_hand - committed):
    1. days until stockout
    2. below-minimum flag
    3. needs-reorder test (out of stock, below minimum, or runs out
       within supply_days)
    4. max-threshold short-circuit
    5. priority and reason
    6-10. target -> shortfall -> case pack -> multiple -> max cap
    11-12. pending purchase order offset
    13. cost estimate
"""

import math
from decimal import Decimal
from typing import Optional
import structlog

from models.replenishment import (
    NO_VENDOR_FILTER,
    ReplenishmentCandidate,
    ReplenishmentConfig,
    ReplenishmentPriority,
    ReplenishmentSuggestion,
    VelocityWindow,
)
from services.reorder_math import (
    calculate_days_until_stockout,
    calculate_order_quantity,
    calculate_target_quantity,
    cap_at_maximum,
)

logger = structlog.get_logger(__name__)

DEFAULT_VENDOR_CODE = "N/A"


# ===================
# SCOPE
# ===================

def matches_scope(candidate: ReplenishmentCandidate, config: ReplenishmentConfig) -> bool:
    """
    Check vendor and location filters.

    vendor_filter "none" selects rows without a vendor offer. A location
    filter also keeps rows that have no location at all.
    """
    if config.vendor_filter == NO_VENDOR_FILTER:
        if candidate.vendor is not None:
            return False
    elif config.vendor_filter:
        if candidate.vendor is None or candidate.vendor.vendor_id != config.vendor_filter:
            return False

    if config.location_filter and candidate.location_id is not None:
        if candidate.location_id != config.location_filter:
            return False

    return True


def filter_candidates(
    candidates: list[ReplenishmentCandidate],
    config: ReplenishmentConfig,
) -> list[ReplenishmentCandidate]:
    """Keep active candidates within the configured vendor/location scope."""
    return [
        c for c in candidates
        if not c.discontinued and matches_scope(c, config)
    ]


# ===================
# DECISION STEPS
# ===================

def is_below_minimum(candidate: ReplenishmentCandidate) -> bool:
    """True iff a minimum is set and available stock is at or under it."""
    minimum = candidate.stock_alert_min
    return minimum is not None and candidate.available_quantity <= minimum


def needs_reorder(
    candidate: ReplenishmentCandidate,
    days_until_stockout: Decimal,
    below_minimum: bool,
    config: ReplenishmentConfig,
) -> bool:
    """Out of available stock, below minimum, or runs out within supply_days."""
    if candidate.available_quantity <= 0:
        return True
    if below_minimum:
        return True
    return candidate.daily_velocity > 0 and days_until_stockout < config.supply_days


def is_fully_stocked(candidate: ReplenishmentCandidate) -> bool:
    """Available stock already at or above the maximum threshold."""
    maximum = candidate.stock_alert_max
    return maximum is not None and candidate.available_quantity >= maximum


def classify_priority(
    candidate: ReplenishmentCandidate,
    days_until_stockout: Decimal,
    below_minimum: bool,
    config: ReplenishmentConfig,
) -> tuple[ReplenishmentPriority, str]:
    """
    Assign priority tier and reason. First matching rule wins.

    The out-of-stock rules compare ON-HAND quantity to urgent_days, while
    every other check uses available quantity. Kept as observed in
    production; committed stock does not make an item "out of stock" here.
    """
    velocity = candidate.daily_velocity
    minimum = candidate.stock_alert_min

    if candidate.on_hand_quantity <= config.urgent_days:
        if velocity > 0:
            return ReplenishmentPriority.URGENT, "Out of stock with active sales"
        return ReplenishmentPriority.MEDIUM, "Out of stock - no recent sales"

    if below_minimum and minimum is not None and minimum > 0:
        location_info = f" at {candidate.location_name}" if candidate.location_name else ""
        return (
            ReplenishmentPriority.HIGH,
            f"Below stock alert threshold ({minimum} units){location_info}",
        )

    if days_until_stockout < config.high_days:
        return ReplenishmentPriority.HIGH, f"Less than {config.high_days} days of stock"

    if days_until_stockout < config.medium_days:
        return (
            ReplenishmentPriority.MEDIUM,
            f"Less than {config.medium_days} days of stock remaining",
        )

    if days_until_stockout < config.low_days:
        return (
            ReplenishmentPriority.LOW,
            f"Less than {config.low_days} days of stock remaining",
        )

    return ReplenishmentPriority.LOW, "Below minimum stock level"


def _gross_margin_percent(retail_cents: int, cost_cents: int) -> Optional[Decimal]:
    """((retail - cost) / retail) × 100 to one decimal, when both are known."""
    if retail_cents <= 0 or cost_cents <= 0:
        return None
    margin = Decimal(retail_cents - cost_cents) / Decimal(retail_cents) * 100
    return round(margin, 1)


def _weekly(window: Optional[VelocityWindow]) -> Decimal:
    return window.weekly_avg_quantity if window else Decimal("0")


# ===================
# EVALUATION
# ===================

def evaluate_candidate(
    candidate: ReplenishmentCandidate,
    config: ReplenishmentConfig,
) -> Optional[ReplenishmentSuggestion]:
    """
    Evaluate one snapshot row.

    Args:
        candidate: Snapshot row
        config: Run configuration

    Returns:
        ReplenishmentSuggestion, or None when nothing should be ordered
    """
    available = candidate.available_quantity
    velocity = candidate.daily_velocity

    days_until_stockout = calculate_days_until_stockout(available, velocity)
    below_minimum = is_below_minimum(candidate)

    if not needs_reorder(candidate, days_until_stockout, below_minimum, config):
        return None

    if is_fully_stocked(candidate):
        return None

    priority, reason = classify_priority(candidate, days_until_stockout, below_minimum, config)

    case_pack = candidate.case_pack_quantity
    multiple = candidate.reorder_multiple

    target = calculate_target_quantity(
        velocity=velocity,
        supply_days=config.supply_days,
        case_pack=case_pack,
        reorder_multiple=multiple,
        stock_alert_min=candidate.stock_alert_min,
    )
    adjusted_qty = calculate_order_quantity(target, available, case_pack, multiple)
    capped_qty = cap_at_maximum(adjusted_qty, candidate.stock_alert_max, available)

    if capped_qty <= 0:
        return None

    pending = candidate.pending_po_quantity
    final_qty = max(0, capped_qty - pending)

    # Already on order
    if final_qty <= 0:
        return None

    vendor = candidate.vendor
    primary = candidate.primary_vendor
    unit_cost = (vendor.unit_cost_cents or 0) if vendor else 0
    retail_price = candidate.retail_price_cents or 0

    if vendor and vendor.lead_time_days is not None:
        lead_time = vendor.lead_time_days
    else:
        lead_time = config.default_lead_time_days

    base_qty = math.ceil(velocity * config.supply_days) if velocity > 0 else 0

    return ReplenishmentSuggestion(
        variation_id=candidate.variation_id,
        item_name=candidate.item_name,
        variation_name=candidate.variation_name,
        sku=candidate.sku,
        category_name=candidate.category_name,
        location_id=candidate.location_id,
        location_name=candidate.location_name,
        current_stock=candidate.on_hand_quantity,
        committed_quantity=candidate.committed_quantity,
        available_quantity=available,
        daily_avg_quantity=velocity,
        weekly_avg_quantity=_weekly(candidate.velocity_short),
        weekly_avg_91d=_weekly(candidate.velocity_short),
        weekly_avg_182d=_weekly(candidate.velocity_medium),
        weekly_avg_365d=_weekly(candidate.velocity_long),
        has_velocity=velocity > 0,
        days_until_stockout=days_until_stockout,
        below_minimum=below_minimum,
        stock_alert_min=candidate.stock_alert_min,
        stock_alert_max=candidate.stock_alert_max,
        priority=priority,
        reorder_reason=reason,
        base_suggested_qty=base_qty,
        case_pack_quantity=case_pack,
        reorder_multiple=multiple,
        case_pack_adjusted_qty=adjusted_qty,
        pending_po_quantity=pending,
        final_suggested_qty=final_qty,
        unit_cost_cents=unit_cost,
        retail_price_cents=retail_price,
        gross_margin_percent=_gross_margin_percent(retail_price, unit_cost),
        order_cost=Decimal(final_qty * unit_cost) / 100,
        vendor_id=vendor.vendor_id if vendor else None,
        vendor_name=vendor.vendor_name if vendor else None,
        vendor_code=(vendor.vendor_code if vendor else None) or DEFAULT_VENDOR_CODE,
        is_primary_vendor=bool(vendor and primary and vendor.vendor_id == primary.vendor_id),
        primary_vendor_name=primary.vendor_name if primary else None,
        primary_vendor_cost=(primary.unit_cost_cents or 0) if primary else 0,
        lead_time_days=lead_time,
        expiration_date=candidate.expiration_date,
        does_not_expire=candidate.does_not_expire,
        days_until_expiry=candidate.days_until_expiry,
        images=candidate.images,
        item_images=candidate.item_images,
    )


def evaluate_candidates(
    candidates: list[ReplenishmentCandidate],
    config: ReplenishmentConfig,
) -> list[ReplenishmentSuggestion]:
    """
    Evaluate a snapshot, keeping accepted suggestions in input order.

    Applies discontinued/vendor/location scoping first.
    """
    in_scope = filter_candidates(candidates, config)

    suggestions = []
    for candidate in in_scope:
        suggestion = evaluate_candidate(candidate, config)
        if suggestion is not None:
            suggestions.append(suggestion)

    logger.debug(
        "replenishment_evaluation_complete",
        candidates=len(candidates),
        in_scope=len(in_scope),
        suggestions=len(suggestions),
    )

    return suggestions
