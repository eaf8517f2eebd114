"""
Replenishment schemas: snapshot rows, run configuration and suggestions.

A ReplenishmentCandidate is one (variation, location, vendor offer) row
from the snapshot provider. The evaluator turns accepted candidates into
ReplenishmentSuggestions; nothing here touches the database.
"""

from pydantic import ConfigDict, Field, field_validator, model_validator
from typing import Optional
from decimal import Decimal
from datetime import date, datetime
from enum import Enum

from models.base import BaseSchema


# Observation periods for sales velocity (days)
SHORT_PERIOD_DAYS = 91
MEDIUM_PERIOD_DAYS = 182
LONG_PERIOD_DAYS = 365

# Vendor filter value that selects rows without any vendor offer
NO_VENDOR_FILTER = "none"


class ReplenishmentPriority(str, Enum):
    """Urgency tiers for reorder suggestions."""
    URGENT = "URGENT"  # Out of stock with active sales
    HIGH = "HIGH"      # Below alert threshold or about to run out
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """Sort weight, higher is more urgent."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    ReplenishmentPriority.URGENT: 4,
    ReplenishmentPriority.HIGH: 3,
    ReplenishmentPriority.MEDIUM: 2,
    ReplenishmentPriority.LOW: 1,
}


# ===================
# SNAPSHOT ROWS
# ===================

class VelocityWindow(BaseSchema):
    """Average sales over one observation period."""

    period_days: int = Field(..., description="91, 182 or 365")
    daily_avg_quantity: Decimal = Field(default=Decimal("0"))
    weekly_avg_quantity: Decimal = Field(default=Decimal("0"))

    @field_validator("daily_avg_quantity", "weekly_avg_quantity", mode="before")
    @classmethod
    def none_is_zero(cls, v):
        return 0 if v is None else v


class VendorOffer(BaseSchema):
    """A vendor's cost and lead time for one variation."""

    vendor_id: str
    vendor_name: Optional[str] = None
    vendor_code: Optional[str] = None
    unit_cost_cents: Optional[int] = Field(None, description="Unit cost in cents (null = not entered)")
    lead_time_days: Optional[int] = None
    created_at: Optional[datetime] = None


class ReplenishmentCandidate(BaseSchema):
    """
    Snapshot row for one variation at one location from one vendor.

    Thresholds are already resolved: location override if set, else the
    variation's global value. Missing numeric data falls back to defaults
    (no velocity, case pack 1, multiple 1) instead of failing.
    """

    # Identity
    variation_id: str
    item_name: Optional[str] = None
    variation_name: Optional[str] = None
    sku: Optional[str] = None
    category_name: Optional[str] = None

    # Location
    location_id: Optional[str] = None
    location_name: Optional[str] = None

    # Stock
    on_hand_quantity: Decimal = Field(default=Decimal("0"))
    committed_quantity: Decimal = Field(default=Decimal("0"))

    # Velocity
    velocity_short: Optional[VelocityWindow] = None
    velocity_medium: Optional[VelocityWindow] = None
    velocity_long: Optional[VelocityWindow] = None

    # Ordering constraints
    case_pack_quantity: int = Field(default=1, ge=1)
    reorder_multiple: int = Field(default=1, ge=1)
    stock_alert_min: Optional[int] = None
    stock_alert_max: Optional[int] = Field(None, description="null = unlimited")
    discontinued: bool = False

    # Vendor
    vendor: Optional[VendorOffer] = None
    primary_vendor: Optional[VendorOffer] = None

    # On order
    pending_po_quantity: int = Field(default=0, ge=0)

    # Pricing
    retail_price_cents: Optional[int] = None

    # Expiration
    expiration_date: Optional[date] = None
    does_not_expire: bool = False
    days_until_expiry: Optional[int] = None

    # Raw image ids, resolved after ranking
    images: list[str] = Field(default_factory=list)
    item_images: list[str] = Field(default_factory=list)

    @field_validator("on_hand_quantity", "committed_quantity", "pending_po_quantity", mode="before")
    @classmethod
    def none_is_zero(cls, v):
        return 0 if v is None else v

    @field_validator("case_pack_quantity", "reorder_multiple", mode="before")
    @classmethod
    def at_least_one(cls, v):
        if v is None:
            return 1
        v = int(v)
        return v if v >= 1 else 1

    @field_validator("images", "item_images", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return v or []

    @field_validator("does_not_expire", "discontinued", mode="before")
    @classmethod
    def none_is_false(cls, v):
        return bool(v)

    @property
    def available_quantity(self) -> Decimal:
        """On-hand minus committed; may be negative."""
        return self.on_hand_quantity - self.committed_quantity

    @property
    def daily_velocity(self) -> Decimal:
        """Short-window daily average, the only velocity that drives quantities."""
        if self.velocity_short is None:
            return Decimal("0")
        return self.velocity_short.daily_avg_quantity


# ===================
# RUN CONFIGURATION
# ===================

class ReplenishmentConfig(BaseSchema):
    """
    Immutable parameters for one replenishment run.

    Built once per request and passed explicitly to the evaluator and
    ranker, so concurrent runs with different values never interfere.
    """

    model_config = ConfigDict(frozen=True)

    supply_days: int = Field(..., ge=1, le=365)
    safety_days: int = Field(default=0, ge=0)

    urgent_days: int = Field(default=0, ge=0)
    high_days: int = Field(default=7, ge=0)
    medium_days: int = Field(default=14, ge=0)
    low_days: int = Field(default=30, ge=0)

    vendor_filter: Optional[str] = None
    location_filter: Optional[str] = None
    min_order_cost: Optional[Decimal] = Field(None, ge=0)

    default_lead_time_days: int = Field(default=7, ge=0)

    @model_validator(mode="after")
    def thresholds_ascending(self):
        if not (self.urgent_days <= self.high_days <= self.medium_days <= self.low_days):
            raise ValueError(
                "priority thresholds must satisfy urgent <= high <= medium <= low"
            )
        return self


# ===================
# RESULTS
# ===================

class ReplenishmentSuggestion(BaseSchema):
    """Reorder suggestion for one accepted candidate."""

    # Identity
    variation_id: str
    item_name: Optional[str] = None
    variation_name: Optional[str] = None
    sku: Optional[str] = None
    category_name: Optional[str] = None
    location_id: Optional[str] = None
    location_name: Optional[str] = None

    # Stock
    current_stock: Decimal
    committed_quantity: Decimal
    available_quantity: Decimal

    # Velocity
    daily_avg_quantity: Decimal
    weekly_avg_quantity: Decimal
    weekly_avg_91d: Decimal
    weekly_avg_182d: Decimal
    weekly_avg_365d: Decimal
    has_velocity: bool
    days_until_stockout: Decimal = Field(..., description="available / daily velocity; 999 = no velocity")

    # Thresholds
    below_minimum: bool
    stock_alert_min: Optional[int] = None
    stock_alert_max: Optional[int] = None

    # Priority
    priority: ReplenishmentPriority
    reorder_reason: str

    # Quantities
    base_suggested_qty: int = Field(..., description="ceil(velocity × supply_days)")
    case_pack_quantity: int
    reorder_multiple: int
    case_pack_adjusted_qty: int = Field(..., description="After case pack and multiple rounding")
    pending_po_quantity: int
    final_suggested_qty: int = Field(..., gt=0)

    # Cost
    unit_cost_cents: int
    retail_price_cents: int
    gross_margin_percent: Optional[Decimal] = None
    order_cost: Decimal

    # Vendor
    vendor_id: Optional[str] = None
    vendor_name: Optional[str] = None
    vendor_code: str
    is_primary_vendor: bool
    primary_vendor_name: Optional[str] = None
    primary_vendor_cost: int
    lead_time_days: int

    # Expiration
    expiration_date: Optional[date] = None
    does_not_expire: bool = False
    days_until_expiry: Optional[int] = None

    # Display, filled by the image enricher
    image_urls: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list, exclude=True)
    item_images: list[str] = Field(default_factory=list, exclude=True)


class ReplenishmentResponse(BaseSchema):
    """Complete reorder suggestions response."""

    count: int
    supply_days: int
    safety_days: int
    suggestions: list[ReplenishmentSuggestion]


class ReplenishmentSummary(BaseSchema):
    """Totals for dashboard widgets."""

    count: int
    supply_days: int
    safety_days: int
    total_units: int
    total_order_cost: Decimal

    urgent_count: int = 0
    high_count: int = 0
    medium_count: int = 0
    low_count: int = 0
