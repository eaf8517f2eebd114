"""
Replenishment service: reorder suggestions orchestration.

Validates request parameters, builds one immutable ReplenishmentConfig
per call, then runs snapshot -> evaluate -> rank -> enrich.

Config precedence (highest first):
    1. Request parameter (supply_days)
    2. Stored setting (settings table)
    3. Environment default (config.settings)
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional
import structlog
from pydantic import ValidationError as PydanticValidationError

from config import settings
from exceptions import (
    InvalidMinCostError,
    InvalidReorderConfigError,
    InvalidSupplyDaysError,
)
from models.replenishment import (
    ReplenishmentConfig,
    ReplenishmentPriority,
    ReplenishmentResponse,
    ReplenishmentSuggestion,
    ReplenishmentSummary,
)
from services.image_enricher import get_image_enricher
from services.replenishment_evaluator import evaluate_candidates
from services.settings_service import get_settings_service
from services.snapshot_provider import get_snapshot_provider
from services.suggestion_ranker import rank_suggestions

logger = structlog.get_logger(__name__)

MIN_SUPPLY_DAYS = 1
MAX_SUPPLY_DAYS = 365


# ===================
# PARAMETER VALIDATION
# ===================

def parse_supply_days(value: Any) -> Optional[int]:
    """
    Parse supply_days request parameter.

    Returns:
        Integer in 1-365, or None when not provided

    Raises:
        InvalidSupplyDaysError: Not an integer or out of range
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return None

    try:
        days = int(str(value).strip())
    except ValueError:
        raise InvalidSupplyDaysError(value)

    if days < MIN_SUPPLY_DAYS or days > MAX_SUPPLY_DAYS:
        raise InvalidSupplyDaysError(value)

    return days


def parse_min_cost(value: Any) -> Optional[Decimal]:
    """
    Parse min_cost request parameter.

    Returns:
        Non-negative Decimal, or None when not provided

    Raises:
        InvalidMinCostError: Not a number or negative
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return None

    try:
        cost = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidMinCostError(value)

    if not cost.is_finite() or cost < 0:
        raise InvalidMinCostError(value)

    return cost


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# ===================
# SERVICE
# ===================

class ReplenishmentService:
    """
    Reorder suggestions business logic.

    Combines:
    - Snapshot provider (stock, velocity, vendors, thresholds, open POs)
    - Candidate evaluator (reorder decision, quantity, priority)
    - Suggestion ranker (priority, stockout, velocity ordering)
    - Image enricher (display URLs)
    """

    def __init__(self):
        self.snapshot_provider = get_snapshot_provider()
        self.settings_service = get_settings_service()
        self.image_enricher = get_image_enricher()

    def build_config(
        self,
        supply_days: Any = None,
        vendor_id: Optional[str] = None,
        location_id: Optional[str] = None,
        min_cost: Any = None,
    ) -> ReplenishmentConfig:
        """
        Validate request parameters and build the run configuration.

        Parameters are validated before any database access.

        Raises:
            InvalidSupplyDaysError: supply_days invalid
            InvalidMinCostError: min_cost invalid
            InvalidReorderConfigError: stored/env thresholds are inconsistent
        """
        requested_days = parse_supply_days(supply_days)
        min_order_cost = parse_min_cost(min_cost)

        stored = self.settings_service.get_reorder_settings()

        values = {
            "supply_days": requested_days
                if requested_days is not None
                else stored.get("default_supply_days", settings.default_supply_days),
            "safety_days": stored.get("reorder_safety_days", settings.reorder_safety_days),
            "urgent_days": stored.get("reorder_priority_urgent_days", settings.reorder_priority_urgent_days),
            "high_days": stored.get("reorder_priority_high_days", settings.reorder_priority_high_days),
            "medium_days": stored.get("reorder_priority_medium_days", settings.reorder_priority_medium_days),
            "low_days": stored.get("reorder_priority_low_days", settings.reorder_priority_low_days),
            "vendor_filter": _clean(vendor_id),
            "location_filter": _clean(location_id),
            "min_order_cost": min_order_cost,
            "default_lead_time_days": settings.default_lead_time_days,
        }

        try:
            return ReplenishmentConfig(**values)
        except PydanticValidationError as e:
            logger.error("invalid_reorder_config", error=str(e))
            raise InvalidReorderConfigError(
                "Reorder settings are invalid",
                details={"errors": [err["msg"] for err in e.errors()]},
            )

    def run(self, config: ReplenishmentConfig) -> list[ReplenishmentSuggestion]:
        """
        Produce ranked suggestions for a config.

        Args:
            config: Run configuration

        Returns:
            Ranked suggestions with image URLs

        Raises:
            DatabaseError: If the snapshot can't be loaded
        """
        candidates = self.snapshot_provider.get_candidates()
        suggestions = evaluate_candidates(candidates, config)
        ranked = rank_suggestions(suggestions, config.min_order_cost)

        logger.info(
            "reorder_suggestions_calculated",
            candidates=len(candidates),
            suggestions=len(ranked),
            supply_days=config.supply_days,
            vendor_filter=config.vendor_filter,
            location_filter=config.location_filter,
        )

        return self.image_enricher.attach_image_urls(ranked)

    def get_suggestions(
        self,
        supply_days: Any = None,
        vendor_id: Optional[str] = None,
        location_id: Optional[str] = None,
        min_cost: Any = None,
    ) -> ReplenishmentResponse:
        """
        Get ranked reorder suggestions.

        Args:
            supply_days: Days of supply to order (1-365, default from settings)
            vendor_id: Restrict to one vendor's offers ("none" = no vendor)
            location_id: Restrict to one location
            min_cost: Drop suggestions cheaper than this

        Returns:
            ReplenishmentResponse
        """
        logger.info(
            "reorder_suggestions_requested",
            supply_days=supply_days,
            vendor_id=vendor_id,
            location_id=location_id,
            min_cost=min_cost,
        )

        config = self.build_config(supply_days, vendor_id, location_id, min_cost)
        suggestions = self.run(config)

        return ReplenishmentResponse(
            count=len(suggestions),
            supply_days=config.supply_days,
            safety_days=config.safety_days,
            suggestions=suggestions,
        )

    def get_summary(
        self,
        supply_days: Any = None,
        vendor_id: Optional[str] = None,
        location_id: Optional[str] = None,
        min_cost: Any = None,
    ) -> ReplenishmentSummary:
        """
        Get counts and totals without suggestion details.

        Useful for dashboard widgets.
        """
        result = self.get_suggestions(supply_days, vendor_id, location_id, min_cost)
        suggestions = result.suggestions

        def count(priority: ReplenishmentPriority) -> int:
            return sum(1 for s in suggestions if s.priority == priority)

        return ReplenishmentSummary(
            count=result.count,
            supply_days=result.supply_days,
            safety_days=result.safety_days,
            total_units=sum(s.final_suggested_qty for s in suggestions),
            total_order_cost=sum((s.order_cost for s in suggestions), Decimal("0")),
            urgent_count=count(ReplenishmentPriority.URGENT),
            high_count=count(ReplenishmentPriority.HIGH),
            medium_count=count(ReplenishmentPriority.MEDIUM),
            low_count=count(ReplenishmentPriority.LOW),
        )


# Singleton instance
_replenishment_service: Optional[ReplenishmentService] = None


def get_replenishment_service() -> ReplenishmentService:
    """Get or create ReplenishmentService instance."""
    global _replenishment_service
    if _replenishment_service is None:
        _replenishment_service = ReplenishmentService()
    return _replenishment_service
