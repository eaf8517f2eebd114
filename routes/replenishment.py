"""
Reorder suggestions API routes.

Exposes replenishment suggestions computed from current stock, sales
velocity, vendor costs and open purchase orders.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.replenishment import ReplenishmentResponse, ReplenishmentSummary
from services.replenishment_service import get_replenishment_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

# Numeric params are parsed by the service; invalid values return 400.

@router.get("", response_model=ReplenishmentResponse)
async def get_reorder_suggestions(
    vendor_id: Optional[str] = Query(None, max_length=255, description="Vendor ID, or 'none' for items without a vendor"),
    supply_days: Optional[str] = Query(None, description="Days of supply to order (1-365)"),
    location_id: Optional[str] = Query(None, max_length=255, description="Location ID"),
    min_cost: Optional[str] = Query(None, description="Minimum order cost (>= 0)"),
):
    """
    Get reorder suggestions.

    Returns items that are out of available stock, at or below their
    alert threshold, or will run out within supply_days. Quantities are
    rounded to case pack and reorder multiple, capped at the maximum
    threshold, and reduced by quantities already on order.

    Sorted by priority (URGENT > HIGH > MEDIUM > LOW), then days until
    stockout, then daily velocity.
    """
    try:
        service = get_replenishment_service()
        return service.get_suggestions(
            supply_days=supply_days,
            vendor_id=vendor_id,
            location_id=location_id,
            min_cost=min_cost,
        )

    except Exception as e:
        return handle_error(e)


@router.get("/summary", response_model=ReplenishmentSummary)
async def get_reorder_summary(
    vendor_id: Optional[str] = Query(None, max_length=255),
    supply_days: Optional[str] = Query(None),
    location_id: Optional[str] = Query(None, max_length=255),
    min_cost: Optional[str] = Query(None),
):
    """
    Get high-level summary of reorder suggestions.

    Returns counts by priority and totals without item details.
    """
    try:
        service = get_replenishment_service()
        return service.get_summary(
            supply_days=supply_days,
            vendor_id=vendor_id,
            location_id=location_id,
            min_cost=min_cost,
        )

    except Exception as e:
        return handle_error(e)
