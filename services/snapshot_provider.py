"""
Replenishment snapshot provider.

Reads stock, velocity, vendor, threshold, purchase order and expiration
data from Supabase and assembles one ReplenishmentCandidate per
(variation, location, vendor offer). Rows are returned unfiltered: the
reorder rules live only in services/replenishment_evaluator.py.

Optimized: one paged read per table instead of per-variation queries.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Optional
import structlog

from config import get_supabase_client, DatabaseSession
from exceptions import DatabaseError
from models.replenishment import (
    LONG_PERIOD_DAYS,
    MEDIUM_PERIOD_DAYS,
    SHORT_PERIOD_DAYS,
    ReplenishmentCandidate,
    VelocityWindow,
    VendorOffer,
)

logger = structlog.get_logger(__name__)

# Supabase returns at most 1000 rows per request
PAGE_SIZE = 1000

STATE_IN_STOCK = "IN_STOCK"
STATE_RESERVED = "RESERVED_FOR_SALE"

# Purchase orders in these states no longer count as pending
CLOSED_PO_STATUSES = {"RECEIVED", "CANCELLED"}


# ===================
# PURE HELPERS
# ===================

def resolve_threshold(location_value: Optional[int], global_value: Optional[int]) -> Optional[int]:
    """Location override if set, else the variation's global value."""
    return location_value if location_value is not None else global_value


def select_primary_offer(offers: list[VendorOffer]) -> Optional[VendorOffer]:
    """
    Pick the primary vendor offer.

    Lowest unit cost wins, ties go to the earliest created offer.
    Offers without a cost sort after all priced offers.
    """
    if not offers:
        return None

    def key(offer: VendorOffer):
        created = offer.created_at.isoformat() if offer.created_at else ""
        return (
            offer.unit_cost_cents is None,
            offer.unit_cost_cents or 0,
            offer.created_at is None,
            created,
        )

    return min(offers, key=key)


def aggregate_pending_quantities(po_items: list[dict]) -> dict[str, int]:
    """
    Sum unreceived quantity per variation across open purchase orders.

    Only lines with a positive remainder on orders that are not
    RECEIVED or CANCELLED count.
    """
    pending: dict[str, int] = defaultdict(int)

    for row in po_items:
        order = row.get("purchase_orders") or {}
        status = (order.get("status") or "").upper()
        if status in CLOSED_PO_STATUSES:
            continue

        remaining = _to_int(row.get("quantity_ordered")) - _to_int(row.get("received_quantity"))
        if remaining > 0:
            pending[row["variation_id"]] += remaining

    return dict(pending)


def calculate_days_until_expiry(
    expiration_date: Optional[date],
    does_not_expire: bool,
    as_of: date,
) -> Optional[int]:
    """Whole days from as_of to expiration, None when it doesn't apply."""
    if does_not_expire or expiration_date is None:
        return None
    return (expiration_date - as_of).days


def _to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def _to_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    return int(Decimal(str(value)))


def _to_optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(Decimal(str(value)))


def _to_date(value: Any) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _location_sort_key(location_id: Optional[str]) -> tuple:
    return (location_id is not None, location_id or "")


def _build_offer(row: dict) -> VendorOffer:
    vendor = row.get("vendors") or {}
    return VendorOffer(
        vendor_id=row["vendor_id"],
        vendor_name=vendor.get("name"),
        vendor_code=row.get("vendor_code"),
        unit_cost_cents=_to_optional_int(row.get("unit_cost_money")),
        lead_time_days=_to_optional_int(vendor.get("lead_time_days")),
        created_at=row.get("created_at"),
    )


# ===================
# ASSEMBLY
# ===================

def build_candidates(
    variations: list[dict],
    inventory_counts: list[dict],
    velocity_rows: list[dict],
    location_settings: list[dict],
    locations: list[dict],
    vendor_offers: list[dict],
    po_items: list[dict],
    expirations: list[dict],
    as_of: date,
) -> list[ReplenishmentCandidate]:
    """
    Join raw table rows into replenishment candidates.

    One candidate per (variation, location, vendor offer). A variation
    without inventory counts gets a single location-less row; one
    without vendor offers gets a single vendor-less row. Deleted
    variations and variations of deleted items are skipped; discontinued
    ones are kept for the evaluator to drop.

    Args:
        variations: variations rows with embedded items
        inventory_counts: inventory_counts rows (IN_STOCK / RESERVED_FOR_SALE)
        velocity_rows: sales_velocity rows
        location_settings: variation_location_settings rows
        locations: locations rows
        vendor_offers: variation_vendors rows with embedded vendors
        po_items: purchase_order_items rows with embedded purchase_orders
        expirations: variation_expiration rows
        as_of: Snapshot date for days_until_expiry

    Returns:
        Candidates in deterministic order
    """
    location_names = {row["id"]: row.get("name") for row in locations}

    on_hand: dict[tuple, Decimal] = defaultdict(Decimal)
    committed: dict[tuple, Decimal] = defaultdict(Decimal)
    locations_by_variation: dict[str, set] = defaultdict(set)
    for row in inventory_counts:
        key = (row["catalog_object_id"], row.get("location_id"))
        if row.get("state") == STATE_IN_STOCK:
            on_hand[key] += _to_decimal(row.get("quantity"))
            locations_by_variation[row["catalog_object_id"]].add(row.get("location_id"))
        elif row.get("state") == STATE_RESERVED:
            committed[key] += _to_decimal(row.get("quantity"))

    velocity: dict[tuple, VelocityWindow] = {}
    for row in velocity_rows:
        period = _to_int(row.get("period_days"))
        velocity[(row["variation_id"], row.get("location_id"), period)] = VelocityWindow(
            period_days=period,
            daily_avg_quantity=row.get("daily_avg_quantity"),
            weekly_avg_quantity=row.get("weekly_avg_quantity"),
        )

    overrides = {
        (row["variation_id"], row["location_id"]): row
        for row in location_settings
        if row.get("location_id") is not None
    }

    offers_by_variation: dict[str, list[VendorOffer]] = defaultdict(list)
    for row in vendor_offers:
        if row.get("vendor_id"):
            offers_by_variation[row["variation_id"]].append(_build_offer(row))

    pending = aggregate_pending_quantities(po_items)
    expiration_by_variation = {row["variation_id"]: row for row in expirations}

    candidates = []
    for variation in variations:
        item = variation.get("items") or {}
        if variation.get("is_deleted") or item.get("is_deleted"):
            continue

        variation_id = variation["id"]
        offers = sorted(offers_by_variation.get(variation_id, []), key=lambda o: o.vendor_id)
        primary = select_primary_offer(offers)

        expiration = expiration_by_variation.get(variation_id, {})
        expiration_date = _to_date(expiration.get("expiration_date"))
        does_not_expire = bool(expiration.get("does_not_expire"))

        location_ids = sorted(
            locations_by_variation.get(variation_id) or {None},
            key=_location_sort_key,
        )

        for location_id in location_ids:
            override = overrides.get((variation_id, location_id), {})

            for offer in offers or [None]:
                candidates.append(ReplenishmentCandidate(
                    variation_id=variation_id,
                    item_name=item.get("name"),
                    variation_name=variation.get("name"),
                    sku=variation.get("sku"),
                    category_name=item.get("category_name"),
                    location_id=location_id,
                    location_name=location_names.get(location_id),
                    on_hand_quantity=on_hand.get((variation_id, location_id), Decimal("0")),
                    committed_quantity=committed.get((variation_id, location_id), Decimal("0")),
                    velocity_short=velocity.get((variation_id, location_id, SHORT_PERIOD_DAYS)),
                    velocity_medium=velocity.get((variation_id, location_id, MEDIUM_PERIOD_DAYS)),
                    velocity_long=velocity.get((variation_id, location_id, LONG_PERIOD_DAYS)),
                    case_pack_quantity=variation.get("case_pack_quantity"),
                    reorder_multiple=variation.get("reorder_multiple"),
                    stock_alert_min=resolve_threshold(
                        _to_optional_int(override.get("stock_alert_min")),
                        _to_optional_int(variation.get("stock_alert_min")),
                    ),
                    stock_alert_max=resolve_threshold(
                        _to_optional_int(override.get("stock_alert_max")),
                        _to_optional_int(variation.get("stock_alert_max")),
                    ),
                    discontinued=variation.get("discontinued"),
                    vendor=offer,
                    primary_vendor=primary,
                    pending_po_quantity=pending.get(variation_id, 0),
                    retail_price_cents=_to_optional_int(variation.get("price_money")),
                    expiration_date=expiration_date,
                    does_not_expire=does_not_expire,
                    days_until_expiry=calculate_days_until_expiry(
                        expiration_date, does_not_expire, as_of
                    ),
                    images=variation.get("images"),
                    item_images=item.get("images"),
                ))

    return candidates


# ===================
# PROVIDER
# ===================

class SnapshotProvider:
    """
    Loads the replenishment snapshot from Supabase.

    Any read failure aborts the whole snapshot with DatabaseError;
    there are no retries and no partial results.
    """

    def __init__(self):
        self.db = get_supabase_client()

    def _fetch_all(
        self,
        client,
        table: str,
        columns: str,
        order_by: str,
        **in_filters: list,
    ) -> list[dict]:
        """
        Read every row of a table, page by page.

        order_by must be a unique key so offset pages neither repeat
        nor skip rows.
        """
        rows: list[dict] = []
        start = 0

        while True:
            query = client.table(table).select(columns)
            for column, values in in_filters.items():
                query = query.in_(column, values)
            query = query.order(order_by)

            response = query.range(start, start + PAGE_SIZE - 1).execute()
            batch = response.data or []
            rows.extend(batch)

            if len(batch) < PAGE_SIZE:
                return rows
            start += PAGE_SIZE

    def get_candidates(self, as_of: Optional[date] = None) -> list[ReplenishmentCandidate]:
        """
        Load all replenishment candidates.

        Args:
            as_of: Snapshot date for expiry math (default: today, read once)

        Returns:
            One candidate per (variation, location, vendor offer)

        Raises:
            DatabaseError: If any read fails
        """
        as_of = as_of or date.today()
        logger.info("loading_replenishment_snapshot", as_of=as_of.isoformat())

        try:
            with DatabaseSession("load_replenishment_snapshot", self.db) as client:
                variations = self._fetch_all(
                    client, "variations",
                    "id, name, sku, case_pack_quantity, reorder_multiple, "
                    "stock_alert_min, stock_alert_max, price_money, discontinued, "
                    "is_deleted, images, items(name, category_name, images, is_deleted)",
                    order_by="id",
                )
                inventory_counts = self._fetch_all(
                    client, "inventory_counts",
                    "catalog_object_id, location_id, state, quantity",
                    order_by="id",
                    state=[STATE_IN_STOCK, STATE_RESERVED],
                )
                velocity_rows = self._fetch_all(
                    client, "sales_velocity",
                    "variation_id, location_id, period_days, daily_avg_quantity, weekly_avg_quantity",
                    order_by="id",
                    period_days=[SHORT_PERIOD_DAYS, MEDIUM_PERIOD_DAYS, LONG_PERIOD_DAYS],
                )
                location_settings = self._fetch_all(
                    client, "variation_location_settings",
                    "variation_id, location_id, stock_alert_min, stock_alert_max",
                    order_by="id",
                )
                locations = self._fetch_all(client, "locations", "id, name", order_by="id")
                vendor_offers = self._fetch_all(
                    client, "variation_vendors",
                    "variation_id, vendor_id, vendor_code, unit_cost_money, created_at, "
                    "vendors(name, lead_time_days)",
                    order_by="id",
                )
                po_items = self._fetch_all(
                    client, "purchase_order_items",
                    "variation_id, quantity_ordered, received_quantity, purchase_orders(status)",
                    order_by="id",
                )
                expirations = self._fetch_all(
                    client, "variation_expiration",
                    "variation_id, expiration_date, does_not_expire",
                    order_by="variation_id",
                )

        except Exception as e:
            logger.error("replenishment_snapshot_failed", error=str(e))
            raise DatabaseError("select", str(e))

        candidates = build_candidates(
            variations=variations,
            inventory_counts=inventory_counts,
            velocity_rows=velocity_rows,
            location_settings=location_settings,
            locations=locations,
            vendor_offers=vendor_offers,
            po_items=po_items,
            expirations=expirations,
            as_of=as_of,
        )

        logger.info(
            "replenishment_snapshot_loaded",
            variations=len(variations),
            candidates=len(candidates),
        )

        return candidates


# Singleton instance
_snapshot_provider: Optional[SnapshotProvider] = None


def get_snapshot_provider() -> SnapshotProvider:
    """Get or create SnapshotProvider instance."""
    global _snapshot_provider
    if _snapshot_provider is None:
        _snapshot_provider = SnapshotProvider()
    return _snapshot_provider
