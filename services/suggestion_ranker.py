"""
Suggestion ranker.

Orders evaluated suggestions by:
    1. priority (URGENT > HIGH > MEDIUM > LOW)
    2. days until stockout, soonest first
    3. daily velocity, selling items first

Python's sort is stable, so suggestions tied on all three keys keep
their evaluation order.
"""

from decimal import Decimal
from typing import Optional
import structlog

from models.replenishment import ReplenishmentSuggestion

logger = structlog.get_logger(__name__)


def filter_by_min_cost(
    suggestions: list[ReplenishmentSuggestion],
    min_order_cost: Optional[Decimal],
) -> list[ReplenishmentSuggestion]:
    """Drop suggestions whose order cost is under min_order_cost."""
    if min_order_cost is None:
        return list(suggestions)
    return [s for s in suggestions if s.order_cost >= min_order_cost]


def ranking_key(suggestion: ReplenishmentSuggestion) -> tuple:
    """Sort key: priority descending, stockout ascending, velocity descending."""
    return (
        -suggestion.priority.rank,
        suggestion.days_until_stockout,
        -suggestion.daily_avg_quantity,
    )


def rank_suggestions(
    suggestions: list[ReplenishmentSuggestion],
    min_order_cost: Optional[Decimal] = None,
) -> list[ReplenishmentSuggestion]:
    """
    Apply the minimum cost filter, then sort.

    Args:
        suggestions: Accepted suggestions from the evaluator
        min_order_cost: Optional minimum order cost

    Returns:
        New list in ranked order (input is not modified)
    """
    kept = filter_by_min_cost(suggestions, min_order_cost)
    ranked = sorted(kept, key=ranking_key)

    logger.debug(
        "suggestions_ranked",
        total=len(suggestions),
        below_min_cost=len(suggestions) - len(kept),
        ranked=len(ranked),
    )

    return ranked
