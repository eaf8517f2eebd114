"""
Business logic services.

Each service handles one step of a replenishment run.
"""

from services.settings_service import SettingsService, get_settings_service
from services.snapshot_provider import SnapshotProvider, get_snapshot_provider
from services.image_enricher import ImageEnricher, get_image_enricher
from services.replenishment_evaluator import evaluate_candidate, evaluate_candidates
from services.suggestion_ranker import rank_suggestions
from services.replenishment_service import ReplenishmentService, get_replenishment_service

__all__ = [
    "SettingsService",
    "get_settings_service",
    "SnapshotProvider",
    "get_snapshot_provider",
    "ImageEnricher",
    "get_image_enricher",
    "evaluate_candidate",
    "evaluate_candidates",
    "rank_suggestions",
    "ReplenishmentService",
    "get_replenishment_service",
]
