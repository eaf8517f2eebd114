"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.replenishment import (
    ReplenishmentPriority,
    VelocityWindow,
    VendorOffer,
    ReplenishmentCandidate,
    ReplenishmentConfig,
    ReplenishmentSuggestion,
    ReplenishmentResponse,
    ReplenishmentSummary,
)

__all__ = [
    # Base
    "BaseSchema",
    # Replenishment
    "ReplenishmentPriority",
    "VelocityWindow",
    "VendorOffer",
    "ReplenishmentCandidate",
    "ReplenishmentConfig",
    "ReplenishmentSuggestion",
    "ReplenishmentResponse",
    "ReplenishmentSummary",
]
