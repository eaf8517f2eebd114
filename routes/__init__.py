"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.replenishment import router as replenishment_router

__all__ = [
    "replenishment_router",
]
