"""
Custom exceptions module.

Exports the AppError hierarchy used by services and routes.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    BadRequestError,
    DatabaseError,

    # Replenishment
    InvalidSupplyDaysError,
    InvalidMinCostError,
    InvalidReorderConfigError,
)

__all__ = [
    # Base
    "AppError",
    "BadRequestError",
    "DatabaseError",

    # Replenishment
    "InvalidSupplyDaysError",
    "InvalidMinCostError",
    "InvalidReorderConfigError",
]
