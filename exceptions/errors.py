"""
Custom exception classes for the application.

All errors carry a code, message, HTTP status and details, and
serialize to the standard {"error": {...}} response body.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.
    
    All custom exceptions inherit from this.
    
    Attributes:
        code: Error code (e.g., "INVALID_SUPPLY_DAYS")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """
    
    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)
    
    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class DatabaseError(AppError):
    """Database operation failed (500)."""
    
    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# REPLENISHMENT ERRORS
# ===================

class BadRequestError(AppError):
    """Malformed request parameter (400)."""

    def __init__(
        self,
        message: str,
        code: str = "BAD_REQUEST",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=400,
            details=details
        )


class InvalidSupplyDaysError(BadRequestError):
    """supply_days outside the 1-365 range or not a number."""

    def __init__(self, provided: Any):
        super().__init__(
            code="INVALID_SUPPLY_DAYS",
            message="supply_days must be a number between 1 and 365",
            details={"provided": provided, "min": 1, "max": 365}
        )


class InvalidMinCostError(BadRequestError):
    """min_cost negative or not a number."""

    def __init__(self, provided: Any):
        super().__init__(
            code="INVALID_MIN_COST",
            message="min_cost must be a positive number",
            details={"provided": provided}
        )


class InvalidReorderConfigError(AppError):
    """Reorder settings produce an unusable configuration (500)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="INVALID_REORDER_CONFIG",
            message=message,
            status_code=500,
            details=details
        )
