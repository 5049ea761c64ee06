# warehouse_manager/core/exceptions.py
from typing import Any, Dict, Optional

from fastapi import status


class InventoryError(Exception):
    """Base class for every failure the inventory core reports to a caller.

    ``message`` is safe to show to the client; ``details`` carries the
    constraint values (current vs. requested) for logging and callers that
    want them.
    """
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(InventoryError):
    """Malformed or out-of-range input"""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(InventoryError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(InventoryError):
    """Uniqueness or referential-integrity violation"""
    status_code = status.HTTP_409_CONFLICT


class CapacityExceededError(InventoryError):
    status_code = status.HTTP_409_CONFLICT


class InsufficientQuantityError(InventoryError):
    status_code = status.HTTP_409_CONFLICT


class ContentionError(InventoryError):
    """A warehouse section could not be acquired in time. Safe to retry."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
