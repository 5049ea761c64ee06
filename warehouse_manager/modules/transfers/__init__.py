# warehouse_manager/modules/transfers/__init__.py
"""
Transfers module - atomic single-SKU moves between two warehouses

- engine.py: locking, re-validation under lock, the four mutations, rollback
- router.py: POST /api/transfers
- schemas.py: request/response models
"""

from .engine import TransferEngine, TransferResult

__all__ = [
    "TransferEngine",
    "TransferResult"
]
