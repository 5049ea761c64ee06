# warehouse_manager/modules/warehouses/repository.py
from typing import Dict, Any, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError, OperationalError
import logging

from warehouse_manager.config.settings import settings
from warehouse_manager.core.exceptions import (
    ValidationError, NotFoundError, ConflictError, CapacityExceededError, ContentionError
)
from warehouse_manager.shared.database.models import Warehouse, InventoryItem

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for "lock_not_available"
LOCK_NOT_AVAILABLE = "55P03"


class WarehouseRepository:
    """Owns warehouse rows and their occupied capacity.

    Methods only ``flush``; committing is left to whoever holds the
    warehouse's exclusive section so several changes land together.
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== READS ====================

    def get(self, warehouse_id: int) -> Warehouse:
        warehouse = self.db.get(Warehouse, warehouse_id)
        if warehouse is None:
            raise NotFoundError(f"Warehouse {warehouse_id} not found")
        return warehouse

    def find(self, warehouse_id: int) -> Optional[Warehouse]:
        return self.db.get(Warehouse, warehouse_id)

    def list(self) -> List[Warehouse]:
        return self.db.query(Warehouse).order_by(Warehouse.id).all()

    def find_by_name(self, name: str) -> Optional[Warehouse]:
        return self.db.query(Warehouse).filter(Warehouse.name == name).first()

    def count_items(self, warehouse_id: int) -> int:
        return self.db.query(func.count(InventoryItem.id)).filter(
            InventoryItem.warehouse_id == warehouse_id
        ).scalar()

    # ==================== LOCKS ====================

    def lock(self, *warehouse_ids: int) -> Dict[int, Warehouse]:
        """SELECT ... FOR UPDATE the given warehouses in ascending id order.

        Rows already in the session are overwritten with the locked values.
        Missing ids are simply absent from the result.
        """
        ordered_ids = sorted(set(warehouse_ids))

        if self.db.get_bind().dialect.name == "postgresql":
            self.db.execute(text(f"SET LOCAL lock_timeout = {settings.lock_timeout_ms}"))

        try:
            rows = (
                self.db.query(Warehouse)
                .filter(Warehouse.id.in_(ordered_ids))
                .order_by(Warehouse.id)
                .populate_existing()
                .with_for_update()
                .all()
            )
        except OperationalError as e:
            if getattr(e.orig, "pgcode", None) == LOCK_NOT_AVAILABLE:
                raise ContentionError(
                    "Warehouse is busy with another operation, please retry",
                    details={"warehouse_ids": ordered_ids}
                ) from e
            raise

        return {warehouse.id: warehouse for warehouse in rows}

    # ==================== WRITES ====================

    def create(self, name: str, location: str, max_capacity: int) -> Warehouse:
        name = (name or "").strip()
        location = (location or "").strip()

        if not name:
            raise ValidationError("Warehouse name is required")
        if not location:
            raise ValidationError("Warehouse location is required")
        if max_capacity is None or max_capacity < 0:
            raise ValidationError(
                "Max capacity must be zero or greater",
                details={"max_capacity": max_capacity}
            )
        if self.find_by_name(name):
            raise ConflictError(f"A warehouse named '{name}' already exists")

        warehouse = Warehouse(
            name=name,
            location=location,
            max_capacity=max_capacity,
            current_capacity=0
        )
        self.db.add(warehouse)
        self._flush_unique(f"A warehouse named '{name}' already exists")
        return warehouse

    def update(self, warehouse_id: int, name: str, location: str, max_capacity: int) -> Warehouse:
        """Update descriptive fields and max capacity.

        The caller must hold the warehouse's section: the max capacity is
        validated against the occupancy read here.
        """
        warehouse = self.get(warehouse_id)

        name = (name or "").strip()
        location = (location or "").strip()

        if not name:
            raise ValidationError("Warehouse name is required")
        if not location:
            raise ValidationError("Warehouse location is required")
        if max_capacity is None or max_capacity < 0:
            raise ValidationError(
                "Max capacity must be zero or greater",
                details={"max_capacity": max_capacity}
            )
        if max_capacity < warehouse.current_capacity:
            raise ValidationError(
                f"Max capacity cannot be lower than the current occupied capacity. "
                f"Occupied: {warehouse.current_capacity}, requested max: {max_capacity}",
                details={"current_capacity": warehouse.current_capacity, "max_capacity": max_capacity}
            )

        other = self.find_by_name(name)
        if other is not None and other.id != warehouse.id:
            raise ConflictError(f"A warehouse named '{name}' already exists")

        warehouse.name = name
        warehouse.location = location
        warehouse.max_capacity = max_capacity
        self._flush_unique(f"A warehouse named '{name}' already exists")
        return warehouse

    def delete(self, warehouse_id: int) -> None:
        """Delete an empty warehouse.

        Any item row blocks deletion, including rows whose quantity is 0.
        """
        warehouse = self.get(warehouse_id)

        item_count = self.count_items(warehouse_id)
        if item_count:
            raise ConflictError(
                "Cannot delete warehouse that still has inventory items.",
                details={"warehouse_id": warehouse_id, "items": item_count}
            )

        self.db.delete(warehouse)
        self.db.flush()

    def adjust_occupancy(self, warehouse_id: int, delta: int) -> Warehouse:
        """Add ``delta`` units to the warehouse's occupied capacity.

        This is the only code path that writes ``current_capacity``.
        """
        warehouse = self.get(warehouse_id)
        new_capacity = warehouse.current_capacity + delta

        if new_capacity < 0 or new_capacity > warehouse.max_capacity:
            raise CapacityExceededError(
                f"Not enough capacity in warehouse '{warehouse.name}'. "
                f"Available: {warehouse.available_capacity}, requested: {delta}",
                details={
                    "warehouse_id": warehouse_id,
                    "current_capacity": warehouse.current_capacity,
                    "max_capacity": warehouse.max_capacity,
                    "delta": delta
                }
            )

        warehouse.current_capacity = new_capacity
        self.db.flush()
        return warehouse

    # ==================== CAPACITY LEDGER ====================

    def derived_occupancy(self, warehouse_id: int) -> int:
        """Sum of the quantities of every item stored in the warehouse"""
        total = self.db.query(
            func.coalesce(func.sum(InventoryItem.quantity), 0)
        ).filter(InventoryItem.warehouse_id == warehouse_id).scalar()
        return int(total or 0)

    def ledger(self, warehouse_id: int) -> Dict[str, Any]:
        """Stored and derived occupancy read in one statement.

        A single SELECT sees one committed state, so a transfer committing
        meanwhile cannot pair old occupancy with new item quantities.
        """
        derived = (
            select(func.coalesce(func.sum(InventoryItem.quantity), 0))
            .where(InventoryItem.warehouse_id == Warehouse.id)
            .correlate(Warehouse)
            .scalar_subquery()
        )
        row = self.db.query(
            Warehouse.id,
            Warehouse.max_capacity,
            Warehouse.current_capacity,
            derived.label("derived_capacity")
        ).filter(Warehouse.id == warehouse_id).first()

        if row is None:
            raise NotFoundError(f"Warehouse {warehouse_id} not found")

        derived_capacity = int(row.derived_capacity or 0)
        return {
            "warehouse_id": row.id,
            "max_capacity": row.max_capacity,
            "current_capacity": row.current_capacity,
            "derived_capacity": derived_capacity,
            "consistent": derived_capacity == row.current_capacity
        }

    def reconcile(self, warehouse_id: int) -> Dict[str, Any]:
        """Bring ``current_capacity`` back in line with the item quantities.

        Goes through ``adjust_occupancy`` so the capacity bound still applies.
        """
        warehouse = self.get(warehouse_id)
        before = warehouse.current_capacity
        derived = self.derived_occupancy(warehouse_id)

        if derived != before:
            logger.warning(
                f"Occupancy drift on warehouse {warehouse_id}: stored={before}, derived={derived}"
            )
            self.adjust_occupancy(warehouse_id, derived - before)

        return {
            "warehouse_id": warehouse_id,
            "previous_capacity": before,
            "current_capacity": warehouse.current_capacity,
            "corrected": derived != before
        }

    # ==================== HELPERS ====================

    def _flush_unique(self, message: str) -> None:
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError(message) from e
