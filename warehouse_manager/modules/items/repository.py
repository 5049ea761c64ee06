# warehouse_manager/modules/items/repository.py
from typing import Dict, Any, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_, func
from sqlalchemy.exc import IntegrityError
import logging

from warehouse_manager.core.exceptions import (
    ValidationError, NotFoundError, ConflictError, InsufficientQuantityError
)
from warehouse_manager.shared.database.models import InventoryItem

logger = logging.getLogger(__name__)

# Descriptive columns a caller may set through ``create`` / ``update``
ITEM_FIELDS = ("name", "description", "category", "storage_location", "expiration_date")


class ItemRepository:
    """Owns item rows, keyed by (warehouse_id, sku).

    Like ``WarehouseRepository`` it only flushes; the caller commits.
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== READS ====================

    def get(self, item_id: int) -> InventoryItem:
        item = self.db.get(InventoryItem, item_id)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found")
        return item

    def get_in_warehouse(self, warehouse_id: int, item_id: int) -> InventoryItem:
        item = self.db.get(InventoryItem, item_id)
        if item is None or item.warehouse_id != warehouse_id:
            raise NotFoundError(f"Item {item_id} not found in warehouse {warehouse_id}")
        return item

    def find_by_sku_in_warehouse(
        self,
        warehouse_id: int,
        sku: str,
        for_update: bool = False
    ) -> Optional[InventoryItem]:
        query = self.db.query(InventoryItem).filter(
            and_(
                InventoryItem.warehouse_id == warehouse_id,
                InventoryItem.sku == sku
            )
        )
        if for_update:
            query = query.populate_existing().with_for_update()
        return query.first()

    def list_by_warehouse(self, warehouse_id: int, search: Optional[str] = None) -> List[InventoryItem]:
        query = self.db.query(InventoryItem).filter(InventoryItem.warehouse_id == warehouse_id)

        if search and search.strip():
            term = f"%{search.strip().lower()}%"
            query = query.filter(
                or_(
                    func.lower(InventoryItem.name).like(term),
                    func.lower(InventoryItem.sku).like(term),
                    func.lower(func.coalesce(InventoryItem.category, "")).like(term)
                )
            )

        return query.order_by(InventoryItem.id).all()

    # ==================== WRITES ====================

    def create(
        self,
        warehouse_id: int,
        sku: str,
        fields: Dict[str, Any],
        quantity: int
    ) -> InventoryItem:
        sku = (sku or "").strip()
        if not sku:
            raise ValidationError("SKU is required")
        if not (fields.get("name") or "").strip():
            raise ValidationError("Item name is required")
        if quantity is None or quantity < 0:
            raise ValidationError(
                "Quantity must be zero or greater",
                details={"quantity": quantity}
            )

        if self.find_by_sku_in_warehouse(warehouse_id, sku):
            raise ConflictError(
                f"SKU '{sku}' already exists in warehouse {warehouse_id}",
                details={"warehouse_id": warehouse_id, "sku": sku}
            )

        item = InventoryItem(
            warehouse_id=warehouse_id,
            sku=sku,
            quantity=quantity,
            **{key: fields.get(key) for key in ITEM_FIELDS}
        )
        item.name = item.name.strip()
        self.db.add(item)
        self._flush_unique(warehouse_id, sku)
        return item

    def update(self, item_id: int, fields: Dict[str, Any]) -> InventoryItem:
        """Update descriptive fields and, optionally, the SKU. Never the quantity."""
        item = self.get(item_id)

        if "name" in fields and not (fields["name"] or "").strip():
            raise ValidationError("Item name is required")

        new_sku = fields.get("sku")
        if new_sku is not None:
            new_sku = new_sku.strip()
            if not new_sku:
                raise ValidationError("SKU is required")
            if new_sku != item.sku:
                other = self.find_by_sku_in_warehouse(item.warehouse_id, new_sku)
                if other is not None and other.id != item.id:
                    raise ConflictError(
                        f"SKU '{new_sku}' already exists in warehouse {item.warehouse_id}",
                        details={"warehouse_id": item.warehouse_id, "sku": new_sku}
                    )
                item.sku = new_sku

        for key in ITEM_FIELDS:
            if key in fields:
                setattr(item, key, fields[key])
        if "name" in fields:
            item.name = item.name.strip()

        self._flush_unique(item.warehouse_id, item.sku)
        return item

    def update_quantity(self, item_id: int, delta: int) -> int:
        """Apply ``delta`` to the item's quantity and return the new quantity.

        A row that reaches 0 is kept so later stock of the same SKU reuses it.
        """
        item = self.get(item_id)
        new_quantity = item.quantity + delta

        if new_quantity < 0:
            raise InsufficientQuantityError(
                f"Not enough quantity of SKU '{item.sku}' in warehouse {item.warehouse_id}. "
                f"Available: {item.quantity}, requested: {-delta}",
                details={
                    "item_id": item.id,
                    "sku": item.sku,
                    "available": item.quantity,
                    "requested": -delta
                }
            )

        item.quantity = new_quantity
        self.db.flush()
        return new_quantity

    def delete(self, item_id: int) -> InventoryItem:
        item = self.get(item_id)
        self.db.delete(item)
        self.db.flush()
        return item

    # ==================== HELPERS ====================

    def _flush_unique(self, warehouse_id: int, sku: str) -> None:
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"SKU '{sku}' already exists in warehouse {warehouse_id}",
                details={"warehouse_id": warehouse_id, "sku": sku}
            ) from e
