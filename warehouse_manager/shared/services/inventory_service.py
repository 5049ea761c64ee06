# warehouse_manager/shared/services/inventory_service.py
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
import logging

from warehouse_manager.config.settings import settings
from warehouse_manager.core.exceptions import ValidationError
from warehouse_manager.modules.items.repository import ITEM_FIELDS
from warehouse_manager.modules.transfers.engine import TransferEngine, TransferResult
from warehouse_manager.shared.database.models import ActivityLog, InventoryItem, Warehouse

logger = logging.getLogger(__name__)


class InventoryService:
    """Warehouse and item CRUD on top of the repositories.

    Writes that change occupancy go through ``TransferEngine.section`` so the
    item row and the warehouse's ``current_capacity`` commit together.
    Returned warehouses are re-read after the commit.
    """

    def __init__(self, db: Session, engine: Optional[TransferEngine] = None):
        self.db = db
        self.engine = engine or TransferEngine(db)
        self.warehouses = self.engine.warehouses
        self.items = self.engine.items
        self.activity = self.engine.activity

    # ==================== WAREHOUSES ====================

    def list_warehouses(self) -> List[Warehouse]:
        return self.warehouses.list()

    def get_warehouse(self, warehouse_id: int) -> Warehouse:
        return self.warehouses.get(warehouse_id)

    def create_warehouse(self, name: str, location: str, max_capacity: int) -> Warehouse:
        try:
            warehouse = self.warehouses.create(name, location, max_capacity)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Warehouse created: #{warehouse.id} '{warehouse.name}' (max {warehouse.max_capacity})")
        self.activity.record("warehouse_created", f"Created warehouse \"{warehouse.name}\"", warehouse_id=warehouse.id)
        return self.warehouses.get(warehouse.id)

    def update_warehouse(self, warehouse_id: int, name: str, location: str, max_capacity: int) -> Warehouse:
        with self.engine.section(warehouse_id):
            warehouse = self.warehouses.update(warehouse_id, name, location, max_capacity)

        logger.info(f"Warehouse updated: #{warehouse_id} (max {max_capacity})")
        self.activity.record("warehouse_updated", f"Updated warehouse \"{warehouse.name}\"", warehouse_id=warehouse_id)
        return self.warehouses.get(warehouse_id)

    def delete_warehouse(self, warehouse_id: int) -> None:
        with self.engine.section(warehouse_id):
            name = self.warehouses.get(warehouse_id).name
            self.warehouses.delete(warehouse_id)

        logger.info(f"Warehouse deleted: #{warehouse_id} '{name}'")
        self.activity.record("warehouse_deleted", f"Deleted warehouse \"{name}\"", warehouse_id=warehouse_id)

    def capacity_ledger(self, warehouse_id: int) -> Dict[str, Any]:
        return self.warehouses.ledger(warehouse_id)

    def reconcile_capacity(self, warehouse_id: int) -> Dict[str, Any]:
        with self.engine.section(warehouse_id):
            result = self.warehouses.reconcile(warehouse_id)

        if result["corrected"]:
            self.activity.record(
                "capacity_reconciled",
                f"Reconciled occupancy of warehouse {warehouse_id}: "
                f"{result['previous_capacity']} -> {result['current_capacity']}",
                warehouse_id=warehouse_id
            )
        return result

    # ==================== ITEMS ====================

    def list_items(self, warehouse_id: int, search: Optional[str] = None) -> List[InventoryItem]:
        self.warehouses.get(warehouse_id)
        return self.items.list_by_warehouse(warehouse_id, search)

    def get_item(self, warehouse_id: int, item_id: int) -> InventoryItem:
        return self.items.get_in_warehouse(warehouse_id, item_id)

    def create_item(self, warehouse_id: int, sku: str, fields: Dict[str, Any], quantity: int) -> InventoryItem:
        with self.engine.section(warehouse_id):
            self.warehouses.get(warehouse_id)
            item = self.items.create(warehouse_id, sku, fields, quantity)
            if quantity:
                self.warehouses.adjust_occupancy(warehouse_id, quantity)
            item_id = item.id

        item = self.items.get(item_id)
        logger.info(f"Item created: #{item.id} SKU '{item.sku}' x{item.quantity} in warehouse {warehouse_id}")
        self.activity.record(
            "item_created",
            f"Added item \"{item.name}\" (SKU {item.sku})",
            warehouse_id=warehouse_id,
            sku=item.sku,
            quantity=item.quantity
        )
        return item

    def update_item(self, warehouse_id: int, item_id: int, fields: Dict[str, Any]) -> InventoryItem:
        """Update descriptive fields and, when ``quantity`` is given, the stock level.

        ``fields["quantity"]`` is an absolute value; the difference to the
        current quantity is applied to the warehouse occupancy as well.
        """
        quantity = fields.get("quantity")
        if quantity is not None and quantity < 0:
            raise ValidationError(
                "Quantity must be zero or greater",
                details={"quantity": quantity}
            )

        with self.engine.section(warehouse_id):
            item = self.items.get_in_warehouse(warehouse_id, item_id)

            descriptive = {key: value for key, value in fields.items() if key in ITEM_FIELDS or key == "sku"}
            if descriptive:
                self.items.update(item.id, descriptive)

            if quantity is not None:
                delta = quantity - item.quantity
                if delta:
                    self.items.update_quantity(item.id, delta)
                    self.warehouses.adjust_occupancy(warehouse_id, delta)

        item = self.items.get(item_id)
        logger.info(f"Item updated: #{item.id} SKU '{item.sku}' x{item.quantity} in warehouse {warehouse_id}")
        self.activity.record(
            "item_updated",
            f"Updated item \"{item.name}\" (SKU {item.sku})",
            warehouse_id=warehouse_id,
            sku=item.sku,
            quantity=item.quantity
        )
        return item

    def delete_item(self, warehouse_id: int, item_id: int) -> None:
        with self.engine.section(warehouse_id):
            item = self.items.get_in_warehouse(warehouse_id, item_id)
            name, sku, quantity = item.name, item.sku, item.quantity
            self.items.delete(item.id)
            if quantity:
                self.warehouses.adjust_occupancy(warehouse_id, -quantity)

        logger.info(f"Item deleted: #{item_id} SKU '{sku}' ({quantity} units released) from warehouse {warehouse_id}")
        self.activity.record(
            "item_deleted",
            f"Deleted item \"{name}\" (SKU {sku})",
            warehouse_id=warehouse_id,
            sku=sku,
            quantity=quantity
        )

    # ==================== TRANSFERS ====================

    def transfer(
        self,
        source_warehouse_id: int,
        destination_warehouse_id: int,
        sku: str,
        quantity: int
    ) -> TransferResult:
        return self.engine.transfer(source_warehouse_id, destination_warehouse_id, sku, quantity)

    # ==================== ACTIVITY ====================

    def recent_activity(self, limit: Optional[int] = None, warehouse_id: Optional[int] = None) -> List[ActivityLog]:
        return self.activity.recent(limit or settings.activity_log_limit, warehouse_id)
