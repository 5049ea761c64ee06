# warehouse_manager/modules/transfers/engine.py
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from warehouse_manager.config.settings import settings
from warehouse_manager.core.exceptions import (
    InventoryError, ValidationError, NotFoundError, ConflictError,
    CapacityExceededError, InsufficientQuantityError
)
from warehouse_manager.core.locking import WarehouseLocks, warehouse_locks
from warehouse_manager.modules.activity.repository import ActivityRepository
from warehouse_manager.modules.items.repository import ItemRepository
from warehouse_manager.modules.items.schemas import ItemResponse
from warehouse_manager.modules.warehouses.repository import WarehouseRepository
from warehouse_manager.modules.warehouses.schemas import WarehouseResponse
from warehouse_manager.shared.database.models import Warehouse, InventoryItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferResult:
    """State of both sides exactly as the transfer committed it"""
    sku: str
    quantity: int
    source_warehouse: WarehouseResponse
    source_item: ItemResponse
    destination_warehouse: WarehouseResponse
    destination_item: ItemResponse


class TransferEngine:
    """Moves stock of one SKU between two warehouses as a single atomic unit.

    Every change that touches an item quantity together with its
    warehouse's occupancy runs inside ``section``: the per-warehouse
    exclusive sections are held (ascending id), the warehouse rows are
    locked in the database, and everything done in the body commits
    together or is rolled back.
    """

    def __init__(self, db: Session, locks: WarehouseLocks = warehouse_locks):
        self.db = db
        self.locks = locks
        self.warehouses = WarehouseRepository(db)
        self.items = ItemRepository(db)
        self.activity = ActivityRepository(db)

    @contextmanager
    def section(self, *warehouse_ids: int) -> Iterator[Dict[int, Warehouse]]:
        """Exclusive, all-or-nothing section over the given warehouses.

        Yields the locked warehouse rows by id; ids that do not exist are
        missing from the mapping.
        """
        with self.locks.hold(*warehouse_ids):
            # Anything read before the locks were held may be stale
            self.db.expire_all()
            try:
                locked = self.warehouses.lock(*warehouse_ids)
                yield locked
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                raise ConflictError("The change conflicts with existing inventory data") from e
            except Exception:
                self.db.rollback()
                raise

    def transfer(
        self,
        source_warehouse_id: int,
        destination_warehouse_id: int,
        sku: str,
        quantity: int
    ) -> TransferResult:
        sku = self._validate_request(source_warehouse_id, destination_warehouse_id, sku, quantity)

        logger.info(
            f"Transfer requested: {quantity} x '{sku}' "
            f"warehouse {source_warehouse_id} -> {destination_warehouse_id}"
        )

        try:
            # Advisory: fail fast without waiting for the locks
            self._check_preconditions(source_warehouse_id, destination_warehouse_id, sku, quantity)

            with self.section(source_warehouse_id, destination_warehouse_id) as locked:
                source, destination, source_item, destination_item = self._check_preconditions(
                    source_warehouse_id, destination_warehouse_id, sku, quantity, locked=locked
                )

                self.items.update_quantity(source_item.id, -quantity)

                if destination_item is None:
                    destination_item = self.items.create(
                        destination.id,
                        sku,
                        {
                            "name": source_item.name,
                            "description": source_item.description,
                            "category": source_item.category,
                            "expiration_date": source_item.expiration_date,
                            "storage_location": settings.transfer_storage_location
                        },
                        0
                    )
                self.items.update_quantity(destination_item.id, quantity)

                self.warehouses.adjust_occupancy(source.id, -quantity)
                self.warehouses.adjust_occupancy(destination.id, quantity)

                result = TransferResult(
                    sku=sku,
                    quantity=quantity,
                    source_warehouse=WarehouseResponse.model_validate(source),
                    source_item=ItemResponse.model_validate(source_item),
                    destination_warehouse=WarehouseResponse.model_validate(destination),
                    destination_item=ItemResponse.model_validate(destination_item)
                )
        except InventoryError as e:
            logger.warning(
                f"Transfer rejected ({type(e).__name__}): {e.message} "
                f"[{quantity} x '{sku}' {source_warehouse_id} -> {destination_warehouse_id}]"
            )
            raise

        logger.info(
            f"Transfer committed: {quantity} x '{sku}' "
            f"'{result.source_warehouse.name}' ({result.source_warehouse.current_capacity}/"
            f"{result.source_warehouse.max_capacity}) -> "
            f"'{result.destination_warehouse.name}' ({result.destination_warehouse.current_capacity}/"
            f"{result.destination_warehouse.max_capacity})"
        )

        self.activity.record(
            "transfer",
            f"Transferred {quantity} of SKU {sku} from \"{result.source_warehouse.name}\" "
            f"to \"{result.destination_warehouse.name}\"",
            warehouse_id=source_warehouse_id,
            related_warehouse_id=destination_warehouse_id,
            sku=sku,
            quantity=quantity
        )
        return result

    # ==================== VALIDATION ====================

    @staticmethod
    def _validate_request(
        source_warehouse_id: int,
        destination_warehouse_id: int,
        sku: str,
        quantity: int
    ) -> str:
        if source_warehouse_id == destination_warehouse_id:
            raise ValidationError("Source and destination warehouses must be different")
        if quantity is None or quantity <= 0:
            raise ValidationError(
                "Quantity must be > 0",
                details={"quantity": quantity}
            )
        sku = (sku or "").strip()
        if not sku:
            raise ValidationError("SKU is required")
        return sku

    def _check_preconditions(
        self,
        source_warehouse_id: int,
        destination_warehouse_id: int,
        sku: str,
        quantity: int,
        locked: Optional[Dict[int, Warehouse]] = None
    ) -> Tuple[Warehouse, Warehouse, InventoryItem, Optional[InventoryItem]]:
        """Check existence, stock and capacity.

        With ``locked`` the rows come from the held section and the item rows
        are locked too; without it this is a plain read.
        """
        for_update = locked is not None
        if for_update:
            source = locked.get(source_warehouse_id)
            destination = locked.get(destination_warehouse_id)
        else:
            source = self.warehouses.find(source_warehouse_id)
            destination = self.warehouses.find(destination_warehouse_id)

        if source is None:
            raise NotFoundError(f"Source warehouse {source_warehouse_id} not found")
        if destination is None:
            raise NotFoundError(f"Destination warehouse {destination_warehouse_id} not found")

        source_item = self.items.find_by_sku_in_warehouse(source.id, sku, for_update=for_update)
        available = source_item.quantity if source_item is not None else 0
        if available < quantity:
            raise InsufficientQuantityError(
                f"Not enough quantity of SKU '{sku}' in source warehouse '{source.name}'. "
                f"Available: {available}, requested: {quantity}",
                details={"warehouse_id": source.id, "sku": sku, "available": available, "requested": quantity}
            )

        if destination.available_capacity < quantity:
            raise CapacityExceededError(
                f"Not enough capacity in destination warehouse '{destination.name}'. "
                f"Available: {destination.available_capacity}, requested: {quantity}",
                details={
                    "warehouse_id": destination.id,
                    "current_capacity": destination.current_capacity,
                    "max_capacity": destination.max_capacity,
                    "requested": quantity
                }
            )

        destination_item = self.items.find_by_sku_in_warehouse(destination.id, sku, for_update=for_update)
        return source, destination, source_item, destination_item
