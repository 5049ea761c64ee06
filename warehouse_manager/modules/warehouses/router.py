# warehouse_manager/modules/warehouses/router.py
from typing import List
from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session

from warehouse_manager.config.database import get_db
from warehouse_manager.shared.schemas.common import MAX_INTEGER
from warehouse_manager.shared.services.inventory_service import InventoryService
from .schemas import WarehousePayload, WarehouseResponse, CapacityLedgerResponse, ReconcileResponse

router = APIRouter()


@router.get("", response_model=List[WarehouseResponse])
def list_warehouses(db: Session = Depends(get_db)):
    """List every warehouse with its current and available capacity"""
    service = InventoryService(db)
    return service.list_warehouses()


@router.post("", response_model=WarehouseResponse, status_code=status.HTTP_201_CREATED)
def create_warehouse(payload: WarehousePayload, db: Session = Depends(get_db)):
    """
    Create a warehouse

    **Validations:**
    - `name` and `location` are required, `name` is unique
    - `maxCapacity` must be zero or greater
    - a new warehouse starts empty (`currentCapacity` = 0)
    """
    service = InventoryService(db)
    return service.create_warehouse(payload.name, payload.location, payload.max_capacity)


@router.get("/{warehouse_id}", response_model=WarehouseResponse)
def get_warehouse(warehouse_id: int = Path(..., le=MAX_INTEGER, description="Warehouse ID"), db: Session = Depends(get_db)):
    service = InventoryService(db)
    return service.get_warehouse(warehouse_id)


@router.put("/{warehouse_id}", response_model=WarehouseResponse)
def update_warehouse(
    payload: WarehousePayload,
    warehouse_id: int = Path(..., le=MAX_INTEGER, description="Warehouse ID"),
    db: Session = Depends(get_db)
):
    """
    Update name, location and max capacity

    `maxCapacity` cannot go below the capacity the warehouse currently uses.
    """
    service = InventoryService(db)
    return service.update_warehouse(warehouse_id, payload.name, payload.location, payload.max_capacity)


@router.delete("/{warehouse_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_warehouse(warehouse_id: int = Path(..., le=MAX_INTEGER, description="Warehouse ID"), db: Session = Depends(get_db)):
    """Delete a warehouse. Fails with 409 while it still has item rows, even empty ones."""
    service = InventoryService(db)
    service.delete_warehouse(warehouse_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{warehouse_id}/ledger", response_model=CapacityLedgerResponse)
def get_capacity_ledger(warehouse_id: int = Path(..., le=MAX_INTEGER, description="Warehouse ID"), db: Session = Depends(get_db)):
    """Compare the stored occupied capacity with the sum of the item quantities"""
    service = InventoryService(db)
    return service.capacity_ledger(warehouse_id)


@router.post("/{warehouse_id}/reconcile", response_model=ReconcileResponse)
def reconcile_capacity(warehouse_id: int = Path(..., le=MAX_INTEGER, description="Warehouse ID"), db: Session = Depends(get_db)):
    """Recompute the occupied capacity from the item quantities"""
    service = InventoryService(db)
    return service.reconcile_capacity(warehouse_id)
