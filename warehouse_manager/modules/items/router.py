# warehouse_manager/modules/items/router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.orm import Session

from warehouse_manager.config.database import get_db
from warehouse_manager.shared.schemas.common import MAX_INTEGER
from warehouse_manager.shared.services.inventory_service import InventoryService
from .schemas import ItemCreate, ItemUpdate, ItemResponse

router = APIRouter()


@router.get("", response_model=List[ItemResponse])
def list_items(
    warehouse_id: int = Path(..., le=MAX_INTEGER, description="Warehouse ID"),
    search: Optional[str] = Query(None, description="Filter by name, SKU or category"),
    db: Session = Depends(get_db)
):
    service = InventoryService(db)
    return service.list_items(warehouse_id, search)


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    payload: ItemCreate,
    warehouse_id: int = Path(..., le=MAX_INTEGER, description="Warehouse ID"),
    db: Session = Depends(get_db)
):
    """
    Add a new SKU to a warehouse

    **Validations:**
    - the SKU must not exist in this warehouse yet (409)
    - `quantity` must be zero or greater
    - the warehouse must have room for `quantity` units (409)
    """
    service = InventoryService(db)
    fields = payload.model_dump(exclude={"sku", "quantity"})
    return service.create_item(warehouse_id, payload.sku, fields, payload.quantity)


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(
    warehouse_id: int = Path(..., le=MAX_INTEGER, description="Warehouse ID"),
    item_id: int = Path(..., le=MAX_INTEGER, description="Item ID"),
    db: Session = Depends(get_db)
):
    service = InventoryService(db)
    return service.get_item(warehouse_id, item_id)


@router.put("/{item_id}", response_model=ItemResponse)
def update_item(
    payload: ItemUpdate,
    warehouse_id: int = Path(..., le=MAX_INTEGER, description="Warehouse ID"),
    item_id: int = Path(..., le=MAX_INTEGER, description="Item ID"),
    db: Session = Depends(get_db)
):
    """
    Update an item

    Only the fields present in the body change. A new `quantity` is applied
    to the warehouse's occupied capacity as well.
    """
    service = InventoryService(db)
    return service.update_item(warehouse_id, item_id, payload.model_dump(exclude_unset=True))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    warehouse_id: int = Path(..., le=MAX_INTEGER, description="Warehouse ID"),
    item_id: int = Path(..., le=MAX_INTEGER, description="Item ID"),
    db: Session = Depends(get_db)
):
    """Delete an item and release the capacity it occupied"""
    service = InventoryService(db)
    service.delete_item(warehouse_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
