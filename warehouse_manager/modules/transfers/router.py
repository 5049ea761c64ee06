# warehouse_manager/modules/transfers/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from warehouse_manager.config.database import get_db
from warehouse_manager.shared.schemas.common import ErrorResponse
from warehouse_manager.shared.services.inventory_service import InventoryService
from .schemas import TransferRequestCreate, TransferResponse, TransferSide

router = APIRouter()


@router.post(
    "",
    response_model=TransferResponse,
    responses={code: {"model": ErrorResponse} for code in (400, 404, 409, 503)}
)
def create_transfer(transfer_data: TransferRequestCreate, db: Session = Depends(get_db)):
    """
    Move stock of one SKU from one warehouse to another

    **Process (all or nothing):**
    1. Lock both warehouses (always in ascending id order)
    2. Re-check stock at the source and room at the destination
    3. Decrement the source item, increment or create the destination item
    4. Move the occupied capacity between the two warehouses

    **Errors:**
    - 400: same warehouse on both sides, quantity <= 0
    - 404: unknown warehouse
    - 409: not enough stock at the source, not enough room at the destination
    - 503: warehouses busy, retry later
    """
    service = InventoryService(db)
    result = service.transfer(
        transfer_data.source_warehouse_id,
        transfer_data.destination_warehouse_id,
        transfer_data.sku,
        transfer_data.quantity
    )

    return TransferResponse(
        success=True,
        message=(
            f"Transferred {result.quantity} of SKU {result.sku}: "
            f"{result.source_warehouse.name} → {result.destination_warehouse.name}"
        ),
        sku=result.sku,
        quantity=result.quantity,
        source=TransferSide(warehouse=result.source_warehouse, item=result.source_item),
        destination=TransferSide(warehouse=result.destination_warehouse, item=result.destination_item)
    )
