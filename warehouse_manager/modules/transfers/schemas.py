# warehouse_manager/modules/transfers/schemas.py
from pydantic import Field
from warehouse_manager.shared.schemas.common import BaseResponse, CamelModel, MAX_INTEGER
from warehouse_manager.modules.items.schemas import ItemResponse
from warehouse_manager.modules.warehouses.schemas import WarehouseResponse


class TransferRequestCreate(CamelModel):
    source_warehouse_id: int = Field(..., ge=1, le=MAX_INTEGER, description="Warehouse the stock leaves")
    destination_warehouse_id: int = Field(..., ge=1, le=MAX_INTEGER, description="Warehouse the stock enters")
    sku: str = Field(..., min_length=1, max_length=255, description="SKU to move")
    quantity: int = Field(..., gt=0, le=MAX_INTEGER, description="Units to move, greater than 0")


class TransferSide(CamelModel):
    warehouse: WarehouseResponse
    item: ItemResponse


class TransferResponse(BaseResponse):
    sku: str
    quantity: int
    source: TransferSide
    destination: TransferSide
