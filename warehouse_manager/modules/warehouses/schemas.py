# warehouse_manager/modules/warehouses/schemas.py
from pydantic import Field
from warehouse_manager.shared.schemas.common import CamelModel, MAX_INTEGER


class WarehousePayload(CamelModel):
    """Body of POST /api/warehouses and PUT /api/warehouses/{id}"""
    name: str = Field(..., min_length=1, max_length=255, description="Warehouse name, unique")
    location: str = Field(..., min_length=1, max_length=255, description="Address or site of the warehouse")
    max_capacity: int = Field(..., ge=0, le=MAX_INTEGER, description="Capacity units the warehouse can hold")


class WarehouseResponse(CamelModel):
    id: int
    name: str
    location: str
    max_capacity: int
    current_capacity: int
    available_capacity: int


class CapacityLedgerResponse(CamelModel):
    warehouse_id: int
    max_capacity: int
    current_capacity: int
    derived_capacity: int
    consistent: bool


class ReconcileResponse(CamelModel):
    warehouse_id: int
    previous_capacity: int
    current_capacity: int
    corrected: bool
