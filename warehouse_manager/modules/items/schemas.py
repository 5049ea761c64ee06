# warehouse_manager/modules/items/schemas.py
from pydantic import Field
from typing import Optional
from datetime import date
from warehouse_manager.shared.schemas.common import CamelModel, MAX_INTEGER


class ItemCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255, description="Item name")
    sku: str = Field(..., min_length=1, max_length=255, description="Stock-keeping unit, unique within the warehouse")
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=255)
    storage_location: Optional[str] = Field(None, max_length=255, description="Aisle/shelf inside the warehouse")
    expiration_date: Optional[date] = None
    quantity: int = Field(0, ge=0, le=MAX_INTEGER, description="Units in stock")


class ItemUpdate(CamelModel):
    """PUT body; omitted fields keep their current value"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sku: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=255)
    storage_location: Optional[str] = Field(None, max_length=255)
    expiration_date: Optional[date] = None
    quantity: Optional[int] = Field(None, ge=0, le=MAX_INTEGER, description="New absolute quantity")


class ItemResponse(CamelModel):
    id: int
    warehouse_id: int
    sku: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    storage_location: Optional[str] = None
    expiration_date: Optional[date] = None
    quantity: int
