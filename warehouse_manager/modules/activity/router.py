# warehouse_manager/modules/activity/router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from warehouse_manager.config.database import get_db
from warehouse_manager.shared.schemas.common import MAX_INTEGER
from warehouse_manager.shared.services.inventory_service import InventoryService
from .schemas import ActivityEntry

router = APIRouter()


@router.get("", response_model=List[ActivityEntry])
def recent_activity(
    limit: Optional[int] = Query(None, ge=1, le=500, description="Entries to return, newest first"),
    warehouse_id: Optional[int] = Query(None, alias="warehouseId", le=MAX_INTEGER, description="Only entries touching this warehouse"),
    db: Session = Depends(get_db)
):
    """Recent warehouse, item and transfer activity"""
    service = InventoryService(db)
    return service.recent_activity(limit, warehouse_id)
