# warehouse_manager/modules/activity/schemas.py
from typing import Optional
from datetime import datetime
from warehouse_manager.shared.schemas.common import CamelModel


class ActivityEntry(CamelModel):
    id: int
    action: str
    message: str
    warehouse_id: Optional[int] = None
    related_warehouse_id: Optional[int] = None
    sku: Optional[str] = None
    quantity: Optional[int] = None
    created_at: datetime
