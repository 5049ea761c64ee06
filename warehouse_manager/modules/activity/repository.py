# warehouse_manager/modules/activity/repository.py
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
import logging

from warehouse_manager.shared.database.models import ActivityLog

logger = logging.getLogger(__name__)


class ActivityRepository:
    """Append-only activity feed.

    Entries are committed on their own, after the operation they describe
    has committed. A failed append is logged and dropped; it never undoes or
    fails the operation itself.
    """

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        action: str,
        message: str,
        warehouse_id: Optional[int] = None,
        related_warehouse_id: Optional[int] = None,
        sku: Optional[str] = None,
        quantity: Optional[int] = None
    ) -> Optional[ActivityLog]:
        entry = ActivityLog(
            action=action,
            message=message[:500],
            warehouse_id=warehouse_id,
            related_warehouse_id=related_warehouse_id,
            sku=sku,
            quantity=quantity
        )
        try:
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError:
            logger.exception(f"Could not append activity entry '{action}': {message}")
            self.db.rollback()
            return None
        return entry

    def recent(self, limit: int = 5, warehouse_id: Optional[int] = None) -> List[ActivityLog]:
        query = self.db.query(ActivityLog)
        if warehouse_id is not None:
            query = query.filter(
                (ActivityLog.warehouse_id == warehouse_id)
                | (ActivityLog.related_warehouse_id == warehouse_id)
            )
        return query.order_by(desc(ActivityLog.id)).limit(limit).all()
