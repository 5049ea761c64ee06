# warehouse_manager/shared/database/models.py
from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Text,
    ForeignKey, UniqueConstraint, CheckConstraint,
    func
)
from sqlalchemy.orm import relationship

from warehouse_manager.config.database import Base


# =====================================================
# TIMESTAMP MIXIN
# =====================================================
class TimestampMixin:
    """Adds created_at / updated_at columns"""
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, server_default=func.current_timestamp(), onupdate=func.current_timestamp())


# =====================================================
# WAREHOUSES
# =====================================================

class Warehouse(Base, TimestampMixin):
    """Warehouse with a bounded capacity.

    ``current_capacity`` is the sum of the quantities of the warehouse's
    items. It is only ever changed through
    ``WarehouseRepository.adjust_occupancy``.
    """
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    location = Column(String(255), nullable=False)
    max_capacity = Column(Integer, nullable=False)
    current_capacity = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint('max_capacity >= 0', name='ck_warehouses_max_capacity_non_negative'),
        CheckConstraint('current_capacity >= 0', name='ck_warehouses_current_capacity_non_negative'),
        CheckConstraint('current_capacity <= max_capacity', name='ck_warehouses_within_capacity'),
    )

    # Relationships
    items = relationship("InventoryItem", back_populates="warehouse")

    @property
    def available_capacity(self) -> int:
        return self.max_capacity - self.current_capacity


# =====================================================
# ITEMS
# =====================================================

class InventoryItem(Base, TimestampMixin):
    """Stock of one SKU inside one warehouse"""
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=False, index=True)
    sku = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(255))
    storage_location = Column(String(255))
    expiration_date = Column(Date)
    quantity = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint('warehouse_id', 'sku', name='inventory_items_unique_sku_per_warehouse'),
        CheckConstraint('quantity >= 0', name='ck_inventory_items_quantity_non_negative'),
    )

    # Relationships
    warehouse = relationship("Warehouse", back_populates="items")


# =====================================================
# ACTIVITY
# =====================================================

class ActivityLog(Base):
    """Append-only feed of inventory actions, written outside the transfer transaction"""
    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String(50), nullable=False, index=True)
    message = Column(String(500), nullable=False)
    warehouse_id = Column(Integer, index=True)
    related_warehouse_id = Column(Integer)
    sku = Column(String(255))
    quantity = Column(Integer)
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
