from sqlalchemy import Column, String, Boolean, DateTime, Text, Float, ForeignKey, Uuid, JSON, Index
from sqlalchemy.sql import func
import uuid

from app.core.database import Base
from app.models.supplier import enum_column
from shared.models import InventoryCategory, UnitOfMeasure


class InventoryItem(Base):
    """Stocked farm-supply item. Stock status and margin are derived, never stored."""
    __tablename__ = "inventory_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    sku = Column(String(50), nullable=False, unique=True, index=True)
    category = Column(enum_column(InventoryCategory, "inventory_category"), nullable=False)
    subcategory = Column(String(50))
    description = Column(String(500))
    unit = Column(enum_column(UnitOfMeasure, "unit_of_measure"), nullable=False)

    # Stock levels
    current_stock = Column(Float, nullable=False, default=0.0, index=True)
    minimum_stock = Column(Float, nullable=False, default=0.0)
    maximum_stock = Column(Float)

    # Prices
    cost_price = Column(Float, nullable=False, default=0.0)
    selling_price = Column(Float, nullable=False, default=0.0)

    supplier_id = Column(Uuid, ForeignKey("suppliers.id"), index=True)

    # Storage location
    warehouse = Column(String(100))
    shelf = Column(String(50))
    bin = Column(String(50))

    expiry_date = Column(DateTime(timezone=True), index=True)
    batch_number = Column(String(50))
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    tags = Column(JSON, default=list)
    images = Column(JSON, default=list)  # [{"url": ..., "caption": ..., "uploaded_at": ...}]
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("ix_inventory_items_name_category", "name", "category", "subcategory"),
    )

    def __repr__(self):
        return f"<InventoryItem(id={self.id}, sku='{self.sku}', current_stock={self.current_stock})>"
