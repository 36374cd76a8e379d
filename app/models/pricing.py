from sqlalchemy import Column, Boolean, DateTime, Text, Float, Integer, ForeignKey, Uuid, JSON, UniqueConstraint, Index
from sqlalchemy.sql import func
import uuid

from app.core.database import Base
from app.models.supplier import enum_column
from shared.models import Currency, PaymentTerms


class Pricing(Base):
    """Supplier-specific price for one inventory item, with quantity tiers."""
    __tablename__ = "pricing"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    supplier_id = Column(Uuid, ForeignKey("suppliers.id"), nullable=False)
    inventory_id = Column(Uuid, ForeignKey("inventory_items.id"), nullable=False)

    cost_price = Column(Float, nullable=False)
    selling_price = Column(Float, nullable=False)
    bulk_pricing = Column(JSON, default=list)  # [{"quantity": 10, "price": 9.5, "discount": 5}], ascending quantity
    currency = Column(enum_column(Currency, "currency"), nullable=False, default=Currency.USD)

    # Validity
    effective_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    expiry_date = Column(DateTime(timezone=True), index=True)

    # Terms
    minimum_order_quantity = Column(Integer, nullable=False, default=1)
    lead_time = Column(Integer, nullable=False, default=0)  # days
    payment_terms = Column(enum_column(PaymentTerms, "payment_terms"), nullable=False, default=PaymentTerms.NET_30)

    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        # Storage-level backstop for the supplier+inventory pairing check
        UniqueConstraint("supplier_id", "inventory_id", name="uq_pricing_supplier_inventory"),
        Index("ix_pricing_supplier_active", "supplier_id", "is_active"),
        Index("ix_pricing_inventory_active", "inventory_id", "is_active"),
    )

    def __repr__(self):
        return f"<Pricing(id={self.id}, supplier_id={self.supplier_id}, inventory_id={self.inventory_id})>"
