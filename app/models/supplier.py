from sqlalchemy import Column, String, Boolean, DateTime, Text, Float, Integer, Uuid, JSON, Enum as SQLEnum
from sqlalchemy.sql import func
import uuid

from app.core.database import Base
from shared.models import BusinessType, PaymentTerms


def enum_column(enum_cls, name: str) -> SQLEnum:
    """Store enum values (not member names) as plain strings."""
    return SQLEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=50,
        values_callable=lambda members: [member.value for member in members]
    )


class Supplier(Base):
    """Supplier of farm goods; soft-deleted through ``is_active``."""
    __tablename__ = "suppliers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False, index=True)
    contact_person = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(20), nullable=False)

    # Postal address
    street = Column(String(200), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    zip_code = Column(String(10), nullable=False)
    country = Column(String(100), nullable=False, default="USA")

    # Commercial terms
    business_type = Column(enum_column(BusinessType, "business_type"), nullable=False,
                           default=BusinessType.GENERAL_SUPPLIER, index=True)
    tax_id = Column(String(20))
    payment_terms = Column(enum_column(PaymentTerms, "payment_terms"), nullable=False, default=PaymentTerms.NET_30)
    credit_limit = Column(Float, nullable=False, default=0.0)
    current_balance = Column(Float, nullable=False, default=0.0)
    rating = Column(Integer, nullable=False, default=3)
    notes = Column(Text)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    tags = Column(JSON, default=list)
    documents = Column(JSON, default=list)  # [{"name": ..., "url": ..., "uploaded_at": ...}]

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Supplier(id={self.id}, name='{self.name}', active={self.is_active})>"
