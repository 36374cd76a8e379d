from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
import uuid

from app.schemas.inventory import InventorySummary
from app.schemas.supplier import CountByKey, SupplierSummary
from shared.models import Currency, PaymentTerms
from shared.utils import to_utc


class BulkPricingTier(BaseModel):
    """Price break applying from ``quantity`` units upwards."""
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)
    discount: Optional[float] = Field(None, ge=0, le=100)


class PricingBase(BaseModel):
    supplier_id: uuid.UUID
    inventory_id: uuid.UUID
    cost_price: float = Field(..., ge=0)
    selling_price: float = Field(..., ge=0)
    bulk_pricing: List[BulkPricingTier] = Field(default_factory=list)
    currency: Currency = Currency.USD
    effective_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    minimum_order_quantity: int = Field(1, ge=1)
    lead_time: int = Field(0, ge=0, description="Lead time in days")
    payment_terms: PaymentTerms = PaymentTerms.NET_30
    notes: Optional[str] = Field(None, max_length=500)

    class Config:
        str_strip_whitespace = True

    @field_validator("effective_date", "expiry_date")
    @classmethod
    def check_dates(cls, value):
        return to_utc(value)


class PricingCreate(PricingBase):
    pass


class PricingUpdate(BaseModel):
    supplier_id: Optional[uuid.UUID] = None
    inventory_id: Optional[uuid.UUID] = None
    cost_price: Optional[float] = Field(None, ge=0)
    selling_price: Optional[float] = Field(None, ge=0)
    bulk_pricing: Optional[List[BulkPricingTier]] = None
    currency: Optional[Currency] = None
    effective_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    minimum_order_quantity: Optional[int] = Field(None, ge=1)
    lead_time: Optional[int] = Field(None, ge=0)
    payment_terms: Optional[PaymentTerms] = None
    notes: Optional[str] = Field(None, max_length=500)

    class Config:
        str_strip_whitespace = True

    @field_validator("effective_date", "expiry_date")
    @classmethod
    def check_dates(cls, value):
        return to_utc(value)


class PricingResponse(PricingBase):
    id: uuid.UUID
    effective_date: datetime
    is_active: bool
    profit_margin: float
    markup_percentage: float
    is_expired: bool
    is_effective: bool
    supplier: Optional[SupplierSummary] = None
    inventory: Optional[InventorySummary] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class PaginatedPricingResponse(BaseModel):
    items: List[PricingResponse]
    total: int
    page: int
    size: int
    pages: int


class PricingOverview(BaseModel):
    total: int
    active: int
    inactive: int
    avg_cost_price: float
    avg_selling_price: float


class PricingStatsResponse(BaseModel):
    overview: PricingOverview
    currencies: List[CountByKey]
    top_suppliers: List[CountByKey]
