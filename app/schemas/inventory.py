from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
import uuid

from app.schemas.supplier import CountByKey, SupplierSummary
from shared.models import InventoryCategory, StockStatus, UnitOfMeasure
from shared.utils import to_utc, utcnow


class StorageLocation(BaseModel):
    warehouse: Optional[str] = Field(None, max_length=100)
    shelf: Optional[str] = Field(None, max_length=50)
    bin: Optional[str] = Field(None, max_length=50)

    class Config:
        str_strip_whitespace = True


class InventoryImage(BaseModel):
    url: str = Field(..., min_length=1, max_length=500)
    caption: Optional[str] = Field(None, max_length=200)
    uploaded_at: datetime = Field(default_factory=utcnow)


class InventoryBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    category: InventoryCategory
    subcategory: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    unit: UnitOfMeasure
    current_stock: float = Field(0, ge=0)
    minimum_stock: float = Field(0, ge=0)
    maximum_stock: Optional[float] = Field(None, ge=0)
    cost_price: float = Field(0, ge=0)
    selling_price: float = Field(0, ge=0)
    supplier_id: Optional[uuid.UUID] = None
    location: StorageLocation = Field(default_factory=StorageLocation)
    expiry_date: Optional[datetime] = None
    batch_number: Optional[str] = Field(None, max_length=50)
    tags: List[str] = Field(default_factory=list)
    images: List[InventoryImage] = Field(default_factory=list)
    notes: Optional[str] = Field(None, max_length=1000)

    class Config:
        str_strip_whitespace = True

    @field_validator("expiry_date")
    @classmethod
    def check_expiry_date(cls, value):
        return to_utc(value)


class InventoryCreate(InventoryBase):
    # Generated from the category when omitted
    sku: Optional[str] = Field(None, min_length=1, max_length=50)


class InventoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    sku: Optional[str] = Field(None, min_length=1, max_length=50)
    category: Optional[InventoryCategory] = None
    subcategory: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    unit: Optional[UnitOfMeasure] = None
    current_stock: Optional[float] = Field(None, ge=0)
    minimum_stock: Optional[float] = Field(None, ge=0)
    maximum_stock: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    selling_price: Optional[float] = Field(None, ge=0)
    supplier_id: Optional[uuid.UUID] = None
    location: Optional[StorageLocation] = None
    expiry_date: Optional[datetime] = None
    batch_number: Optional[str] = Field(None, max_length=50)
    tags: Optional[List[str]] = None
    images: Optional[List[InventoryImage]] = None
    notes: Optional[str] = Field(None, max_length=1000)

    class Config:
        str_strip_whitespace = True

    @field_validator("expiry_date")
    @classmethod
    def check_expiry_date(cls, value):
        return to_utc(value)


class StockUpdate(BaseModel):
    current_stock: float = Field(..., ge=0)
    minimum_stock: Optional[float] = Field(None, ge=0)
    maximum_stock: Optional[float] = Field(None, ge=0)


class InventoryResponse(InventoryBase):
    id: uuid.UUID
    sku: str
    is_active: bool
    stock_status: StockStatus
    profit_margin: float
    supplier: Optional[SupplierSummary] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class InventorySummary(BaseModel):
    """Inventory fields embedded in pricing responses."""
    id: uuid.UUID
    name: str
    sku: str
    category: InventoryCategory
    unit: UnitOfMeasure
    current_stock: Optional[float] = None
    minimum_stock: Optional[float] = None

    class Config:
        from_attributes = True


class PaginatedInventoryResponse(BaseModel):
    items: List[InventoryResponse]
    total: int
    page: int
    size: int
    pages: int


class InventoryStatsResponse(BaseModel):
    total_items: int
    active_items: int
    out_of_stock: int
    low_stock: int
    total_value: float
    categories: List[CountByKey]
