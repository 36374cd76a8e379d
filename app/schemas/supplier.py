from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Union
from datetime import datetime
import uuid

from shared.models import BusinessType, PaymentTerms
from shared.utils import utcnow, validate_email


def _normalize_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip().lower()
    if not validate_email(value):
        raise ValueError("Please enter a valid email")
    return value


class Address(BaseModel):
    """Postal address of a supplier."""
    street: str = Field(..., min_length=5, max_length=200)
    city: str = Field(..., min_length=2, max_length=100)
    state: str = Field(..., min_length=2, max_length=100)
    zip_code: str = Field(..., min_length=5, max_length=10)
    country: str = Field("USA", min_length=2, max_length=100)

    class Config:
        str_strip_whitespace = True


class SupplierDocument(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=500)
    uploaded_at: datetime = Field(default_factory=utcnow)


class SupplierBase(BaseModel):
    """Base supplier schema."""
    name: str = Field(..., min_length=2, max_length=100)
    contact_person: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., max_length=255)
    phone: str = Field(..., min_length=10, max_length=20)
    address: Address
    business_type: BusinessType = BusinessType.GENERAL_SUPPLIER
    payment_terms: PaymentTerms = PaymentTerms.NET_30
    rating: int = Field(3, ge=1, le=5)
    notes: Optional[str] = Field(None, max_length=500)
    tags: List[str] = Field(default_factory=list)
    documents: List[SupplierDocument] = Field(default_factory=list)

    class Config:
        str_strip_whitespace = True

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return _normalize_email(value)


class SupplierCreate(SupplierBase):
    """Schema for creating a supplier."""
    tax_id: Optional[str] = Field(None, max_length=20)
    credit_limit: float = Field(0.0, ge=0)
    current_balance: float = 0.0


class SupplierUpdate(BaseModel):
    """Schema for updating supplier information; omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    contact_person: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, min_length=10, max_length=20)
    address: Optional[Address] = None
    business_type: Optional[BusinessType] = None
    payment_terms: Optional[PaymentTerms] = None
    tax_id: Optional[str] = Field(None, max_length=20)
    credit_limit: Optional[float] = Field(None, ge=0)
    current_balance: Optional[float] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = Field(None, max_length=500)
    tags: Optional[List[str]] = None
    documents: Optional[List[SupplierDocument]] = None

    class Config:
        str_strip_whitespace = True

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return _normalize_email(value)


class SupplierResponse(SupplierBase):
    """Public supplier profile: no tax id, credit limit or balance."""
    id: uuid.UUID
    full_address: str
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class SupplierDetailResponse(SupplierResponse):
    """Full supplier record, returned to admins."""
    tax_id: Optional[str] = None
    credit_limit: float
    current_balance: float


class SupplierSummary(BaseModel):
    """Supplier fields embedded in inventory and pricing responses."""
    id: uuid.UUID
    name: str
    business_type: BusinessType
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    rating: Optional[int] = None

    class Config:
        from_attributes = True


class SupplierListResponse(BaseModel):
    items: List[Union[SupplierDetailResponse, SupplierResponse]]
    total: int
    page: int
    size: int
    pages: int


class CountByKey(BaseModel):
    key: Optional[str] = None
    count: int


class SupplierOverview(BaseModel):
    total: int
    active: int
    inactive: int


class SupplierStatsResponse(BaseModel):
    overview: SupplierOverview
    business_types: List[CountByKey]
