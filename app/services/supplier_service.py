from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Iterable, Optional, Union
import logging
import math
import uuid

from app.core.repository import Repository, text_search
from app.models.supplier import Supplier
from app.schemas.supplier import (
    Address, CountByKey, SupplierCreate, SupplierDetailResponse, SupplierListResponse,
    SupplierOverview, SupplierResponse, SupplierStatsResponse, SupplierSummary, SupplierUpdate
)
from app.services.uniqueness import ensure_unique_supplier_email
from shared.exceptions import NotFoundError
from shared.models import BusinessType

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("street", "city", "state", "zip_code", "country")
CLEARABLE_FIELDS = ("tax_id", "notes")


def count_key(value: Any) -> Optional[str]:
    """Render a grouped column value (enum, uuid, str) as a plain key."""
    if value is None:
        return None
    return getattr(value, "value", None) or str(value)


async def supplier_summaries(
    repo: Repository[Supplier],
    supplier_ids: Iterable[Optional[uuid.UUID]]
) -> Dict[uuid.UUID, SupplierSummary]:
    """Load summaries for the given supplier ids in one query."""
    ids = {supplier_id for supplier_id in supplier_ids if supplier_id is not None}
    if not ids:
        return {}
    suppliers = await repo.find(Supplier.id.in_(ids))
    return {supplier.id: SupplierSummary.model_validate(supplier) for supplier in suppliers}


class SupplierService:
    """Service for supplier management operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.suppliers = Repository(db, Supplier, "Supplier with this email already exists")

    async def list_suppliers(
        self,
        search: Optional[str] = None,
        business_type: Optional[BusinessType] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        size: int = 10,
        include_private: bool = False,
        paginate: bool = True
    ) -> SupplierListResponse:
        """List suppliers, newest first.

        With ``paginate=False`` every matching supplier is returned on one
        page ordered by name, for pick lists.
        """
        filters = []
        if search:
            filters.append(text_search(search, Supplier.name, Supplier.contact_person, Supplier.email))
        if business_type:
            filters.append(Supplier.business_type == business_type)
        if is_active is not None:
            filters.append(Supplier.is_active == is_active)

        total = await self.suppliers.count(*filters)
        if not paginate:
            suppliers = await self.suppliers.find(*filters, order_by=(Supplier.name.asc(),))
            return SupplierListResponse(
                items=[self._supplier_to_response(s, include_private) for s in suppliers],
                total=total,
                page=1,
                size=total,
                pages=1
            )

        suppliers = await self.suppliers.find(
            *filters,
            order_by=(Supplier.created_at.desc(),),
            offset=(page - 1) * size,
            limit=size
        )

        return SupplierListResponse(
            items=[self._supplier_to_response(s, include_private) for s in suppliers],
            total=total,
            page=page,
            size=size,
            pages=math.ceil(total / size) if size else 0
        )

    async def get_supplier(
        self,
        supplier_id: uuid.UUID,
        include_private: bool = False
    ) -> Union[SupplierDetailResponse, SupplierResponse]:
        supplier = await self._get_or_raise(supplier_id)
        return self._supplier_to_response(supplier, include_private)

    async def create_supplier(self, supplier_data: SupplierCreate) -> SupplierDetailResponse:
        """Create a supplier after checking its email is unused."""
        await ensure_unique_supplier_email(self.suppliers, supplier_data.email)

        values = supplier_data.model_dump(exclude={"address", "documents"})
        values.update(supplier_data.address.model_dump())
        values["documents"] = [document.model_dump(mode="json") for document in supplier_data.documents]

        supplier = await self.suppliers.insert(Supplier(**values))
        logger.info(f"Created supplier {supplier.id} ({supplier.name})")
        return self._supplier_to_response(supplier, include_private=True)

    async def update_supplier(self, supplier_id: uuid.UUID, update_data: SupplierUpdate) -> SupplierDetailResponse:
        """Apply the provided fields; a changed email must still be unique."""
        supplier = await self._get_or_raise(supplier_id)

        values = update_data.model_dump(exclude_unset=True, exclude={"address", "documents"})
        values = {key: value for key, value in values.items() if value is not None or key in CLEARABLE_FIELDS}
        if "email" in values and values["email"] is not None and values["email"] != supplier.email:
            await ensure_unique_supplier_email(self.suppliers, values["email"], exclude_id=supplier_id)
        if update_data.address is not None:
            values.update(update_data.address.model_dump())
        if update_data.documents is not None:
            values["documents"] = [document.model_dump(mode="json") for document in update_data.documents]

        supplier = await self.suppliers.update_by_id(supplier_id, values)
        logger.info(f"Updated supplier {supplier_id}: {sorted(values)}")
        return self._supplier_to_response(supplier, include_private=True)

    async def deactivate_supplier(self, supplier_id: uuid.UUID) -> SupplierDetailResponse:
        return await self._set_active(supplier_id, False)

    async def restore_supplier(self, supplier_id: uuid.UUID) -> SupplierDetailResponse:
        return await self._set_active(supplier_id, True)

    async def get_stats(self) -> SupplierStatsResponse:
        total = await self.suppliers.count()
        active = await self.suppliers.count(Supplier.is_active == True)
        business_types = await self.suppliers.group_count(Supplier.business_type, Supplier.is_active == True)

        return SupplierStatsResponse(
            overview=SupplierOverview(total=total, active=active, inactive=total - active),
            business_types=[CountByKey(key=count_key(key), count=count) for key, count in business_types]
        )

    async def _set_active(self, supplier_id: uuid.UUID, is_active: bool) -> SupplierDetailResponse:
        await self._get_or_raise(supplier_id)
        supplier = await self.suppliers.update_by_id(supplier_id, {"is_active": is_active})
        logger.info(f"Supplier {supplier_id} {'restored' if is_active else 'deactivated'}")
        return self._supplier_to_response(supplier, include_private=True)

    async def _get_or_raise(self, supplier_id: uuid.UUID) -> Supplier:
        supplier = await self.suppliers.find_by_id(supplier_id)
        if supplier is None:
            raise NotFoundError("Supplier not found", details={"supplier_id": str(supplier_id)})
        return supplier

    def _supplier_to_response(
        self,
        supplier: Supplier,
        include_private: bool = False
    ) -> Union[SupplierDetailResponse, SupplierResponse]:
        """Convert a supplier row to its public or full response."""
        address = Address(**{field: getattr(supplier, field) for field in ADDRESS_FIELDS})
        data = {
            "id": supplier.id,
            "name": supplier.name,
            "contact_person": supplier.contact_person,
            "email": supplier.email,
            "phone": supplier.phone,
            "address": address,
            "full_address": f"{address.street}, {address.city}, {address.state} {address.zip_code}, {address.country}",
            "business_type": supplier.business_type,
            "payment_terms": supplier.payment_terms,
            "rating": supplier.rating,
            "notes": supplier.notes,
            "tags": supplier.tags or [],
            "documents": supplier.documents or [],
            "is_active": supplier.is_active,
            "created_at": supplier.created_at,
            "updated_at": supplier.updated_at,
        }
        if not include_private:
            return SupplierResponse(**data)
        return SupplierDetailResponse(
            **data,
            tax_id=supplier.tax_id,
            credit_limit=supplier.credit_limit,
            current_balance=supplier.current_balance
        )
