from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import datetime
import logging
import math
import uuid

from app.core.repository import Repository, text_search
from app.models.inventory import InventoryItem
from app.models.pricing import Pricing
from app.models.supplier import Supplier
from app.schemas.inventory import InventorySummary
from app.schemas.pricing import (
    PaginatedPricingResponse, PricingCreate, PricingOverview, PricingResponse,
    PricingStatsResponse, PricingUpdate
)
from app.schemas.supplier import CountByKey, SupplierSummary
from app.services.bulk_pricing import validate_bulk_pricing
from app.services.derived_fields import (
    calculate_markup_percentage, calculate_profit_margin, is_pricing_effective, is_pricing_expired
)
from app.services.inventory_service import inventory_summaries
from app.services.supplier_service import count_key, supplier_summaries
from app.services.uniqueness import ensure_unique_pairing
from shared.exceptions import NotFoundError
from shared.models import Currency
from shared.utils import utcnow

logger = logging.getLogger(__name__)

TOP_SUPPLIERS = 10
CLEARABLE_FIELDS = ("expiry_date", "notes")


class PricingService:
    """Service for supplier pricing of inventory items."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.pricing = Repository(db, Pricing, "Pricing for this supplier and inventory combination already exists")
        self.suppliers = Repository(db, Supplier)
        self.items = Repository(db, InventoryItem)

    async def list_pricing(
        self,
        search: Optional[str] = None,
        supplier_id: Optional[uuid.UUID] = None,
        inventory_id: Optional[uuid.UUID] = None,
        is_active: bool = True,
        include_inactive: bool = False,
        currency: Optional[Currency] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        page: int = 1,
        size: int = 10
    ) -> PaginatedPricingResponse:
        """List pricing records, newest first; ``search`` matches supplier or item names."""
        filters = [] if include_inactive else [Pricing.is_active == is_active]
        if search:
            filters.append(or_(
                Pricing.supplier_id.in_(select(Supplier.id).where(text_search(search, Supplier.name))),
                Pricing.inventory_id.in_(select(InventoryItem.id).where(text_search(search, InventoryItem.name)))
            ))
        if supplier_id:
            filters.append(Pricing.supplier_id == supplier_id)
        if inventory_id:
            filters.append(Pricing.inventory_id == inventory_id)
        if currency:
            filters.append(Pricing.currency == currency)
        if min_price is not None:
            filters.append(Pricing.cost_price >= min_price)
        if max_price is not None:
            filters.append(Pricing.cost_price <= max_price)

        total = await self.pricing.count(*filters)
        records = await self.pricing.find(
            *filters,
            order_by=(Pricing.created_at.desc(),),
            offset=(page - 1) * size,
            limit=size
        )

        return PaginatedPricingResponse(
            items=await self._to_responses(records),
            total=total,
            page=page,
            size=size,
            pages=math.ceil(total / size) if size else 0
        )

    async def get_pricing(self, pricing_id: uuid.UUID) -> PricingResponse:
        pricing = await self._get_or_raise(pricing_id)
        return (await self._to_responses([pricing]))[0]

    async def create_pricing(self, pricing_data: PricingCreate) -> PricingResponse:
        """Create pricing for an existing supplier and inventory item.

        Bulk tiers are stored sorted by quantity. A second record for the same
        supplier and item is rejected even when the first is inactive.
        """
        tiers = validate_bulk_pricing(pricing_data.bulk_pricing)
        await self._ensure_references_exist(pricing_data.supplier_id, pricing_data.inventory_id)
        await ensure_unique_pairing(self.pricing, pricing_data.supplier_id, pricing_data.inventory_id)

        values = pricing_data.model_dump(exclude={"bulk_pricing", "effective_date"})
        values["bulk_pricing"] = [tier.model_dump() for tier in tiers]
        if pricing_data.effective_date is not None:
            values["effective_date"] = pricing_data.effective_date

        pricing = await self.pricing.insert(Pricing(**values))
        logger.info(
            f"Created pricing {pricing.id} for supplier {pricing.supplier_id} / item {pricing.inventory_id}"
        )
        return (await self._to_responses([pricing]))[0]

    async def update_pricing(self, pricing_id: uuid.UUID, update_data: PricingUpdate) -> PricingResponse:
        """Apply the provided fields.

        When either reference changes, the resulting supplier and item pair
        must exist and must not already be priced.
        """
        pricing = await self._get_or_raise(pricing_id)

        values = update_data.model_dump(exclude_unset=True, exclude={"bulk_pricing"})
        values = {key: value for key, value in values.items() if value is not None or key in CLEARABLE_FIELDS}

        supplier_id = values.get("supplier_id", pricing.supplier_id)
        inventory_id = values.get("inventory_id", pricing.inventory_id)
        if (supplier_id, inventory_id) != (pricing.supplier_id, pricing.inventory_id):
            await self._ensure_references_exist(supplier_id, inventory_id)
            await ensure_unique_pairing(self.pricing, supplier_id, inventory_id, exclude_id=pricing_id)

        if update_data.bulk_pricing is not None:
            values["bulk_pricing"] = [tier.model_dump() for tier in validate_bulk_pricing(update_data.bulk_pricing)]

        pricing = await self.pricing.update_by_id(pricing_id, values)
        logger.info(f"Updated pricing {pricing_id}: {sorted(values)}")
        return (await self._to_responses([pricing]))[0]

    async def deactivate_pricing(self, pricing_id: uuid.UUID) -> PricingResponse:
        return await self._set_active(pricing_id, False)

    async def restore_pricing(self, pricing_id: uuid.UUID) -> PricingResponse:
        return await self._set_active(pricing_id, True)

    async def get_pricing_by_supplier(self, supplier_id: uuid.UUID) -> List[PricingResponse]:
        """Active pricing offered by a supplier, ordered by inventory item name."""
        records = await self.pricing.find(Pricing.supplier_id == supplier_id, Pricing.is_active == True)
        responses = await self._to_responses(records)
        return sorted(responses, key=lambda r: r.inventory.name.lower() if r.inventory else "")

    async def get_pricing_by_inventory(self, inventory_id: uuid.UUID) -> List[PricingResponse]:
        """Active pricing for an inventory item, cheapest cost first."""
        records = await self.pricing.find(
            Pricing.inventory_id == inventory_id,
            Pricing.is_active == True,
            order_by=(Pricing.cost_price.asc(),)
        )
        return await self._to_responses(records)

    async def get_stats(self) -> PricingStatsResponse:
        active = Pricing.is_active == True

        total = await self.pricing.count()
        active_count = await self.pricing.count(active)
        avg_cost, avg_selling = await self.pricing.aggregate(
            func.avg(Pricing.cost_price), func.avg(Pricing.selling_price)
        )
        currencies = await self.pricing.group_count(Pricing.currency, active)
        top_suppliers = await self.pricing.group_count(Pricing.supplier_id, active, limit=TOP_SUPPLIERS)

        return PricingStatsResponse(
            overview=PricingOverview(
                total=total,
                active=active_count,
                inactive=total - active_count,
                avg_cost_price=round(float(avg_cost or 0), 2),
                avg_selling_price=round(float(avg_selling or 0), 2)
            ),
            currencies=[CountByKey(key=count_key(key), count=count) for key, count in currencies],
            top_suppliers=[CountByKey(key=count_key(key), count=count) for key, count in top_suppliers]
        )

    async def _set_active(self, pricing_id: uuid.UUID, is_active: bool) -> PricingResponse:
        await self._get_or_raise(pricing_id)
        pricing = await self.pricing.update_by_id(pricing_id, {"is_active": is_active})
        logger.info(f"Pricing {pricing_id} {'restored' if is_active else 'deactivated'}")
        return (await self._to_responses([pricing]))[0]

    async def _get_or_raise(self, pricing_id: uuid.UUID) -> Pricing:
        pricing = await self.pricing.find_by_id(pricing_id)
        if pricing is None:
            raise NotFoundError("Pricing not found", details={"pricing_id": str(pricing_id)})
        return pricing

    async def _ensure_references_exist(self, supplier_id: uuid.UUID, inventory_id: uuid.UUID):
        if await self.suppliers.find_by_id(supplier_id) is None:
            raise NotFoundError("Supplier not found", details={"supplier_id": str(supplier_id)})
        if await self.items.find_by_id(inventory_id) is None:
            raise NotFoundError("Inventory item not found", details={"inventory_id": str(inventory_id)})

    async def _to_responses(self, records: List[Pricing]) -> List[PricingResponse]:
        suppliers = await supplier_summaries(self.suppliers, (r.supplier_id for r in records))
        items = await inventory_summaries(self.items, (r.inventory_id for r in records))
        now = utcnow()
        return [
            self._pricing_to_response(r, suppliers.get(r.supplier_id), items.get(r.inventory_id), now)
            for r in records
        ]

    def _pricing_to_response(
        self,
        pricing: Pricing,
        supplier: Optional[SupplierSummary],
        inventory: Optional[InventorySummary],
        now: datetime
    ) -> PricingResponse:
        return PricingResponse(
            id=pricing.id,
            supplier_id=pricing.supplier_id,
            inventory_id=pricing.inventory_id,
            supplier=supplier,
            inventory=inventory,
            cost_price=pricing.cost_price,
            selling_price=pricing.selling_price,
            bulk_pricing=pricing.bulk_pricing or [],
            currency=pricing.currency,
            effective_date=pricing.effective_date,
            expiry_date=pricing.expiry_date,
            minimum_order_quantity=pricing.minimum_order_quantity,
            lead_time=pricing.lead_time,
            payment_terms=pricing.payment_terms,
            notes=pricing.notes,
            is_active=pricing.is_active,
            profit_margin=calculate_profit_margin(pricing.cost_price, pricing.selling_price),
            markup_percentage=calculate_markup_percentage(pricing.cost_price, pricing.selling_price),
            is_expired=is_pricing_expired(pricing.expiry_date, now),
            is_effective=is_pricing_effective(pricing.is_active, pricing.effective_date, pricing.expiry_date, now),
            created_at=pricing.created_at,
            updated_at=pricing.updated_at
        )
