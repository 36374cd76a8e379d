from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Iterable, Optional
import logging
import math
import uuid

from app.core.repository import Repository, text_search
from app.models.inventory import InventoryItem
from app.models.supplier import Supplier
from app.schemas.inventory import (
    InventoryCreate, InventoryResponse, InventoryStatsResponse, InventorySummary,
    InventoryUpdate, PaginatedInventoryResponse, StockUpdate, StorageLocation
)
from app.schemas.supplier import CountByKey, SupplierSummary
from app.services.derived_fields import (
    calculate_profit_margin, calculate_stock_status, low_stock_criterion, stock_status_expression
)
from app.services.supplier_service import count_key, supplier_summaries
from app.services.uniqueness import ensure_unique_sku
from shared.exceptions import NotFoundError
from shared.models import InventoryCategory, StockStatus
from shared.utils import generate_sku

logger = logging.getLogger(__name__)

TOP_CATEGORIES = 5
CLEARABLE_FIELDS = (
    "subcategory", "description", "maximum_stock", "supplier_id", "expiry_date", "batch_number", "notes"
)


async def inventory_summaries(
    repo: Repository[InventoryItem],
    inventory_ids: Iterable[Optional[uuid.UUID]]
) -> Dict[uuid.UUID, InventorySummary]:
    ids = {inventory_id for inventory_id in inventory_ids if inventory_id is not None}
    if not ids:
        return {}
    items = await repo.find(InventoryItem.id.in_(ids))
    return {item.id: InventorySummary.model_validate(item) for item in items}


class InventoryService:
    """Service for inventory item management and stock tracking."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.items = Repository(db, InventoryItem, "SKU already exists")
        self.suppliers = Repository(db, Supplier)

    async def list_inventory(
        self,
        search: Optional[str] = None,
        category: Optional[InventoryCategory] = None,
        supplier_id: Optional[uuid.UUID] = None,
        stock_status: Optional[StockStatus] = None,
        is_active: bool = True,
        include_inactive: bool = False,
        page: int = 1,
        size: int = 10
    ) -> PaginatedInventoryResponse:
        """List inventory items, newest first.

        The stock status filter is evaluated by the database with the same
        rules the responses use, so pagination counts stay exact.
        """
        filters = [] if include_inactive else [InventoryItem.is_active == is_active]
        if search:
            filters.append(text_search(
                search, InventoryItem.name, InventoryItem.sku, InventoryItem.description
            ))
        if category:
            filters.append(InventoryItem.category == category)
        if supplier_id:
            filters.append(InventoryItem.supplier_id == supplier_id)
        if stock_status:
            filters.append(stock_status_expression(InventoryItem) == stock_status.value)

        total = await self.items.count(*filters)
        items = await self.items.find(
            *filters,
            order_by=(InventoryItem.created_at.desc(),),
            offset=(page - 1) * size,
            limit=size
        )
        suppliers = await supplier_summaries(self.suppliers, (item.supplier_id for item in items))

        return PaginatedInventoryResponse(
            items=[self._item_to_response(item, suppliers.get(item.supplier_id)) for item in items],
            total=total,
            page=page,
            size=size,
            pages=math.ceil(total / size) if size else 0
        )

    async def get_inventory_item(self, item_id: uuid.UUID) -> InventoryResponse:
        """Get an active inventory item; inactive items are reported as not found."""
        item = await self._get_or_raise(item_id)
        if not item.is_active:
            raise NotFoundError("Inventory item is inactive", details={"inventory_id": str(item_id)})
        return await self._with_supplier(item)

    async def create_inventory_item(self, item_data: InventoryCreate) -> InventoryResponse:
        """Create an item, generating an SKU from the category when none is given."""
        if item_data.supplier_id is not None:
            await self._ensure_supplier_exists(item_data.supplier_id)

        sku = item_data.sku or generate_sku(item_data.category.value)
        await ensure_unique_sku(self.items, sku)

        values = item_data.model_dump(exclude={"sku", "location", "images"})
        values.update(item_data.location.model_dump())
        values["images"] = [image.model_dump(mode="json") for image in item_data.images]
        values["sku"] = sku

        item = await self.items.insert(InventoryItem(**values))
        logger.info(f"Created inventory item {item.id} with SKU {item.sku}")
        return await self._with_supplier(item)

    async def update_inventory_item(self, item_id: uuid.UUID, update_data: InventoryUpdate) -> InventoryResponse:
        item = await self._get_or_raise(item_id)

        values = update_data.model_dump(exclude_unset=True, exclude={"location", "images"})
        values = {key: value for key, value in values.items() if value is not None or key in CLEARABLE_FIELDS}
        if values.get("sku") is not None and values["sku"] != item.sku:
            await ensure_unique_sku(self.items, values["sku"], exclude_id=item_id)
        if values.get("supplier_id") is not None and values["supplier_id"] != item.supplier_id:
            await self._ensure_supplier_exists(values["supplier_id"])
        if update_data.location is not None:
            values.update(update_data.location.model_dump())
        if update_data.images is not None:
            values["images"] = [image.model_dump(mode="json") for image in update_data.images]

        item = await self.items.update_by_id(item_id, values)
        logger.info(f"Updated inventory item {item_id}: {sorted(values)}")
        return await self._with_supplier(item)

    async def update_stock(self, item_id: uuid.UUID, stock_data: StockUpdate) -> InventoryResponse:
        """Set the stock level, and optionally the thresholds, of an item."""
        await self._get_or_raise(item_id)

        values = {"current_stock": stock_data.current_stock}
        if stock_data.minimum_stock is not None:
            values["minimum_stock"] = stock_data.minimum_stock
        if stock_data.maximum_stock is not None:
            values["maximum_stock"] = stock_data.maximum_stock

        item = await self.items.update_by_id(item_id, values)
        logger.info(f"Stock of inventory item {item_id} set to {item.current_stock}")
        return await self._with_supplier(item)

    async def deactivate_inventory_item(self, item_id: uuid.UUID) -> InventoryResponse:
        return await self._set_active(item_id, False)

    async def restore_inventory_item(self, item_id: uuid.UUID) -> InventoryResponse:
        return await self._set_active(item_id, True)

    async def get_stats(self) -> InventoryStatsResponse:
        active = InventoryItem.is_active == True

        total_items = await self.items.count(active)
        in_stock = await self.items.count(active, InventoryItem.current_stock > 0)
        out_of_stock = await self.items.count(active, InventoryItem.current_stock <= 0)
        low_stock = await self.items.count(active, low_stock_criterion(InventoryItem))
        (total_value,) = await self.items.aggregate(
            func.coalesce(func.sum(InventoryItem.current_stock * InventoryItem.cost_price), 0.0),
            where=(active,)
        )
        categories = await self.items.group_count(InventoryItem.category, active, limit=TOP_CATEGORIES)

        return InventoryStatsResponse(
            total_items=total_items,
            active_items=in_stock,
            out_of_stock=out_of_stock,
            low_stock=low_stock,
            total_value=round(float(total_value), 2),
            categories=[CountByKey(key=count_key(key), count=count) for key, count in categories]
        )

    async def _set_active(self, item_id: uuid.UUID, is_active: bool) -> InventoryResponse:
        await self._get_or_raise(item_id)
        item = await self.items.update_by_id(item_id, {"is_active": is_active})
        logger.info(f"Inventory item {item_id} {'restored' if is_active else 'deactivated'}")
        return await self._with_supplier(item)

    async def _get_or_raise(self, item_id: uuid.UUID) -> InventoryItem:
        item = await self.items.find_by_id(item_id)
        if item is None:
            raise NotFoundError("Inventory item not found", details={"inventory_id": str(item_id)})
        return item

    async def _ensure_supplier_exists(self, supplier_id: uuid.UUID):
        if await self.suppliers.find_by_id(supplier_id) is None:
            raise NotFoundError("Supplier not found", details={"supplier_id": str(supplier_id)})

    async def _with_supplier(self, item: InventoryItem) -> InventoryResponse:
        suppliers = await supplier_summaries(self.suppliers, [item.supplier_id])
        return self._item_to_response(item, suppliers.get(item.supplier_id))

    def _item_to_response(self, item: InventoryItem, supplier: Optional[SupplierSummary] = None) -> InventoryResponse:
        """Convert an inventory row to its response, deriving status and margin."""
        return InventoryResponse(
            id=item.id,
            name=item.name,
            sku=item.sku,
            category=item.category,
            subcategory=item.subcategory,
            description=item.description,
            unit=item.unit,
            current_stock=item.current_stock,
            minimum_stock=item.minimum_stock,
            maximum_stock=item.maximum_stock,
            cost_price=item.cost_price,
            selling_price=item.selling_price,
            supplier_id=item.supplier_id,
            supplier=supplier,
            location=StorageLocation(warehouse=item.warehouse, shelf=item.shelf, bin=item.bin),
            expiry_date=item.expiry_date,
            batch_number=item.batch_number,
            tags=item.tags or [],
            images=item.images or [],
            notes=item.notes,
            is_active=item.is_active,
            stock_status=calculate_stock_status(item.current_stock, item.minimum_stock, item.maximum_stock),
            profit_margin=calculate_profit_margin(item.cost_price, item.selling_price),
            created_at=item.created_at,
            updated_at=item.updated_at
        )
