from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging
import uuid

from app.core.config import get_settings
from app.core.database import get_db
from app.schemas.inventory import (
    InventoryCreate, InventoryResponse, InventoryStatsResponse, InventoryUpdate,
    PaginatedInventoryResponse, StockUpdate
)
from app.services.inventory_service import InventoryService
from shared.exceptions import PlatformException
from shared.models import InventoryCategory, StockStatus
from shared.security.auth import get_current_admin_user, get_current_user

router = APIRouter()
logger = logging.getLogger(__name__)
settings = get_settings()


@router.get("/", response_model=PaginatedInventoryResponse)
async def list_inventory(
    search: Optional[str] = Query(None, description="Search name, SKU or description"),
    category: Optional[InventoryCategory] = Query(None, description="Filter by category"),
    supplier_id: Optional[uuid.UUID] = Query(None, description="Filter by supplier"),
    stock_status: Optional[StockStatus] = Query(None, description="Filter by derived stock status"),
    is_active: bool = Query(True, description="Filter by active flag"),
    include_inactive: bool = Query(False, description="Return active and inactive items"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List inventory items; only active items unless asked otherwise."""
    try:
        service = InventoryService(db)
        return await service.list_inventory(
            search=search,
            category=category,
            supplier_id=supplier_id,
            stock_status=stock_status,
            is_active=is_active,
            include_inactive=include_inactive,
            page=page,
            size=size
        )
    except PlatformException:
        raise
    except Exception as e:
        logger.error(f"Failed to list inventory: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list inventory"
        )


@router.get("/stats/overview", response_model=InventoryStatsResponse)
async def get_inventory_stats(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = InventoryService(db)
    return await service.get_stats()


@router.get("/{item_id}", response_model=InventoryResponse)
async def get_inventory_item(
    item_id: uuid.UUID,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = InventoryService(db)
    return await service.get_inventory_item(item_id)


@router.post("/", response_model=InventoryResponse, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    item_data: InventoryCreate,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create an inventory item (admin only).

    When no SKU is given one is generated from the category; either way the
    SKU must not be used by any other item, active or not.
    """
    try:
        service = InventoryService(db)
        return await service.create_inventory_item(item_data)
    except PlatformException:
        raise
    except Exception as e:
        logger.error(f"Failed to create inventory item: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create inventory item"
        )


@router.put("/{item_id}", response_model=InventoryResponse)
async def update_inventory_item(
    item_id: uuid.UUID,
    update_data: InventoryUpdate,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        service = InventoryService(db)
        return await service.update_inventory_item(item_id, update_data)
    except PlatformException:
        raise
    except Exception as e:
        logger.error(f"Failed to update inventory item {item_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update inventory item"
        )


@router.patch("/{item_id}/stock", response_model=InventoryResponse)
async def update_stock(
    item_id: uuid.UUID,
    stock_data: StockUpdate,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    """Set the stock level of an item, optionally with new thresholds."""
    service = InventoryService(db)
    return await service.update_stock(item_id, stock_data)


@router.delete("/{item_id}", response_model=InventoryResponse)
async def deactivate_inventory_item(
    item_id: uuid.UUID,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    service = InventoryService(db)
    return await service.deactivate_inventory_item(item_id)


@router.patch("/{item_id}/restore", response_model=InventoryResponse)
async def restore_inventory_item(
    item_id: uuid.UUID,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    service = InventoryService(db)
    return await service.restore_inventory_item(item_id)
