from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging
import uuid

from app.core.config import get_settings
from app.core.database import get_db
from app.schemas.pricing import (
    PaginatedPricingResponse, PricingCreate, PricingResponse, PricingStatsResponse, PricingUpdate
)
from app.services.pricing_service import PricingService
from shared.exceptions import PlatformException
from shared.models import Currency
from shared.security.auth import get_current_admin_user, get_current_user

router = APIRouter()
logger = logging.getLogger(__name__)
settings = get_settings()


@router.get("/", response_model=PaginatedPricingResponse)
async def list_pricing(
    search: Optional[str] = Query(None, description="Search supplier or inventory item name"),
    supplier_id: Optional[uuid.UUID] = Query(None, description="Filter by supplier"),
    inventory_id: Optional[uuid.UUID] = Query(None, description="Filter by inventory item"),
    is_active: bool = Query(True, description="Filter by active flag"),
    include_inactive: bool = Query(False, description="Return active and inactive pricing"),
    currency: Optional[Currency] = Query(None, description="Filter by currency"),
    min_price: Optional[float] = Query(None, ge=0, description="Minimum cost price"),
    max_price: Optional[float] = Query(None, ge=0, description="Maximum cost price"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        service = PricingService(db)
        return await service.list_pricing(
            search=search,
            supplier_id=supplier_id,
            inventory_id=inventory_id,
            is_active=is_active,
            include_inactive=include_inactive,
            currency=currency,
            min_price=min_price,
            max_price=max_price,
            page=page,
            size=size
        )
    except PlatformException:
        raise
    except Exception as e:
        logger.error(f"Failed to list pricing: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list pricing"
        )


@router.get("/stats/overview", response_model=PricingStatsResponse)
async def get_pricing_stats(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = PricingService(db)
    return await service.get_stats()


@router.get("/supplier/{supplier_id}", response_model=List[PricingResponse])
async def get_pricing_by_supplier(
    supplier_id: uuid.UUID,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Active pricing offered by one supplier, ordered by item name."""
    service = PricingService(db)
    return await service.get_pricing_by_supplier(supplier_id)


@router.get("/inventory/{inventory_id}", response_model=List[PricingResponse])
async def get_pricing_by_inventory(
    inventory_id: uuid.UUID,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Active supplier prices for one item, cheapest first."""
    service = PricingService(db)
    return await service.get_pricing_by_inventory(inventory_id)


@router.get("/{pricing_id}", response_model=PricingResponse)
async def get_pricing(
    pricing_id: uuid.UUID,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = PricingService(db)
    return await service.get_pricing(pricing_id)


@router.post("/", response_model=PricingResponse, status_code=status.HTTP_201_CREATED)
async def create_pricing(
    pricing_data: PricingCreate,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create pricing for a supplier and inventory item (admin only).

    Both must exist, the pair must not already be priced and bulk pricing
    quantities must be distinct.
    """
    try:
        service = PricingService(db)
        return await service.create_pricing(pricing_data)
    except PlatformException:
        raise
    except Exception as e:
        logger.error(f"Failed to create pricing: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create pricing"
        )


@router.put("/{pricing_id}", response_model=PricingResponse)
async def update_pricing(
    pricing_id: uuid.UUID,
    update_data: PricingUpdate,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        service = PricingService(db)
        return await service.update_pricing(pricing_id, update_data)
    except PlatformException:
        raise
    except Exception as e:
        logger.error(f"Failed to update pricing {pricing_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update pricing"
        )


@router.delete("/{pricing_id}", response_model=PricingResponse)
async def deactivate_pricing(
    pricing_id: uuid.UUID,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    service = PricingService(db)
    return await service.deactivate_pricing(pricing_id)


@router.patch("/{pricing_id}/restore", response_model=PricingResponse)
async def restore_pricing(
    pricing_id: uuid.UUID,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    service = PricingService(db)
    return await service.restore_pricing(pricing_id)
