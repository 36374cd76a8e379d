from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Union
import logging
import uuid

from app.core.config import get_settings
from app.core.database import get_db
from app.schemas.supplier import (
    SupplierCreate, SupplierDetailResponse, SupplierListResponse, SupplierResponse,
    SupplierStatsResponse, SupplierUpdate
)
from app.services.supplier_service import SupplierService
from shared.exceptions import PlatformException
from shared.models import BusinessType
from shared.security.auth import get_current_admin_user, get_current_user, is_admin

router = APIRouter()
logger = logging.getLogger(__name__)
settings = get_settings()


@router.get("/", response_model=SupplierListResponse)
async def list_suppliers(
    search: Optional[str] = Query(None, description="Search name, contact person or email"),
    business_type: Optional[BusinessType] = Query(None, description="Filter by business type"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    all_suppliers: bool = Query(False, alias="all", description="Return every supplier sorted by name, unpaginated"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List suppliers. Admins also see tax id, credit limit and balance."""
    try:
        service = SupplierService(db)
        return await service.list_suppliers(
            search=search,
            business_type=business_type,
            is_active=is_active,
            page=page,
            size=size,
            include_private=is_admin(current_user),
            paginate=not all_suppliers
        )
    except PlatformException:
        raise
    except Exception as e:
        logger.error(f"Failed to list suppliers: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list suppliers"
        )


@router.get("/stats/overview", response_model=SupplierStatsResponse)
async def get_supplier_stats(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = SupplierService(db)
    return await service.get_stats()


@router.get("/{supplier_id}", response_model=Union[SupplierDetailResponse, SupplierResponse])
async def get_supplier(
    supplier_id: uuid.UUID,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = SupplierService(db)
    return await service.get_supplier(supplier_id, include_private=is_admin(current_user))


@router.post("/", response_model=SupplierDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_supplier(
    supplier_data: SupplierCreate,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a supplier (admin only). The email must not belong to another supplier."""
    try:
        service = SupplierService(db)
        return await service.create_supplier(supplier_data)
    except PlatformException:
        raise
    except Exception as e:
        logger.error(f"Failed to create supplier: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create supplier"
        )


@router.put("/{supplier_id}", response_model=SupplierDetailResponse)
async def update_supplier(
    supplier_id: uuid.UUID,
    update_data: SupplierUpdate,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        service = SupplierService(db)
        return await service.update_supplier(supplier_id, update_data)
    except PlatformException:
        raise
    except Exception as e:
        logger.error(f"Failed to update supplier {supplier_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update supplier"
        )


@router.delete("/{supplier_id}", response_model=SupplierDetailResponse)
async def deactivate_supplier(
    supplier_id: uuid.UUID,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    """Deactivate a supplier. Records are never hard-deleted."""
    service = SupplierService(db)
    return await service.deactivate_supplier(supplier_id)


@router.patch("/{supplier_id}/restore", response_model=SupplierDetailResponse)
async def restore_supplier(
    supplier_id: uuid.UUID,
    current_user: dict = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    service = SupplierService(db)
    return await service.restore_supplier(supplier_id)
