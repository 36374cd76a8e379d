from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.inventory import InventoryStatsResponse
from app.schemas.pricing import PricingStatsResponse
from app.schemas.supplier import SupplierStatsResponse
from app.services.inventory_service import InventoryService
from app.services.pricing_service import PricingService
from app.services.supplier_service import SupplierService
from shared.security.auth import get_current_user

router = APIRouter()


class DashboardOverview(BaseModel):
    suppliers: SupplierStatsResponse
    inventory: InventoryStatsResponse
    pricing: PricingStatsResponse


@router.get("/overview", response_model=DashboardOverview)
async def get_dashboard_overview(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Supplier, inventory and pricing statistics in one response."""
    return DashboardOverview(
        suppliers=await SupplierService(db).get_stats(),
        inventory=await InventoryService(db).get_stats(),
        pricing=await PricingService(db).get_stats()
    )
