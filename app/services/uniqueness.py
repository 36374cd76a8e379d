"""
Uniqueness checks run before a write is committed.

The lookups ignore ``is_active``: a deactivated record still owns its SKU,
email or supplier+inventory pair. Each check is a separate statement from the
write that follows it, so two racing requests can both pass; the unique
constraints on the tables reject the second commit, which the repository
reports as ``DuplicateError`` as well.
"""

from typing import Optional
import logging
import uuid

from app.core.repository import Repository
from app.models.inventory import InventoryItem
from app.models.pricing import Pricing
from app.models.supplier import Supplier
from shared.exceptions import DuplicateError

logger = logging.getLogger(__name__)


def _excluding(model, exclude_id: Optional[uuid.UUID]):
    return [model.id != exclude_id] if exclude_id is not None else []


async def ensure_unique_sku(
    repo: Repository[InventoryItem],
    sku: str,
    exclude_id: Optional[uuid.UUID] = None
) -> None:
    existing = await repo.find_one(InventoryItem.sku == sku, *_excluding(InventoryItem, exclude_id))
    if existing is not None:
        logger.info(f"SKU {sku} already used by inventory item {existing.id}")
        raise DuplicateError("SKU already exists", details={"sku": sku})


async def ensure_unique_supplier_email(
    repo: Repository[Supplier],
    email: str,
    exclude_id: Optional[uuid.UUID] = None
) -> None:
    existing = await repo.find_one(Supplier.email == email, *_excluding(Supplier, exclude_id))
    if existing is not None:
        raise DuplicateError("Supplier with this email already exists", details={"email": email})


async def ensure_unique_pairing(
    repo: Repository[Pricing],
    supplier_id: uuid.UUID,
    inventory_id: uuid.UUID,
    exclude_id: Optional[uuid.UUID] = None
) -> None:
    existing = await repo.find_one(
        Pricing.supplier_id == supplier_id,
        Pricing.inventory_id == inventory_id,
        *_excluding(Pricing, exclude_id)
    )
    if existing is not None:
        logger.info(f"Pricing {existing.id} already covers supplier {supplier_id} / item {inventory_id}")
        raise DuplicateError(
            "Pricing for this supplier and inventory combination already exists",
            details={"supplier_id": str(supplier_id), "inventory_id": str(inventory_id)}
        )
