from typing import Any, List, Optional, Sequence
import logging

from shared.exceptions import ValidationError

logger = logging.getLogger(__name__)


def _quantity(tier: Any):
    return tier["quantity"] if isinstance(tier, dict) else tier.quantity


def validate_bulk_pricing(tiers: Optional[Sequence[Any]]) -> List[Any]:
    """Return the tiers sorted by quantity, rejecting repeated quantities.

    The sorted list replaces whatever order the caller submitted; stored
    tiers are always in ascending quantity order.
    """
    if not tiers:
        return []

    ordered = sorted(tiers, key=_quantity)
    for previous, current in zip(ordered, ordered[1:]):
        if _quantity(current) <= _quantity(previous):
            logger.info(f"Rejected bulk pricing with repeated quantity {_quantity(current)}")
            raise ValidationError(
                "Bulk pricing quantities must be in ascending order and unique",
                field="bulk_pricing",
                details={"quantity": _quantity(current)}
            )
    return ordered
