"""
Derived fields shared by every read path.

These are plain functions over stored numbers. Response builders for single
records and for lists both call them, and the SQL form used for filtering
mirrors ``calculate_stock_status`` branch for branch.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import and_, case

from shared.models import StockStatus
from shared.utils import as_utc, utcnow

TWO_PLACES = Decimal("0.01")


def _has_maximum(maximum_stock: Optional[float]) -> bool:
    # Zero counts as "no maximum configured"
    return maximum_stock is not None and maximum_stock != 0


def calculate_stock_status(
    current_stock: float,
    minimum_stock: float,
    maximum_stock: Optional[float] = None
) -> StockStatus:
    """Classify stock: out-of-stock, then low-stock, then overstocked, else normal."""
    if current_stock <= 0:
        return StockStatus.OUT_OF_STOCK
    if current_stock <= (minimum_stock or 0):
        return StockStatus.LOW_STOCK
    if _has_maximum(maximum_stock) and current_stock >= maximum_stock:
        return StockStatus.OVERSTOCKED
    return StockStatus.NORMAL


def calculate_profit_margin(cost_price: float, selling_price: float) -> float:
    """Margin over cost as a percentage rounded to two places; 0 when cost is 0."""
    if not cost_price:
        return 0.0
    margin = (Decimal(str(selling_price)) - Decimal(str(cost_price))) / Decimal(str(cost_price)) * 100
    return float(margin.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def calculate_markup_percentage(cost_price: float, selling_price: float) -> float:
    """Same figure as the profit margin, exposed under the pricing name."""
    return calculate_profit_margin(cost_price, selling_price)


def stock_status_expression(model):
    """SQL CASE equivalent of ``calculate_stock_status`` for a mapped model."""
    has_maximum = and_(model.maximum_stock.isnot(None), model.maximum_stock != 0)
    return case(
        (model.current_stock <= 0, StockStatus.OUT_OF_STOCK.value),
        (model.current_stock <= model.minimum_stock, StockStatus.LOW_STOCK.value),
        (and_(has_maximum, model.current_stock >= model.maximum_stock), StockStatus.OVERSTOCKED.value),
        else_=StockStatus.NORMAL.value,
    )


def low_stock_criterion(model):
    """Items at or below their minimum; with non-negative minimums this includes empty items."""
    return model.current_stock <= model.minimum_stock


def is_pricing_expired(expiry_date: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if expiry_date is None:
        return False
    now = now or utcnow()
    return as_utc(now) > as_utc(expiry_date)


def is_pricing_effective(
    is_active: bool,
    effective_date: Optional[datetime],
    expiry_date: Optional[datetime],
    now: Optional[datetime] = None
) -> bool:
    """Active, already in effect and not past its expiry date."""
    now = now or utcnow()
    if not is_active:
        return False
    if effective_date is not None and as_utc(now) < as_utc(effective_date):
        return False
    return not is_pricing_expired(expiry_date, now)
