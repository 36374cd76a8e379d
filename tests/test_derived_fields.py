from datetime import datetime, timedelta, timezone

from app.services.derived_fields import (
    calculate_markup_percentage, calculate_profit_margin, calculate_stock_status,
    is_pricing_effective, is_pricing_expired
)
from shared.models import StockStatus


class TestStockStatus:
    """Test cases for stock status classification."""

    def test_empty_stock_is_out_of_stock(self):
        assert calculate_stock_status(0, 10) == StockStatus.OUT_OF_STOCK

    def test_out_of_stock_wins_when_minimum_is_zero(self):
        """Zero stock with a zero minimum is still out of stock, not low stock."""
        assert calculate_stock_status(0, 0) == StockStatus.OUT_OF_STOCK

    def test_at_or_below_minimum_is_low_stock(self):
        assert calculate_stock_status(5, 10) == StockStatus.LOW_STOCK
        assert calculate_stock_status(10, 10) == StockStatus.LOW_STOCK

    def test_low_stock_wins_over_overstocked(self):
        assert calculate_stock_status(5, 10, 5) == StockStatus.LOW_STOCK

    def test_at_or_above_maximum_is_overstocked(self):
        assert calculate_stock_status(100, 10, 100) == StockStatus.OVERSTOCKED
        assert calculate_stock_status(150, 10, 100) == StockStatus.OVERSTOCKED

    def test_zero_maximum_means_no_maximum(self):
        assert calculate_stock_status(500, 10, 0) == StockStatus.NORMAL

    def test_missing_maximum_is_normal(self):
        assert calculate_stock_status(50, 10) == StockStatus.NORMAL
        assert calculate_stock_status(50, 10, None) == StockStatus.NORMAL


class TestProfitMargin:
    """Test cases for profit margin and markup."""

    def test_zero_cost_gives_zero_margin(self):
        assert calculate_profit_margin(0, 150) == 0.0
        assert calculate_profit_margin(0, 0) == 0.0

    def test_margin_is_percentage_over_cost(self):
        assert calculate_profit_margin(100, 150) == 50.0

    def test_margin_is_rounded_to_two_places(self):
        assert calculate_profit_margin(3, 4) == 33.33
        assert calculate_profit_margin(3, 5) == 66.67

    def test_selling_below_cost_gives_negative_margin(self):
        assert calculate_profit_margin(10, 7.5) == -25.0

    def test_tomato_seeds_example(self):
        assert calculate_stock_status(5, 10) == StockStatus.LOW_STOCK
        assert calculate_profit_margin(2, 3) == 50.0

    def test_markup_matches_margin(self):
        assert calculate_markup_percentage(100, 150) == calculate_profit_margin(100, 150)
        assert calculate_markup_percentage(0, 10) == 0.0


class TestPricingDates:
    """Test cases for pricing expiry and effectiveness."""

    now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def test_no_expiry_never_expires(self):
        assert is_pricing_expired(None, self.now) is False

    def test_past_expiry_is_expired(self):
        assert is_pricing_expired(self.now - timedelta(days=1), self.now) is True
        assert is_pricing_expired(self.now + timedelta(days=1), self.now) is False

    def test_naive_dates_are_treated_as_utc(self):
        naive_past = datetime(2024, 5, 1, 12, 0)
        assert is_pricing_expired(naive_past, self.now) is True

    def test_effective_requires_active_started_and_unexpired(self):
        started = self.now - timedelta(days=10)
        assert is_pricing_effective(True, started, None, self.now) is True
        assert is_pricing_effective(False, started, None, self.now) is False
        assert is_pricing_effective(True, self.now + timedelta(days=1), None, self.now) is False
        assert is_pricing_effective(True, started, self.now - timedelta(days=1), self.now) is False
