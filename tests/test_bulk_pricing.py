import pytest

from app.schemas.pricing import BulkPricingTier
from app.services.bulk_pricing import validate_bulk_pricing
from shared.exceptions import ValidationError


class TestBulkPricingValidation:
    """Test cases for bulk pricing tier validation."""

    def test_tiers_are_sorted_by_quantity(self):
        tiers = [{"quantity": 10, "price": 9}, {"quantity": 5, "price": 9.5}, {"quantity": 20, "price": 8}]

        result = validate_bulk_pricing(tiers)

        assert [tier["quantity"] for tier in result] == [5, 10, 20]

    def test_repeated_quantity_is_rejected(self):
        tiers = [{"quantity": 10, "price": 9}, {"quantity": 10, "price": 8}]

        with pytest.raises(ValidationError) as exc_info:
            validate_bulk_pricing(tiers)

        assert exc_info.value.message == "Bulk pricing quantities must be in ascending order and unique"
        assert exc_info.value.details["field"] == "bulk_pricing"
        assert exc_info.value.details["quantity"] == 10

    def test_empty_or_missing_tiers(self):
        assert validate_bulk_pricing([]) == []
        assert validate_bulk_pricing(None) == []

    def test_accepts_schema_tiers(self):
        tiers = [BulkPricingTier(quantity=50, price=1.9), BulkPricingTier(quantity=25, price=2.0)]

        result = validate_bulk_pricing(tiers)

        assert [tier.quantity for tier in result] == [25, 50]
