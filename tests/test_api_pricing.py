import pytest
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient


class TestPricingAPI:
    """Test cases for Pricing API endpoints."""

    @pytest.fixture
    async def supplier(self, client: AsyncClient, admin_headers, sample_supplier_data):
        response = await client.post("/api/suppliers/", json=sample_supplier_data, headers=admin_headers)
        return response.json()

    @pytest.fixture
    async def item(self, client: AsyncClient, admin_headers, sample_inventory_data):
        response = await client.post("/api/inventory/", json=sample_inventory_data, headers=admin_headers)
        return response.json()

    @pytest.fixture
    def pricing_payload(self, supplier, item, sample_pricing_data):
        return dict(sample_pricing_data, supplier_id=supplier["id"], inventory_id=item["id"])

    @pytest.fixture
    async def pricing(self, client: AsyncClient, admin_headers, pricing_payload):
        response = await client.post("/api/pricing/", json=pricing_payload, headers=admin_headers)
        assert response.status_code == 201
        return response.json()

    async def test_create_pricing(self, pricing):
        assert [tier["quantity"] for tier in pricing["bulk_pricing"]] == [50, 100]
        assert pricing["profit_margin"] == 50.0
        assert pricing["is_active"] is True
        assert pricing["is_effective"] is True
        assert pricing["supplier"]["name"] == "Green Valley Seeds"
        assert pricing["inventory"]["sku"].startswith("SEE-")

    async def test_repeated_tier_quantity(self, client: AsyncClient, admin_headers, pricing_payload):
        data = dict(pricing_payload, bulk_pricing=[{"quantity": 10, "price": 1.5}, {"quantity": 10, "price": 1.4}])

        response = await client.post("/api/pricing/", json=data, headers=admin_headers)

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert body["details"]["field"] == "bulk_pricing"

    async def test_duplicate_pairing_after_deactivation(self, client: AsyncClient, admin_headers, pricing,
                                                        pricing_payload):
        response = await client.delete(f"/api/pricing/{pricing['id']}", headers=admin_headers)
        assert response.status_code == 200

        response = await client.post("/api/pricing/", json=pricing_payload, headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["message"] == "Pricing for this supplier and inventory combination already exists"

    async def test_unknown_inventory(self, client: AsyncClient, admin_headers, pricing_payload):
        data = dict(pricing_payload, inventory_id="00000000-0000-0000-0000-000000000000")

        response = await client.post("/api/pricing/", json=data, headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Inventory item not found"

    async def test_list_filters(self, client: AsyncClient, user_headers, pricing):
        response = await client.get("/api/pricing/", params={"search": "tomato"}, headers=user_headers)
        assert response.json()["total"] == 1

        response = await client.get("/api/pricing/", params={"search": "green valley"}, headers=user_headers)
        assert response.json()["total"] == 1

        response = await client.get("/api/pricing/", params={"min_price": 5}, headers=user_headers)
        assert response.json()["total"] == 0

        response = await client.get("/api/pricing/", params={"currency": "EUR"}, headers=user_headers)
        assert response.json()["total"] == 0

    async def test_by_supplier_and_inventory(self, client: AsyncClient, user_headers, pricing, supplier, item):
        response = await client.get(f"/api/pricing/supplier/{supplier['id']}", headers=user_headers)
        assert [p["id"] for p in response.json()] == [pricing["id"]]

        response = await client.get(f"/api/pricing/inventory/{item['id']}", headers=user_headers)
        assert [p["id"] for p in response.json()] == [pricing["id"]]

    async def test_update_and_restore(self, client: AsyncClient, admin_headers, user_headers, pricing):
        response = await client.put(
            f"/api/pricing/{pricing['id']}", json={"selling_price": 4.0}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["profit_margin"] == 100.0

        await client.delete(f"/api/pricing/{pricing['id']}", headers=admin_headers)
        response = await client.get(f"/api/pricing/{pricing['id']}", headers=user_headers)
        assert response.json()["is_effective"] is False

        response = await client.patch(f"/api/pricing/{pricing['id']}/restore", headers=admin_headers)
        assert response.json()["is_active"] is True

    async def test_expiry_with_utc_offset(self, client: AsyncClient, admin_headers, pricing_payload):
        """An expiry date given in a non-UTC offset is stored as the same instant."""
        eastern = timezone(timedelta(hours=-5))
        expiry = (datetime.now(timezone.utc) + timedelta(hours=2)).astimezone(eastern)
        data = dict(pricing_payload, expiry_date=expiry.isoformat())

        response = await client.post("/api/pricing/", json=data, headers=admin_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["is_expired"] is False
        assert body["is_effective"] is True

    async def test_update_sorts_bulk_tiers(self, client: AsyncClient, admin_headers, pricing):
        tiers = [{"quantity": 10, "price": 1.9}, {"quantity": 5, "price": 1.95}, {"quantity": 20, "price": 1.8}]

        response = await client.put(
            f"/api/pricing/{pricing['id']}", json={"bulk_pricing": tiers}, headers=admin_headers
        )

        assert response.status_code == 200
        assert [tier["quantity"] for tier in response.json()["bulk_pricing"]] == [5, 10, 20]

    async def test_update_with_repeated_tier_quantity(self, client: AsyncClient, admin_headers, user_headers,
                                                      pricing):
        """A rejected update leaves the stored record unchanged."""
        data = {
            "cost_price": 9.0,
            "bulk_pricing": [{"quantity": 10, "price": 1.5}, {"quantity": 10, "price": 1.4}]
        }

        response = await client.put(f"/api/pricing/{pricing['id']}", json=data, headers=admin_headers)

        assert response.status_code == 422
        assert response.json()["details"]["field"] == "bulk_pricing"

        stored = (await client.get(f"/api/pricing/{pricing['id']}", headers=user_headers)).json()
        assert stored["cost_price"] == 2.0
        assert [tier["quantity"] for tier in stored["bulk_pricing"]] == [50, 100]

    async def test_stats_and_dashboard(self, client: AsyncClient, user_headers, pricing):
        response = await client.get("/api/pricing/stats/overview", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["overview"]["active"] == 1

        response = await client.get("/api/dashboard/overview", headers=user_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["suppliers"]["overview"]["total"] == 1
        assert data["inventory"]["total_items"] == 1
        assert data["pricing"]["currencies"] == [{"key": "USD", "count": 1}]


class TestServiceEndpoints:

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.json()["endpoints"]["suppliers"] == "/api/suppliers"
