import pytest
from httpx import AsyncClient


class TestSuppliersAPI:
    """Test cases for Suppliers API endpoints."""

    @pytest.fixture
    async def supplier(self, client: AsyncClient, admin_headers, sample_supplier_data):
        response = await client.post("/api/suppliers/", json=sample_supplier_data, headers=admin_headers)
        assert response.status_code == 201
        return response.json()

    async def test_create_supplier(self, supplier):
        assert supplier["name"] == "Green Valley Seeds"
        assert supplier["email"] == "sales@greenvalley.com"
        assert supplier["tax_id"] == "94-1234567"
        assert supplier["address"]["country"] == "USA"

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get("/api/suppliers/")

        assert response.status_code == 401
        assert response.json()["error"] == "AUTH_ERROR"

    async def test_writes_require_admin(self, client: AsyncClient, user_headers, sample_supplier_data):
        response = await client.post("/api/suppliers/", json=sample_supplier_data, headers=user_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Admin access required"

    async def test_invalid_email(self, client: AsyncClient, admin_headers, sample_supplier_data):
        data = dict(sample_supplier_data, email="not-an-email")

        response = await client.post("/api/suppliers/", json=data, headers=admin_headers)

        assert response.status_code == 422

    async def test_duplicate_email(self, client: AsyncClient, admin_headers, supplier, sample_supplier_data):
        response = await client.post("/api/suppliers/", json=sample_supplier_data, headers=admin_headers)

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "DUPLICATE_ERROR"
        assert body["message"] == "Supplier with this email already exists"

    async def test_public_profile_hides_financials(self, client: AsyncClient, user_headers, supplier):
        response = await client.get(f"/api/suppliers/{supplier['id']}", headers=user_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Green Valley Seeds"
        assert "tax_id" not in data
        assert "credit_limit" not in data

    async def test_admin_sees_financials(self, client: AsyncClient, admin_headers, supplier):
        response = await client.get(f"/api/suppliers/{supplier['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["credit_limit"] == 25000.0

    async def test_get_missing_supplier(self, client: AsyncClient, user_headers):
        response = await client.get("/api/suppliers/00000000-0000-0000-0000-000000000000", headers=user_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Supplier not found"

    async def test_deactivate_and_restore(self, client: AsyncClient, admin_headers, user_headers, supplier):
        """A deactivated supplier leaves the active list and comes back once restored."""
        async def active_ids():
            response = await client.get("/api/suppliers/", params={"is_active": True}, headers=user_headers)
            assert response.status_code == 200
            return [item["id"] for item in response.json()["items"]]

        assert supplier["id"] in await active_ids()

        response = await client.delete(f"/api/suppliers/{supplier['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert supplier["id"] not in await active_ids()

        response = await client.patch(f"/api/suppliers/{supplier['id']}/restore", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["is_active"] is True
        assert supplier["id"] in await active_ids()

    async def test_search_and_pagination(self, client: AsyncClient, admin_headers, user_headers, supplier,
                                         sample_supplier_data):
        await client.post(
            "/api/suppliers/",
            json=dict(sample_supplier_data, name="Prairie Fertilizer Co", email="hello@prairie.com"),
            headers=admin_headers
        )

        response = await client.get("/api/suppliers/", params={"search": "prairie"}, headers=user_headers)
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["name"] == "Prairie Fertilizer Co"

        response = await client.get("/api/suppliers/", params={"size": 1, "page": 2}, headers=user_headers)
        data = response.json()
        assert data["total"] == 2
        assert data["pages"] == 2
        assert len(data["items"]) == 1

    async def test_list_all_sorted_by_name(self, client: AsyncClient, admin_headers, user_headers, supplier,
                                          sample_supplier_data):
        for index, name in enumerate(["Acorn Agri", "Meadow Tools", "Bluestem Feed"]):
            await client.post(
                "/api/suppliers/",
                json=dict(sample_supplier_data, name=name, email=f"contact{index}@example.com"),
                headers=admin_headers
            )

        response = await client.get("/api/suppliers/", params={"all": True, "size": 2}, headers=user_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 4
        assert data["pages"] == 1
        assert [item["name"] for item in data["items"]] == [
            "Acorn Agri", "Bluestem Feed", "Green Valley Seeds", "Meadow Tools"
        ]

    async def test_update_supplier(self, client: AsyncClient, admin_headers, supplier):
        response = await client.put(
            f"/api/suppliers/{supplier['id']}",
            json={"rating": 5, "address": {"street": "77 Mill Lane", "city": "Modesto", "state": "California",
                                           "zip_code": "95350"}},
            headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["rating"] == 5
        assert data["address"]["city"] == "Modesto"
        assert data["name"] == "Green Valley Seeds"

    async def test_stats(self, client: AsyncClient, user_headers, supplier):
        response = await client.get("/api/suppliers/stats/overview", headers=user_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["overview"] == {"total": 1, "active": 1, "inactive": 0}
        assert data["business_types"] == [{"key": "Seed Supplier", "count": 1}]
