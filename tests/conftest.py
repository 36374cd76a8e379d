import pytest
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession
from httpx import AsyncClient, ASGITransport

from app.core.database import Database
from main import app

# In-memory store, rebuilt for every test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Create a fresh test database."""
    database = Database(TEST_DATABASE_URL)
    await database.connect()
    yield database
    await database.drop_all()
    await database.close()


@pytest.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with database.session() as session:
        yield session


@pytest.fixture
async def client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client bound to the test database."""
    app.state.database = database
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers():
    """Gateway headers for an admin caller."""
    return {
        "X-User-ID": "550e8400-e29b-41d4-a716-446655440003",
        "X-User-Role": "admin"
    }


@pytest.fixture
def user_headers():
    """Gateway headers for a regular caller."""
    return {
        "X-User-ID": "550e8400-e29b-41d4-a716-446655440000",
        "X-User-Role": "user"
    }


@pytest.fixture
def sample_supplier_data():
    """Sample supplier data for testing."""
    return {
        "name": "Green Valley Seeds",
        "contact_person": "Maria Lopez",
        "email": "sales@greenvalley.com",
        "phone": "555-123-4567",
        "address": {
            "street": "1200 Orchard Road",
            "city": "Fresno",
            "state": "California",
            "zip_code": "93701"
        },
        "business_type": "Seed Supplier",
        "payment_terms": "Net 30",
        "tax_id": "94-1234567",
        "credit_limit": 25000.0,
        "rating": 4,
        "tags": ["organic", "vegetables"]
    }


@pytest.fixture
def sample_inventory_data():
    """Sample inventory data for testing."""
    return {
        "name": "Tomato Seeds",
        "category": "Seeds",
        "unit": "kg",
        "current_stock": 5,
        "minimum_stock": 10,
        "cost_price": 2,
        "selling_price": 3,
        "location": {"warehouse": "North Barn", "shelf": "A2"}
    }


@pytest.fixture
def sample_pricing_data():
    """Sample pricing data for testing; supplier and inventory ids are filled in by the tests."""
    return {
        "cost_price": 2.0,
        "selling_price": 3.0,
        "currency": "USD",
        "bulk_pricing": [
            {"quantity": 100, "price": 1.8},
            {"quantity": 50, "price": 1.9, "discount": 5}
        ],
        "minimum_order_quantity": 10,
        "lead_time": 7
    }
