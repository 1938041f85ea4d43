"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator, Callable, Generator
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-labstore-unit-tests")
os.environ.setdefault("CART_CLEAR_PROCEDURE", "")
os.environ.setdefault("CREATE_SCHEMA_ON_STARTUP", "true")


@pytest.fixture(scope="session")
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache.

    Yields:
        Settings: Test configuration settings.
    """
    from src.core.config import get_settings

    get_settings.cache_clear()
    settings = get_settings()
    yield settings
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with every table created."""
    import src.models  # noqa: F401
    from src.core.database import Base

    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def unit_of_work_factory(session_factory: async_sessionmaker[AsyncSession]) -> Callable[[], Any]:
    """UnitOfWork factory bound to the test database."""
    from src.services.unit_of_work import UnitOfWork

    return lambda: UnitOfWork(session_factory, cart_clear_procedure="")


@pytest_asyncio.fixture
async def seeded_store(session_factory: async_sessionmaker[AsyncSession]) -> dict[str, Any]:
    """Customer 7 with product 42 (qty 2) in the cart, plus a small catalog."""
    from src.models import Cart, CartItem, Customer, Product

    async with session_factory() as session:
        session.add_all(
            [
                Customer(id=7, name="Ana Souza", email="ana@example.com"),
                Customer(id=8, name="Bruno Lima", email="bruno@example.com"),
                Product(id=42, name="Teclado Mecanico K2", price=Decimal("75.00"), stock=10),
                Product(id=43, name="Mouse Gamer X Pro", price=Decimal("120.00"), stock=5),
                Product(id=44, name="Monitor 24 polegadas", price=Decimal("899.90"), stock=3),
            ]
        )
        await session.flush()
        cart = Cart(id=1, customer_id=7)
        session.add(cart)
        await session.flush()
        session.add(CartItem(cart_id=1, product_id=42, quantity=2, price_when_added=Decimal("75.00")))
        session.add(Cart(id=2, customer_id=8))
        await session.commit()

    return {"customer_id": 7, "empty_cart_customer_id": 8}


@pytest.fixture
def mock_fulfillment_service() -> MagicMock:
    """Fulfillment service whose fulfill_order_paid is an AsyncMock."""
    from src.services.fulfillment_service import FulfillmentOutcome, FulfillmentResult

    service = MagicMock()
    service.fulfill_order_paid = AsyncMock(
        return_value=FulfillmentResult(outcome=FulfillmentOutcome.FULFILLED, order_id=1, line_item_count=1)
    )
    return service


@pytest.fixture
def mock_order_service() -> MagicMock:
    service = MagicMock()
    service.get_payment_status = AsyncMock(return_value=("pending", None))
    return service


@pytest.fixture
def client(
    mock_fulfillment_service: MagicMock,
    mock_order_service: MagicMock,
) -> Generator[TestClient, None, None]:
    """Provide a test client with the services replaced by mocks.

    Args:
        mock_fulfillment_service: Mocked fulfillment service fixture.
        mock_order_service: Mocked order service fixture.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.api.deps import get_fulfillment_service, get_order_service
    from src.main import app

    app.dependency_overrides[get_fulfillment_service] = lambda: mock_fulfillment_service
    app.dependency_overrides[get_order_service] = lambda: mock_order_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
