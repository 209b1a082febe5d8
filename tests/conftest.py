"""Test config and shared fixtures."""
import os
import tempfile

# Settings are read at import time, so configure the environment first
_IMAGE_ROOT = tempfile.mkdtemp(prefix="inventory-images-")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("JWT_ISSUER", "inventory-api-tests")
os.environ.setdefault("JWT_AUDIENCE", "inventory-api-clients")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "30")
os.environ.setdefault("IMAGE_ROOT", _IMAGE_ROOT)
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "inventory-api-test-logs"))

import pytest
from decimal import Decimal
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from main import app
from framework.database.manager import get_db
from framework.security import CurrentUser, get_current_user, get_password_hash
from apps.unit_of_work import InventoryUnitOfWork
from apps.auth.models import User
from apps.catalog.images import ImageStorage
from apps.catalog.models import Category, Product


# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "Secret123"


@pytest.fixture
def test_user() -> CurrentUser:
    """Create test user context."""
    return CurrentUser(id=1, username="test_user", email="test_user@example.com")


@pytest.fixture(scope="function")
async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Create async test database session over a fresh schema."""
    import apps.models  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async_session_maker = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def uow(async_session: AsyncSession) -> InventoryUnitOfWork:
    """UnitOfWork over the test session."""
    return InventoryUnitOfWork(session=async_session)


@pytest.fixture
def image_storage(tmp_path) -> ImageStorage:
    """Image storage rooted in a per-test directory."""
    return ImageStorage(root=str(tmp_path / "images"), base_url="/images/", max_bytes=1024 * 1024)


async def _client(async_session: AsyncSession, current_user=None) -> AsyncClient:
    async def _get_db():
        yield async_session

    app.dependency_overrides[get_db] = _get_db
    if current_user is not None:
        app.dependency_overrides[get_current_user] = lambda: current_user

    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
async def client(async_session: AsyncSession, test_user: CurrentUser) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the database and current user overridden."""
    async with await _client(async_session, test_user) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def anon_client(async_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Test client with real bearer-token authentication."""
    async with await _client(async_session) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def sample_user(async_session: AsyncSession) -> User:
    """Create sample user with password TEST_PASSWORD."""
    user = User(
        username="alice",
        email="alice@example.com",
        hashed_password=get_password_hash(TEST_PASSWORD),
    )
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


@pytest.fixture
async def sample_category(async_session: AsyncSession) -> Category:
    """Create sample category."""
    category = Category(name="Electronics", description="Devices and gadgets")
    async_session.add(category)
    await async_session.commit()
    await async_session.refresh(category)
    return category


@pytest.fixture
async def sample_products(async_session: AsyncSession, sample_category: Category) -> list:
    """Create a few products in the sample category."""
    products = [
        Product(name="Wireless Mouse", description="Ergonomic USB mouse", price=Decimal("25.50"),
                stock=10, category_id=sample_category.id),
        Product(name="Mechanical Keyboard", description="RGB backlit keys", price=Decimal("89.99"),
                stock=5, category_id=sample_category.id),
        Product(name="USB-C Cable", description=None, price=Decimal("9.99"),
                stock=100, category_id=sample_category.id),
    ]
    for product in products:
        async_session.add(product)
    await async_session.commit()
    for product in products:
        await async_session.refresh(product)
    return products
