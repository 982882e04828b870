"""Test configuration and fixtures"""

import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from uuid import uuid4

from app.main import app
from app.database import Base, get_db
from app.models.tenant import Restaurant, Table
from app.models.user import User, UserRole, RestaurantUser, RestaurantRole
from app.models.menu import Category, Product
from app.models.stock import Stock
from app.models.subscription import Subscription
from app.api.auth import get_password_hash, create_access_token


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_restaurant(test_db):
    """Create a test restaurant"""
    restaurant = Restaurant(
        id=uuid4(),
        name="Chez Test",
        slug="chez-test",
        city="Libreville",
        currency="XAF",
        is_active=True,
    )
    test_db.add(restaurant)
    await test_db.commit()

    return restaurant


@pytest.fixture
async def test_subscription(test_db, test_restaurant):
    """Starter trial ending in ten days"""
    now = datetime.utcnow()
    subscription = Subscription(
        restaurant_id=test_restaurant.id,
        plan="starter",
        status="trial",
        billing_cycle=1,
        base_price=3000,
        trial_starts_at=now - timedelta(days=4),
        trial_ends_at=now + timedelta(days=10),
        current_period_start=now - timedelta(days=4),
        current_period_end=now + timedelta(days=10),
    )
    test_db.add(subscription)
    await test_db.commit()

    return subscription


@pytest.fixture
async def business_subscription(test_db, test_subscription):
    """Switch the test restaurant to an active business subscription"""
    test_subscription.plan = "business"
    test_subscription.status = "active"
    await test_db.commit()

    return test_subscription


@pytest.fixture
async def test_user(test_db, test_restaurant, test_subscription):
    """Create a test user, admin of the test restaurant"""
    user = User(
        id=uuid4(),
        email="owner@example.com",
        hashed_password=get_password_hash("testpass123"),
        full_name="Test Owner",
        role=UserRole.MEMBER,
        is_active=True,
    )
    test_db.add(user)
    await test_db.flush()

    test_db.add(RestaurantUser(
        user_id=user.id,
        restaurant_id=test_restaurant.id,
        role=RestaurantRole.ADMIN,
    ))
    await test_db.commit()

    return user


@pytest.fixture
async def test_cashier(test_db, test_restaurant):
    """Create a cashier of the test restaurant"""
    user = User(
        id=uuid4(),
        email="cashier@example.com",
        hashed_password=get_password_hash("cashierpass123"),
        full_name="Test Cashier",
        role=UserRole.MEMBER,
        is_active=True,
    )
    test_db.add(user)
    await test_db.flush()

    test_db.add(RestaurantUser(
        user_id=user.id,
        restaurant_id=test_restaurant.id,
        role=RestaurantRole.CASHIER,
    ))
    await test_db.commit()

    return user


@pytest.fixture
async def test_admin_user(test_db):
    """Create a super admin user"""
    user = User(
        id=uuid4(),
        email="admin@example.com",
        hashed_password=get_password_hash("adminpass123"),
        full_name="Admin User",
        role=UserRole.SUPER_ADMIN,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def test_category(test_db, test_restaurant):
    category = Category(restaurant_id=test_restaurant.id, name="Plats", display_order=0)
    test_db.add(category)
    await test_db.commit()

    return category


@pytest.fixture
async def test_products(test_db, test_restaurant, test_category):
    """Two stocked products and one untracked product"""
    products = [
        Product(
            restaurant_id=test_restaurant.id,
            category_id=test_category.id,
            name="Poulet DG",
            price=5000,
            has_stock=True,
        ),
        Product(
            restaurant_id=test_restaurant.id,
            category_id=test_category.id,
            name="Jus de bissap",
            price=1000,
            has_stock=True,
        ),
        Product(
            restaurant_id=test_restaurant.id,
            name="Café",
            price=500,
            has_stock=False,
        ),
    ]

    for product in products:
        test_db.add(product)
    await test_db.flush()

    test_db.add(Stock(restaurant_id=test_restaurant.id, product_id=products[0].id, quantity=10, alert_threshold=5))
    test_db.add(Stock(restaurant_id=test_restaurant.id, product_id=products[1].id, quantity=3, alert_threshold=5))
    await test_db.commit()

    return products


@pytest.fixture
async def test_tables(test_db, test_restaurant):
    tables = [
        Table(restaurant_id=test_restaurant.id, number=1, label="Terrasse 1", capacity=4),
        Table(restaurant_id=test_restaurant.id, number=2, capacity=2),
    ]
    for table in tables:
        test_db.add(table)
    await test_db.commit()

    return tables


@pytest.fixture
async def client(test_db):
    """Create test client with overridden database"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def owner_headers(test_user):
    return auth_headers(test_user)


@pytest.fixture
def cashier_headers(test_cashier):
    return auth_headers(test_cashier)


@pytest.fixture
def admin_headers(test_admin_user):
    return auth_headers(test_admin_user)


@pytest.fixture
async def authenticated_client(client, test_user):
    """Create authenticated test client"""
    client.headers.update(auth_headers(test_user))

    return client


@pytest.fixture
async def admin_client(client, test_admin_user):
    """Create admin authenticated test client"""
    client.headers.update(auth_headers(test_admin_user))

    return client
