"""
Test Configuration and Fixtures
Shared testing infrastructure for the inventory ledger
"""

import itertools
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Dict, Generator

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from backoffice.core.config import Settings
from backoffice.core.database import Base, Database
from backoffice.core.security import Actor
from backoffice.main import create_app
from backoffice.models import Product, StockLog, StockTransaction, Store, User


@pytest.fixture
def settings(tmp_path) -> Settings:
    """File-backed SQLite so concurrent threads see one shared database"""
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test_backoffice.db'}",
        SECRET_KEY="test-secret-key",
        LOCK_TIMEOUT_MS=30000,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def database(settings: Settings) -> Generator[Database, None, None]:
    """Create a fresh database for each test"""
    database = Database(settings)
    database.create_all()
    try:
        yield database
    finally:
        Base.metadata.drop_all(bind=database.engine)
        database.dispose()


@pytest.fixture
def staff_user(database: Database) -> User:
    with database.unit_of_work() as db:
        user = User(username="staff", full_name="Staff User", role="STAFF")
        db.add(user)
    return user


@pytest.fixture
def actor(staff_user: User) -> Actor:
    return Actor(id=staff_user.id, role=staff_user.role, username=staff_user.username)


@pytest.fixture
def store(database: Database) -> Store:
    with database.unit_of_work() as db:
        store = Store(code="ST01", name="Downtown Store", address="1 Main Street")
        db.add(store)
    return store


@pytest.fixture
def make_product(database: Database) -> Callable[..., Product]:
    """Factory standing in for the catalog: inserts a product row directly"""
    counter = itertools.count(1)

    def _make(stock: int = 10, status: str = "ACTIVE", price: str = "9.99") -> Product:
        n = next(counter)
        with database.unit_of_work() as db:
            product = Product(
                sku=f"SKU-{n:04d}",
                name=f"Test Product {n}",
                price=Decimal(price),
                cost=Decimal("5.00"),
                stock=stock,
                status=status,
            )
            db.add(product)
        return product

    return _make


@pytest.fixture
def product(make_product) -> Product:
    """Active product with 10 units on hand"""
    return make_product(stock=10)


@pytest.fixture
def client(settings: Settings, database: Database) -> Generator[TestClient, None, None]:
    """Test client bound to the per-test database"""
    app = create_app(settings, database)
    with TestClient(app) as test_client:
        yield test_client


def make_token(settings: Settings, user_id: int, role: str = "STAFF", **claims) -> str:
    payload = {
        "user_id": user_id,
        "username": "staff",
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    payload.update(claims)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


@pytest.fixture
def auth_headers(settings: Settings, staff_user: User) -> Dict[str, str]:
    """Bearer header for the staff user"""
    return {"Authorization": f"Bearer {make_token(settings, staff_user.id)}"}


class DatabaseTestHelper:
    """Helper class for database reads in tests"""

    @staticmethod
    def stock_of(database: Database, product_id: int) -> int:
        with database.session() as db:
            return db.get(Product, product_id).stock

    @staticmethod
    def logs_for(database: Database, product_id: int) -> list:
        with database.session() as db:
            return (
                db.query(StockLog)
                .filter(StockLog.product_id == product_id)
                .order_by(StockLog.id)
                .all()
            )

    @staticmethod
    def count_records(database: Database, model_class) -> int:
        with database.session() as db:
            return db.query(model_class).count()

    @staticmethod
    def count_transactions(database: Database) -> int:
        return DatabaseTestHelper.count_records(database, StockTransaction)


@pytest.fixture
def db_helper() -> type:
    return DatabaseTestHelper


@pytest.fixture
def token_factory(settings: Settings) -> Callable[..., str]:
    def _token(user_id: int, **claims) -> str:
        return make_token(settings, user_id, **claims)
    return _token
