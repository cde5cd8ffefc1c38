import uuid
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, get_db, get_engine
from app.models.product import Product


# Create test database (SQLite in-memory for testing)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependencies
app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_engine] = lambda: engine


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    # Create tables
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    # Drop tables after test
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create database session for direct database access in tests."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def add_products(db_session):
    """
    Insert products directly, since the API is read-only.

    Each argument is a dict of column values; name, category, price and
    stock get defaults when missing.
    """
    def _add(*rows):
        products = []
        for i, row in enumerate(rows):
            values = {
                "id": uuid.uuid4(),
                "name": f"Product {i}",
                "category": "General",
                "price": 10.0,
                "stock": 1,
            }
            values.update(row)
            products.append(Product(**values))
        db_session.add_all(products)
        db_session.commit()
        return products

    return _add


@pytest.fixture
def broken_db():
    """Swap the session for one whose every query fails."""
    session = MagicMock()
    session.query.side_effect = OperationalError(
        "SELECT", {}, Exception("connection refused")
    )
    app.dependency_overrides[get_db] = lambda: session

    yield session

    app.dependency_overrides[get_db] = override_get_db
