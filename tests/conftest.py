"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finsignal_gateway.api.main import create_app
from finsignal_gateway.infrastructure.database.models import Base
from finsignal_gateway.infrastructure.database.session import get_db
from finsignal_gateway.domain.models import Transaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """Thirty days of daytime spending plus a monthly salary deposit"""
    base_time = datetime(2024, 3, 1, 12, 0)
    transactions = [
        Transaction(
            id="salary",
            amount=3000.0,
            timestamp=base_time,
            category="income",
        )
    ]

    for day in range(30):
        transactions.append(
            Transaction(
                id=f"spend_{day}",
                amount=-50.0 - (day % 5) * 10,
                timestamp=base_time + timedelta(days=day, hours=2),
                category="groceries",
            )
        )

    return transactions
