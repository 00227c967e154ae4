"""Integration tests for application startup against a fresh database"""

import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker
from finsignal_gateway.api.main import create_app
from finsignal_gateway.infrastructure.database import session as db_session


@pytest.fixture
def fresh_engine(tmp_path, monkeypatch):
    """Point the real get_db at an empty SQLite file with no tables"""
    engine = create_engine(f"sqlite:///{tmp_path / 'fresh.db'}", connect_args={"check_same_thread": False})
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=engine))
    yield engine
    engine.dispose()


def test_startup_creates_tables(fresh_engine):
    assert inspect(fresh_engine).get_table_names() == []

    with TestClient(create_app()):
        pass

    tables = set(inspect(fresh_engine).get_table_names())
    assert {"anomaly_detection", "liquidity_forecast", "ai_insight"} <= tables


def test_scan_persists_on_fresh_database(fresh_engine):
    base = datetime(2024, 4, 1, 12, 0)
    transactions = [
        {"id": f"tx_{i}", "amount": -100.0, "timestamp": (base + timedelta(days=i)).isoformat()}
        for i in range(20)
    ]
    transactions.append({"id": "wire", "amount": -25000.0, "timestamp": (base + timedelta(days=20)).isoformat()})

    with TestClient(create_app()) as client:
        response = client.post("/v1/anomalies/scan", json={"user_id": "acme", "transactions": transactions})
        assert response.status_code == 200
        assert response.json()["anomalies_detected"] >= 1

        history = client.get("/v1/anomalies/history?user_id=acme")
        assert history.status_code == 200
        assert "wire" in {a["transaction_id"] for a in history.json()["anomalies"]}
