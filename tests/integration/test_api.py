"""Integration tests for API endpoints"""

import httpx
import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient
from finsignal_gateway.api.dependencies import get_prompt_relay
from finsignal_gateway.config import settings
from finsignal_gateway.infrastructure.clients.llm import PromptRelay


def _tx(tx_id: str, amount: float, timestamp: datetime, category: str | None = None) -> dict:
    return {"id": tx_id, "amount": amount, "timestamp": timestamp.isoformat(), "category": category}


@pytest.fixture
def transactions_payload() -> list[dict]:
    """Twenty daytime purchases plus one very large wire"""
    base = datetime(2024, 4, 1, 12, 0)
    payload = [_tx(f"tx_{i}", -100.0, base + timedelta(days=i), "supplies") for i in range(20)]
    payload.append(_tx("wire", -25000.0, base + timedelta(days=20), "transfers"))
    return payload


@pytest.fixture
def zero_noise(monkeypatch):
    monkeypatch.setattr(settings, "forecast_noise", "none")
    monkeypatch.setattr(settings, "forecast_trend_factor", 1.0)


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "finsignal_analysis_total" in response.text


def test_outliers_endpoint(client: TestClient, transactions_payload: list[dict]):
    response = client.post("/v1/anomalies/outliers", json={"transactions": transactions_payload})

    assert response.status_code == 200
    anomalies = response.json()["anomalies"]
    assert len(anomalies) == 1
    assert anomalies[0]["transaction_id"] == "wire"
    assert anomalies[0]["anomaly_type"] == "statistical_outlier"
    assert anomalies[0]["status"] == "pending"


def test_outliers_empty_list_rejected(client: TestClient):
    """Empty list is a client error with an explicit reason"""
    response = client.post("/v1/anomalies/outliers", json={"transactions": []})

    assert response.status_code == 400
    assert "empty" in response.json()["detail"]


def test_outliers_malformed_body(client: TestClient):
    response = client.post("/v1/anomalies/outliers", json={"transactions": [{"id": "x"}]})
    assert response.status_code == 422


def test_temporal_endpoint_empty_list(client: TestClient):
    response = client.post("/v1/anomalies/temporal", json={"transactions": []})

    assert response.status_code == 200
    assert response.json() == {"anomalies": []}


def test_temporal_endpoint_velocity(client: TestClient):
    payload = [
        _tx("a", -800.0, datetime(2024, 4, 1, 15, 0)),
        _tx("b", -750.0, datetime(2024, 4, 1, 15, 3)),
    ]

    response = client.post("/v1/anomalies/temporal", json={"transactions": payload})

    assert response.status_code == 200
    anomalies = response.json()["anomalies"]
    assert len(anomalies) == 1
    assert anomalies[0]["anomaly_type"] == "velocity_anomaly"
    assert sorted(anomalies[0]["metadata"]["transaction_ids"]) == ["a", "b"]


def test_scan_persists_anomalies_and_insight(client: TestClient, transactions_payload: list[dict]):
    response = client.post(
        "/v1/anomalies/scan",
        json={"user_id": "acme", "transactions": transactions_payload},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_transactions_analyzed"] == 21
    assert data["anomalies_detected"] == len(data["anomalies"]) >= 1
    assert data["anomalies"][0]["transaction_id"] == "wire"
    assert data["insight"]["insight_type"] == "anomaly_detection"

    history = client.get("/v1/anomalies/history?user_id=acme")
    assert history.status_code == 200
    assert len(history.json()["anomalies"]) == data["anomalies_detected"]

    insights = client.get("/v1/insights?user_id=acme")
    assert insights.status_code == 200
    assert insights.json()["insights"][0]["insight_type"] == "anomaly_detection"


def test_scan_empty_list_rejected(client: TestClient):
    response = client.post("/v1/anomalies/scan", json={"user_id": "acme", "transactions": []})
    assert response.status_code == 400

    history = client.get("/v1/anomalies/history?user_id=acme")
    assert history.json()["anomalies"] == []


def test_liquidity_endpoint(client: TestClient, zero_noise):
    response = client.post(
        "/v1/forecast/liquidity",
        json={"current_balance": 1000.0, "daily_flows": [-100.0] * 10, "days": 7},
    )

    assert response.status_code == 200
    points = response.json()["points"]
    assert len(points) == 7
    assert points[6]["predicted_balance"] == pytest.approx(300.0)
    assert points[6]["confidence"] == 77
    assert points[6]["risk_level"] == "warning"


def test_liquidity_endpoint_seeded_noise_reproducible(client: TestClient):
    body = {"current_balance": 5000.0, "daily_flows": [-200.0, 150.0, -50.0, 90.0], "days": 5, "seed": 11}

    first = client.post("/v1/forecast/liquidity", json=body).json()
    second = client.post("/v1/forecast/liquidity", json=body).json()

    assert first == second


def test_liquidity_endpoint_insufficient_history(client: TestClient):
    response = client.post(
        "/v1/forecast/liquidity",
        json={"current_balance": 1000.0, "daily_flows": [-100.0]},
    )

    assert response.status_code == 422
    assert "Insufficient history" in response.json()["detail"]


def test_forecast_endpoint_persists(client: TestClient, zero_noise):
    base = datetime(2024, 4, 1, 12, 0)
    body = {
        "user_id": "acme",
        "accounts": [{"name": "operating", "balance": 1000.0}],
        "transactions": [_tx(f"t{i}", -300.0, base + timedelta(days=i)) for i in range(10)],
        "days": 5,
    }

    response = client.post("/v1/forecast", json=body)

    assert response.status_code == 200
    data = response.json()
    assert data["current_balance"] == 1000.0
    assert data["avg_daily_flow"] == pytest.approx(-300.0)
    assert data["summary"] == {
        "critical_days": 3,
        "warning_days": 1,
        "healthy_days": 1,
        "peak_risk_level": "critical",
    }
    assert data["insight"]["priority"] == "high"

    history = client.get("/v1/forecast/history?user_id=acme")
    assert history.status_code == 200
    stored = history.json()["forecasts"]
    assert len(stored) == 5
    assert {f["risk_level"] for f in stored} == {"healthy", "warning", "critical"}

    insights = client.get("/v1/insights?user_id=acme").json()["insights"]
    assert insights[0]["insight_type"] == "liquidity"


def test_forecast_endpoint_insufficient_history(client: TestClient):
    body = {
        "user_id": "acme",
        "accounts": [{"name": "operating", "balance": 1000.0}],
        "transactions": [_tx("t0", -10.0, datetime(2024, 4, 1, 12, 0))],
    }

    response = client.post("/v1/forecast", json=body)

    assert response.status_code == 422


def _override_relay(client: TestClient, handler) -> None:
    relay = PromptRelay(
        gateway_url="https://llm.test/v1/chat/completions",
        api_key="test-key",
        backoff_base=0.0,
        transport=httpx.MockTransport(handler),
    )
    client.app.dependency_overrides[get_prompt_relay] = lambda: relay


def test_assistant_endpoint(client: TestClient):
    _override_relay(
        client,
        lambda request: httpx.Response(
            200, json={"choices": [{"message": {"content": "Two payments look duplicated."}}]}
        ),
    )

    response = client.post("/v1/assistant/anomaly_explain", json={"prompt": "Explain these anomalies"})

    assert response.status_code == 200
    assert response.json() == {"task": "anomaly_explain", "content": "Two payments look duplicated."}


def test_assistant_unknown_task(client: TestClient):
    response = client.post("/v1/assistant/not_a_task", json={"prompt": "hello"})
    assert response.status_code == 404


def test_assistant_rate_limited(client: TestClient):
    _override_relay(client, lambda request: httpx.Response(429))

    response = client.post("/v1/assistant/daily_brief", json={"prompt": "Brief me"})

    assert response.status_code == 429


def test_assistant_gateway_down(client: TestClient):
    _override_relay(client, lambda request: httpx.Response(500))

    response = client.post("/v1/assistant/daily_brief", json={"prompt": "Brief me"})

    assert response.status_code == 503


@pytest.mark.parametrize(
    "path, body",
    [
        ("/v1/anomalies/outliers", '{"transactions": [{"id": "a", "amount": NaN, "timestamp": "2024-04-01T12:00:00"}]}'),
        ("/v1/anomalies/temporal", '{"transactions": [{"id": "a", "amount": Infinity, "timestamp": "2024-04-01T12:00:00"}]}'),
        ("/v1/forecast/liquidity", '{"current_balance": 1000.0, "daily_flows": [-10.0, NaN, 5.0], "days": 3}'),
        ("/v1/forecast/liquidity", '{"current_balance": -Infinity, "daily_flows": [-10.0, 20.0, 5.0], "days": 3}'),
    ],
)
def test_non_finite_numbers_rejected(client: TestClient, path: str, body: str):
    """Non-standard JSON numbers are refused before any analysis runs"""
    response = client.post(path, content=body, headers={"Content-Type": "application/json"})
    assert response.status_code == 422
