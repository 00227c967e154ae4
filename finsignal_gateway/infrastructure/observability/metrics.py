"""Prometheus metrics for monitoring anomaly volume, forecast risk and LLM relay performance"""

from typing import Sequence
from prometheus_client import Counter, Histogram
from finsignal_gateway.domain.models import Anomaly, ForecastPoint

# Analysis metrics
analysis_counter = Counter(
    "finsignal_analysis_total",
    "Total analysis runs",
    ["operation", "outcome"],  # outcome: success | invalid_input | insufficient_history | error
)

anomaly_counter = Counter(
    "finsignal_anomalies_total",
    "Anomalies detected by type",
    ["anomaly_type"],
)

forecast_risk_counter = Counter(
    "finsignal_forecast_points_total",
    "Forecast points produced by risk level",
    ["risk_level"],  # healthy | warning | critical
)

# LLM relay metrics
llm_latency_histogram = Histogram(
    "llm_relay_latency_seconds",
    "LLM gateway response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

llm_failure_counter = Counter(
    "llm_relay_failures_total",
    "Failed LLM gateway calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_anomalies(operation: str, anomalies: Sequence[Anomaly]) -> None:
    """Record a successful detection run and the anomaly mix it produced"""
    analysis_counter.labels(operation=operation, outcome="success").inc()
    for anomaly in anomalies:
        anomaly_counter.labels(anomaly_type=anomaly.anomaly_type.value).inc()


def record_forecast(operation: str, points: Sequence[ForecastPoint]) -> None:
    """Record a successful forecast run and its risk distribution"""
    analysis_counter.labels(operation=operation, outcome="success").inc()
    for point in points:
        forecast_risk_counter.labels(risk_level=point.risk_level.value).inc()


def record_failure(operation: str, outcome: str) -> None:
    analysis_counter.labels(operation=operation, outcome=outcome).inc()
