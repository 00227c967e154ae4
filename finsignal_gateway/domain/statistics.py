"""Shared statistics helpers for anomaly detection and forecasting"""

import math
from datetime import date
from typing import Dict, List, Optional, Sequence
from finsignal_gateway.domain.models import Transaction
from finsignal_gateway.domain.exceptions import InvalidInputError
from finsignal_gateway.utils.date_utils import to_utc


def ensure_finite(values: Sequence[float], label: str = "sample") -> None:
    """Reject NaN and infinite values before they poison downstream statistics"""
    if not all(math.isfinite(v) for v in values):
        raise InvalidInputError(f"Non-finite value in {label}")


def mean(values: Sequence[float]) -> float:
    if not values:
        raise InvalidInputError("Cannot compute mean of an empty sample")
    ensure_finite(values)
    return sum(values) / len(values)


def population_std_dev(values: Sequence[float]) -> float:
    """Population (not sample) standard deviation"""
    avg = mean(values)
    return math.sqrt(sum((v - avg) ** 2 for v in values) / len(values))


def z_score(value: float, avg: float, std_dev: float) -> Optional[float]:
    """Standard score of value, or None when the population has zero spread"""
    if std_dev == 0:
        return None
    return (value - avg) / std_dev


def daily_net_flows(transactions: Sequence[Transaction]) -> List[float]:
    """
    Sum signed amounts per UTC calendar day.

    Returns one net flow per day that has at least one transaction, ordered by day.
    """
    flows: Dict[date, float] = {}
    for txn in transactions:
        day = to_utc(txn.timestamp).date()
        flows[day] = flows.get(day, 0.0) + txn.amount

    return [flows[day] for day in sorted(flows)]
