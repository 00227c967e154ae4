"""Anomaly detection engine - statistical, temporal, velocity and category heuristics"""

from datetime import timedelta
from typing import Dict, List, Sequence
from finsignal_gateway.domain.models import Anomaly, AnomalyScan, AnomalyType, Insight, Transaction
from finsignal_gateway.domain.exceptions import InvalidInputError
from finsignal_gateway.domain.statistics import ensure_finite, mean, population_std_dev, z_score
from finsignal_gateway.utils.date_utils import to_utc

Z_SCORE_THRESHOLD = 3.0
OUTLIER_BASE_RISK = 70.0
OUTLIER_RISK_PER_SIGMA = 5.0
MAX_OUTLIER_RISK = 99.0

UNUSUAL_HOURS = range(0, 6)  # 00:00-05:59 UTC
UNUSUAL_TIMING_RISK = 65.0

VELOCITY_WINDOW = timedelta(minutes=5)
VELOCITY_AMOUNT_RATIO = 0.5
VELOCITY_RISK = 72.0

CATEGORY_DEVIATION_RATIO = 4.0
CATEGORY_DEVIATION_RISK = 58.0
UNCATEGORIZED = "uncategorized"

HIGH_RISK_THRESHOLD = 80.0
SCAN_INSIGHT_CONFIDENCE = 88


def _abs_amounts(transactions: Sequence[Transaction]) -> List[float]:
    return [abs(t.amount) for t in transactions]


def detect_statistical_outliers(transactions: Sequence[Transaction]) -> List[Anomaly]:
    """
    Flag transactions whose absolute amount lies more than 3 standard deviations above the mean.

    Requirements:
    - Mean and population std dev over abs(amount) of the whole list
    - risk_score = min(99, 70 + (z - 3) * 5)
    - Zero std dev (uniform amounts) yields no outliers

    Raises:
        InvalidInputError: transaction list is empty or holds a NaN/infinite amount
    """
    if not transactions:
        raise InvalidInputError("Cannot detect outliers in an empty transaction list")

    amounts = _abs_amounts(transactions)
    ensure_finite(amounts, "transaction amounts")
    avg = mean(amounts)
    std_dev = population_std_dev(amounts)

    anomalies = []
    for txn, amount in zip(transactions, amounts):
        z = z_score(amount, avg, std_dev)
        if z is None or z <= Z_SCORE_THRESHOLD:
            continue

        anomalies.append(
            Anomaly(
                transaction_id=txn.id,
                anomaly_type=AnomalyType.STATISTICAL_OUTLIER,
                risk_score=min(MAX_OUTLIER_RISK, OUTLIER_BASE_RISK + (z - Z_SCORE_THRESHOLD) * OUTLIER_RISK_PER_SIGMA),
                description=f"Transaction amount {amount:.2f} is {z:.1f} standard deviations from mean",
                metadata={"z_score": z, "amount": amount, "mean": avg},
            )
        )

    return anomalies


def detect_temporal_and_velocity_anomalies(transactions: Sequence[Transaction]) -> List[Anomaly]:
    """
    Flag large transactions at unusual hours and large transactions in rapid succession.

    Hours are evaluated in UTC. An empty list yields an empty result;
    NaN or infinite amounts raise InvalidInputError.
    """
    if not transactions:
        return []

    amounts = _abs_amounts(transactions)
    ensure_finite(amounts, "transaction amounts")
    avg = mean(amounts)
    return _unusual_timing(transactions, avg) + _velocity(transactions, avg)


def _unusual_timing(transactions: Sequence[Transaction], avg: float) -> List[Anomaly]:
    anomalies = []
    for txn in transactions:
        hour = to_utc(txn.timestamp).hour
        amount = abs(txn.amount)
        if hour in UNUSUAL_HOURS and amount > avg:
            anomalies.append(
                Anomaly(
                    transaction_id=txn.id,
                    anomaly_type=AnomalyType.UNUSUAL_TIMING,
                    risk_score=UNUSUAL_TIMING_RISK,
                    description=f"Large transaction at unusual hour ({hour}:00 UTC)",
                    metadata={"hour": hour, "amount": amount},
                )
            )
    return anomalies


def _velocity(transactions: Sequence[Transaction], avg: float) -> List[Anomaly]:
    # Adjacent pairs only, most recent first
    ordered = sorted(transactions, key=lambda t: to_utc(t.timestamp), reverse=True)
    min_amount = avg * VELOCITY_AMOUNT_RATIO

    anomalies = []
    for newer, older in zip(ordered, ordered[1:]):
        delta = to_utc(newer.timestamp) - to_utc(older.timestamp)
        if delta >= VELOCITY_WINDOW:
            continue
        if abs(newer.amount) <= min_amount or abs(older.amount) <= min_amount:
            continue

        minutes = delta.total_seconds() / 60
        anomalies.append(
            Anomaly(
                transaction_id=newer.id,
                anomaly_type=AnomalyType.VELOCITY_ANOMALY,
                risk_score=VELOCITY_RISK,
                description=f"Multiple large transactions within {minutes:.1f} minutes",
                metadata={
                    "transaction_ids": [newer.id, older.id],
                    "related_transaction_id": older.id,
                    "time_difference_minutes": minutes,
                },
            )
        )
    return anomalies


def detect_category_deviations(transactions: Sequence[Transaction]) -> List[Anomaly]:
    """Flag transactions more than 4x the average absolute amount of their category"""
    totals: Dict[str, List[float]] = {}
    for txn in transactions:
        totals.setdefault(txn.category or UNCATEGORIZED, []).append(abs(txn.amount))

    category_avg = {cat: mean(amounts) for cat, amounts in totals.items()}

    anomalies = []
    for txn in transactions:
        category = txn.category or UNCATEGORIZED
        avg = category_avg[category]
        amount = abs(txn.amount)
        # avg > 0 whenever amount > 0
        if amount > avg * CATEGORY_DEVIATION_RATIO:
            ratio = amount / avg
            anomalies.append(
                Anomaly(
                    transaction_id=txn.id,
                    anomaly_type=AnomalyType.CATEGORY_DEVIATION,
                    risk_score=CATEGORY_DEVIATION_RISK,
                    description=f"Amount {amount:.2f} is {ratio:.1f}x the category average",
                    metadata={"category": category, "category_average": avg, "ratio": ratio},
                )
            )
    return anomalies


def build_scan_insight(anomalies: Sequence[Anomaly]) -> Insight | None:
    """Summarize a scan for display; None when nothing was found"""
    if not anomalies:
        return None

    high_risk = sum(1 for a in anomalies if a.risk_score > HIGH_RISK_THRESHOLD)
    types = sorted({a.anomaly_type.value for a in anomalies})

    return Insight(
        insight_type="anomaly_detection",
        message=f"Anomaly scan detected {len(anomalies)} suspicious patterns ({high_risk} high-risk)",
        confidence=SCAN_INSIGHT_CONFIDENCE,
        priority="high" if high_risk > 0 else "medium",
        metadata={"total_anomalies": len(anomalies), "high_risk": high_risk, "types": types},
    )


def scan_transactions(transactions: Sequence[Transaction]) -> AnomalyScan:
    """
    Main entry point: run every detector over a transaction snapshot.

    Returns anomalies sorted by risk (highest first) with the statistical baseline.
    """
    anomalies = (
        detect_statistical_outliers(transactions)
        + detect_temporal_and_velocity_anomalies(transactions)
        + detect_category_deviations(transactions)
    )
    anomalies.sort(key=lambda a: a.risk_score, reverse=True)

    amounts = _abs_amounts(transactions)

    return AnomalyScan(
        total_transactions_analyzed=len(transactions),
        anomalies=anomalies,
        mean=mean(amounts),
        std_dev=population_std_dev(amounts),
        high_risk_count=sum(1 for a in anomalies if a.risk_score > HIGH_RISK_THRESHOLD),
        insight=build_scan_insight(anomalies),
    )
