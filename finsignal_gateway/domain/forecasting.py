"""Liquidity forecasting - projects balance trajectory from historical daily net flow"""

import random
from datetime import date
from typing import Dict, List, Optional, Sequence
from finsignal_gateway.domain.models import (
    AccountBalance,
    ForecastPoint,
    Insight,
    LiquidityForecast,
    Recommendation,
    RiskLevel,
    Transaction,
)
from finsignal_gateway.domain.exceptions import InsufficientHistoryError, InvalidInputError
from finsignal_gateway.domain.statistics import daily_net_flows, ensure_finite, mean, population_std_dev
from finsignal_gateway.utils.date_utils import generate_date_range, utc_today

DEFAULT_TREND_FACTOR = 0.98
DEFAULT_DAYS = 7
MIN_FLOW_SAMPLES = 3
MIN_TRANSACTIONS = 10

MAX_CONFIDENCE = 95
MIN_CONFIDENCE = 65
CONFIDENCE_DECAY_PER_DAY = 3

CRITICAL_FRACTION = 0.3
WARNING_FRACTION = 0.5

RECOMMENDATIONS: Dict[RiskLevel, Recommendation] = {
    RiskLevel.CRITICAL: Recommendation(
        action="immediate_action",
        message="Liquidity stress detected. Consider rebalancing funds immediately.",
    ),
    RiskLevel.WARNING: Recommendation(
        action="monitor_closely",
        message="Approaching liquidity threshold. Review cash flow in next 48 hours.",
    ),
    RiskLevel.HEALTHY: Recommendation(
        action="normal",
        message="Cash flow remains healthy. No immediate action required.",
    ),
}


class NoiseSource:
    """Zero-mean perturbation applied to each projected daily flow"""

    def perturbation(self, volatility: float) -> float:
        raise NotImplementedError


class ZeroNoise(NoiseSource):
    """Deterministic projection with no perturbation"""

    def perturbation(self, volatility: float) -> float:
        return 0.0


class UniformNoise(NoiseSource):
    """Uniform perturbation in [-volatility/2, volatility/2); seed for reproducible runs"""

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def perturbation(self, volatility: float) -> float:
        return (self.rng.random() - 0.5) * volatility


def confidence_for_day(index: int) -> int:
    """Confidence for the forecast point at zero-based index: 95, 92, 89, ... floored at 65"""
    return max(MIN_CONFIDENCE, MAX_CONFIDENCE - CONFIDENCE_DECAY_PER_DAY * index)


def classify_risk(balance: float, starting_balance: float) -> RiskLevel:
    """Thresholds are fractions of the starting balance, not of the previous day"""
    if balance < starting_balance * CRITICAL_FRACTION:
        return RiskLevel.CRITICAL
    elif balance < starting_balance * WARNING_FRACTION:
        return RiskLevel.WARNING
    else:
        return RiskLevel.HEALTHY


def forecast_liquidity(
    current_balance: float,
    daily_flows: Sequence[float],
    days: int = DEFAULT_DAYS,
    *,
    noise: Optional[NoiseSource] = None,
    trend_factor: float = DEFAULT_TREND_FACTOR,
    start_date: date | None = None,
) -> List[ForecastPoint]:
    """
    Project the balance for `days` consecutive days after start_date.

    Requirements:
    - Each step adds avg_daily_flow * trend_factor + noise(volatility) to a running balance
    - predicted_balance is the running balance floored at 0
    - Confidence decreases 3 points per day, floored at 65
    - Risk level compares the running balance to 30% / 50% of current_balance

    Args:
        current_balance: Starting balance (sum of account balances)
        daily_flows: Historical net flow per calendar day
        days: Number of forecast points
        noise: Perturbation source (default: no noise)
        trend_factor: Damping multiplier on the historical average flow
        start_date: Day before the first forecast point (default: today, UTC)

    Raises:
        InvalidInputError: days < 1 or a NaN/infinite balance or flow
        InsufficientHistoryError: fewer than MIN_FLOW_SAMPLES daily flows
    """
    if days < 1:
        raise InvalidInputError("Forecast horizon must be at least 1 day")
    ensure_finite([current_balance], "current balance")
    ensure_finite(daily_flows, "daily flows")
    if len(daily_flows) < MIN_FLOW_SAMPLES:
        raise InsufficientHistoryError(
            f"Insufficient history for accurate forecasting: {len(daily_flows)} daily flows, "
            f"need at least {MIN_FLOW_SAMPLES}"
        )

    noise = noise or ZeroNoise()
    avg_daily_flow = mean(daily_flows)
    volatility = population_std_dev(daily_flows)

    running_balance = current_balance
    points = []
    for i, forecast_date in enumerate(generate_date_range(start_date or utc_today(), days)):
        running_balance += avg_daily_flow * trend_factor + noise.perturbation(volatility)
        risk_level = classify_risk(running_balance, current_balance)

        points.append(
            ForecastPoint(
                date=forecast_date,
                predicted_balance=max(0.0, running_balance),
                confidence=confidence_for_day(i),
                risk_level=risk_level,
                recommendation=RECOMMENDATIONS[risk_level],
            )
        )

    return points


def forecast_from_transactions(
    accounts: Sequence[AccountBalance],
    transactions: Sequence[Transaction],
    days: int = DEFAULT_DAYS,
    *,
    noise: Optional[NoiseSource] = None,
    trend_factor: float = DEFAULT_TREND_FACTOR,
    start_date: date | None = None,
) -> LiquidityForecast:
    """
    Main entry point: forecast liquidity from account balances and raw transactions.

    Raises:
        InsufficientHistoryError: fewer than MIN_TRANSACTIONS transactions
    """
    if len(transactions) < MIN_TRANSACTIONS:
        raise InsufficientHistoryError(
            f"Insufficient transaction history for accurate forecasting: {len(transactions)} "
            f"transactions, need at least {MIN_TRANSACTIONS}"
        )

    current_balance = sum(acc.balance for acc in accounts)
    flows = daily_net_flows(transactions)

    points = forecast_liquidity(
        current_balance,
        flows,
        days,
        noise=noise,
        trend_factor=trend_factor,
        start_date=start_date,
    )
    avg_daily_flow = mean(flows)
    volatility = population_std_dev(flows)

    counts = {level: 0 for level in RiskLevel}
    for point in points:
        counts[point.risk_level] += 1

    insight = None
    critical_days = counts[RiskLevel.CRITICAL]
    peak_risk_level = max((p.risk_level for p in points), key=lambda level: level.severity)
    if critical_days > 0:
        insight = Insight(
            insight_type="liquidity",
            message=(
                f"Liquidity forecast predicts {critical_days} critical day(s) in next {days} days. "
                f"Confidence: {points[0].confidence}%"
            ),
            confidence=points[0].confidence,
            priority="high",
            metadata={
                "forecasts": [
                    {
                        "forecast_date": p.date.isoformat(),
                        "predicted_balance": p.predicted_balance,
                        "risk_level": p.risk_level.value,
                    }
                    for p in points[:3]
                ],
                "avg_daily_flow": avg_daily_flow,
                "volatility": volatility,
            },
        )

    return LiquidityForecast(
        current_balance=current_balance,
        avg_daily_flow=avg_daily_flow,
        volatility=volatility,
        points=points,
        critical_days=critical_days,
        warning_days=counts[RiskLevel.WARNING],
        healthy_days=counts[RiskLevel.HEALTHY],
        peak_risk_level=peak_risk_level,
        insight=insight,
    )
