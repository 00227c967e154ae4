"""Domain models - pure Python dataclasses representing analysis inputs and outputs"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Transaction:
    """Financial transaction; the sign of amount encodes inflow/outflow"""

    id: str
    amount: float
    timestamp: datetime
    category: Optional[str] = None


@dataclass(frozen=True)
class AccountBalance:
    """Balance snapshot of a named account"""

    name: str
    balance: float


class AnomalyType(str, Enum):
    STATISTICAL_OUTLIER = "statistical_outlier"
    UNUSUAL_TIMING = "unusual_timing"
    VELOCITY_ANOMALY = "velocity_anomaly"
    CATEGORY_DEVIATION = "category_deviation"


class RiskLevel(str, Enum):
    """Forecast risk classification, ordered healthy < warning < critical"""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        return _RISK_SEVERITY[self]


_RISK_SEVERITY = {RiskLevel.HEALTHY: 0, RiskLevel.WARNING: 1, RiskLevel.CRITICAL: 2}


@dataclass(frozen=True)
class Anomaly:
    """Suspicious pattern found in a transaction list"""

    transaction_id: str
    anomaly_type: AnomalyType
    risk_score: float  # 0-100
    description: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    status: str = "pending"


@dataclass(frozen=True)
class Recommendation:
    """Suggested action attached to a forecast point"""

    action: str
    message: str


@dataclass(frozen=True)
class ForecastPoint:
    """Projected balance for a single future day"""

    date: date
    predicted_balance: float
    confidence: int  # 0-100
    risk_level: RiskLevel
    recommendation: Recommendation


@dataclass(frozen=True)
class Insight:
    """Human-readable summary derived from an analysis run"""

    insight_type: str
    message: str
    confidence: int
    priority: str  # "high" or "medium"
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AnomalyScan:
    """Output of a full anomaly scan over a transaction snapshot"""

    total_transactions_analyzed: int
    anomalies: List[Anomaly]
    mean: float
    std_dev: float
    high_risk_count: int
    insight: Optional[Insight] = None


@dataclass(frozen=True)
class LiquidityForecast:
    """Output of a transaction-level liquidity forecast"""

    current_balance: float
    avg_daily_flow: float
    volatility: float
    points: List[ForecastPoint]
    critical_days: int
    warning_days: int
    healthy_days: int
    peak_risk_level: RiskLevel
    insight: Optional[Insight] = None
