"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field, FiniteFloat
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from finsignal_gateway.domain.models import (
    AccountBalance,
    Anomaly,
    ForecastPoint,
    Insight,
    Transaction,
)


class TransactionSchema(BaseModel):
    """Transaction supplied by the caller"""

    id: str = Field(..., min_length=1)
    amount: float = Field(..., allow_inf_nan=False, description="Signed amount; negative is an outflow")
    timestamp: datetime = Field(..., description="ISO 8601; naive values are read as UTC")
    category: Optional[str] = None

    def to_domain(self) -> Transaction:
        return Transaction(id=self.id, amount=self.amount, timestamp=self.timestamp, category=self.category)


class AccountSchema(BaseModel):
    name: str
    balance: float = Field(..., allow_inf_nan=False)

    def to_domain(self) -> AccountBalance:
        return AccountBalance(name=self.name, balance=self.balance)


class TransactionsRequest(BaseModel):
    """Request body for POST /v1/anomalies/outliers and /v1/anomalies/temporal"""

    transactions: List[TransactionSchema]


class ScanRequest(TransactionsRequest):
    """Request body for POST /v1/anomalies/scan"""

    user_id: str = Field(..., min_length=1, description="User identifier")


class AnomalySchema(BaseModel):
    transaction_id: str
    anomaly_type: str
    risk_score: float
    description: str
    status: str = "pending"
    metadata: Dict[str, Any] = {}

    @classmethod
    def from_domain(cls, anomaly: Anomaly) -> "AnomalySchema":
        return cls(
            transaction_id=anomaly.transaction_id,
            anomaly_type=anomaly.anomaly_type.value,
            risk_score=anomaly.risk_score,
            description=anomaly.description,
            status=anomaly.status,
            metadata=anomaly.metadata,
        )


class AnomaliesResponse(BaseModel):
    anomalies: List[AnomalySchema]


class InsightSchema(BaseModel):
    insight_type: str
    message: str
    confidence: int
    priority: str
    metadata: Dict[str, Any] = {}

    @classmethod
    def from_domain(cls, insight: Optional[Insight]) -> Optional["InsightSchema"]:
        if insight is None:
            return None
        return cls(
            insight_type=insight.insight_type,
            message=insight.message,
            confidence=insight.confidence,
            priority=insight.priority,
            metadata=insight.metadata,
        )


class StatisticalBaseline(BaseModel):
    mean: float
    std_dev: float


class ScanResponse(BaseModel):
    """Response for POST /v1/anomalies/scan"""

    user_id: str
    total_transactions_analyzed: int
    anomalies_detected: int
    high_risk_count: int
    anomalies: List[AnomalySchema]
    statistical_baseline: StatisticalBaseline
    insight: Optional[InsightSchema] = None


class RecommendationSchema(BaseModel):
    action: str
    message: str


class ForecastPointSchema(BaseModel):
    date: date
    predicted_balance: float
    confidence: int
    risk_level: str
    recommendation: RecommendationSchema

    @classmethod
    def from_domain(cls, point: ForecastPoint) -> "ForecastPointSchema":
        return cls(
            date=point.date,
            predicted_balance=point.predicted_balance,
            confidence=point.confidence,
            risk_level=point.risk_level.value,
            recommendation=RecommendationSchema(
                action=point.recommendation.action,
                message=point.recommendation.message,
            ),
        )


class LiquidityRequest(BaseModel):
    """Request body for POST /v1/forecast/liquidity"""

    current_balance: float = Field(..., allow_inf_nan=False)
    daily_flows: List[FiniteFloat]
    days: Optional[int] = Field(None, description="Forecast horizon (default from settings)")
    seed: Optional[int] = Field(None, description="Seed for reproducible noise")


class LiquidityResponse(BaseModel):
    points: List[ForecastPointSchema]


class ForecastRequest(BaseModel):
    """Request body for POST /v1/forecast"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    accounts: List[AccountSchema]
    transactions: List[TransactionSchema]
    days: Optional[int] = None
    seed: Optional[int] = None


class ForecastSummary(BaseModel):
    critical_days: int
    warning_days: int
    healthy_days: int
    peak_risk_level: str


class ForecastResponse(BaseModel):
    """Response for POST /v1/forecast"""

    user_id: str
    current_balance: float
    avg_daily_flow: float
    volatility: float
    forecasts: List[ForecastPointSchema]
    summary: ForecastSummary
    insight: Optional[InsightSchema] = None


class StoredAnomaly(AnomalySchema):
    id: str
    created_at: str


class AnomalyHistoryResponse(BaseModel):
    """Response for GET /v1/anomalies/history"""

    user_id: str
    anomalies: List[StoredAnomaly]


class StoredForecastPoint(BaseModel):
    id: str
    forecast_date: date
    predicted_balance: float
    confidence_level: int
    risk_level: str
    recommendations: Optional[Dict[str, Any]] = None
    created_at: str


class ForecastHistoryResponse(BaseModel):
    """Response for GET /v1/forecast/history"""

    user_id: str
    forecasts: List[StoredForecastPoint]


class StoredInsight(InsightSchema):
    id: str
    created_at: str


class InsightsResponse(BaseModel):
    """Response for GET /v1/insights"""

    user_id: str
    insights: List[StoredInsight]


class AssistantRequest(BaseModel):
    """Request body for POST /v1/assistant/{task}"""

    prompt: str = Field(..., min_length=1)


class AssistantResponse(BaseModel):
    task: str
    content: str
