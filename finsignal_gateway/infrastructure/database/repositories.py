"""Data access layer for analysis results"""

from typing import List, Sequence
from sqlalchemy.orm import Session
from finsignal_gateway.infrastructure.database.models import AIInsight, AnomalyDetection, LiquidityForecastPoint
from finsignal_gateway.domain.models import Anomaly, ForecastPoint, Insight


class AnomalyRepository:
    """Repository for detected anomalies"""

    def __init__(self, db: Session):
        self.db = db

    def create_anomalies(self, user_id: str, anomalies: Sequence[Anomaly]) -> List[AnomalyDetection]:
        """Persist a scan's anomalies"""
        rows = [
            AnomalyDetection(
                user_id=user_id,
                transaction_id=a.transaction_id,
                anomaly_type=a.anomaly_type.value,
                risk_score=a.risk_score,
                description=a.description,
                status=a.status,
                details=a.metadata,
            )
            for a in anomalies
        ]
        self.db.add_all(rows)
        self.db.flush()  # Get IDs without committing
        return rows

    def get_anomalies_by_user(self, user_id: str, limit: int = 50) -> List[AnomalyDetection]:
        """Fetch recent anomalies for a user"""
        return (
            self.db.query(AnomalyDetection)
            .filter(AnomalyDetection.user_id == user_id)
            .order_by(AnomalyDetection.created_at.desc(), AnomalyDetection.risk_score.desc())
            .limit(limit)
            .all()
        )


class ForecastRepository:
    """Repository for liquidity forecasts"""

    def __init__(self, db: Session):
        self.db = db

    def create_forecasts(self, user_id: str, points: Sequence[ForecastPoint]) -> List[LiquidityForecastPoint]:
        """Persist one row per forecast day"""
        rows = [
            LiquidityForecastPoint(
                user_id=user_id,
                forecast_date=p.date,
                predicted_balance=p.predicted_balance,
                confidence_level=p.confidence,
                risk_level=p.risk_level.value,
                recommendations={"action": p.recommendation.action, "message": p.recommendation.message},
            )
            for p in points
        ]
        self.db.add_all(rows)
        self.db.flush()
        return rows

    def get_forecasts_by_user(self, user_id: str, limit: int = 90) -> List[LiquidityForecastPoint]:
        """Fetch recent forecast points for a user"""
        return (
            self.db.query(LiquidityForecastPoint)
            .filter(LiquidityForecastPoint.user_id == user_id)
            .order_by(LiquidityForecastPoint.created_at.desc(), LiquidityForecastPoint.forecast_date)
            .limit(limit)
            .all()
        )


class InsightRepository:
    """Repository for generated insights"""

    def __init__(self, db: Session):
        self.db = db

    def create_insight(self, user_id: str, insight: Insight) -> AIInsight:
        row = AIInsight(
            user_id=user_id,
            insight_type=insight.insight_type,
            message=insight.message,
            confidence=insight.confidence,
            priority=insight.priority,
            details=insight.metadata,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def get_insights_by_user(self, user_id: str, limit: int = 20) -> List[AIInsight]:
        return (
            self.db.query(AIInsight)
            .filter(AIInsight.user_id == user_id)
            .order_by(AIInsight.created_at.desc())
            .limit(limit)
            .all()
        )
