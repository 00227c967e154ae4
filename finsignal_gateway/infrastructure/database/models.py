"""SQLAlchemy ORM models for persisted analysis results"""

import uuid
from sqlalchemy import Column, String, Float, DateTime, Date, Integer, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class AnomalyDetection(Base):
    """Anomaly flagged by a scan"""

    __tablename__ = "anomaly_detection"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    transaction_id = Column(Text, nullable=False)
    anomaly_type = Column(String(32), nullable=False)
    risk_score = Column(Float, nullable=False)
    description = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    details = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class LiquidityForecastPoint(Base):
    """Single day of a stored liquidity forecast"""

    __tablename__ = "liquidity_forecast"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    forecast_date = Column(Date, nullable=False)
    predicted_balance = Column(Float, nullable=False)
    confidence_level = Column(Integer, nullable=False)
    risk_level = Column(String(16), nullable=False)
    recommendations = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class AIInsight(Base):
    """Summary insight produced by a scan or forecast"""

    __tablename__ = "ai_insight"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    insight_type = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    confidence = Column(Integer, nullable=False)
    priority = Column(String(16), nullable=False)
    details = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
