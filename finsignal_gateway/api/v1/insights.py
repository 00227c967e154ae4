"""GET /v1/insights - Fetch a user's stored insights"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from finsignal_gateway.api.v1.schemas import InsightsResponse, StoredInsight
from finsignal_gateway.infrastructure.database.session import get_db
from finsignal_gateway.infrastructure.database.repositories import InsightRepository

router = APIRouter()


@router.get("/insights", response_model=InsightsResponse)
def get_insights(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """
    Retrieve recent insights produced by scans and forecasts.

    Returns:
        Insights newest first
    """
    rows = InsightRepository(db).get_insights_by_user(user_id)

    insights = [
        StoredInsight(
            id=str(row.id),
            insight_type=row.insight_type,
            message=row.message,
            confidence=row.confidence,
            priority=row.priority,
            metadata=row.details or {},
            created_at=row.created_at.isoformat(),
        )
        for row in rows
    ]

    return InsightsResponse(user_id=user_id, insights=insights)
