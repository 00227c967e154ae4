"""Liquidity forecasting endpoints"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from finsignal_gateway.api.v1.schemas import (
    ForecastHistoryResponse,
    ForecastPointSchema,
    ForecastRequest,
    ForecastResponse,
    ForecastSummary,
    InsightSchema,
    LiquidityRequest,
    LiquidityResponse,
    StoredForecastPoint,
)
from finsignal_gateway.api.dependencies import build_noise, get_request_id, resolve_days
from finsignal_gateway.config import settings
from finsignal_gateway.infrastructure.database.session import get_db
from finsignal_gateway.infrastructure.database.repositories import ForecastRepository, InsightRepository
from finsignal_gateway.domain.forecasting import forecast_from_transactions, forecast_liquidity
from finsignal_gateway.domain.exceptions import InsufficientHistoryError, InvalidInputError
from finsignal_gateway.infrastructure.observability.metrics import record_failure, record_forecast
from finsignal_gateway.infrastructure.observability.logging import log_analysis

router = APIRouter()


@router.post("/forecast/liquidity", response_model=LiquidityResponse)
def project_liquidity(request_body: LiquidityRequest, request: Request):
    """
    Project balances from a starting balance and historical daily net flows.

    Returns 422 when fewer daily flows than the minimum history are supplied.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        points = forecast_liquidity(
            request_body.current_balance,
            request_body.daily_flows,
            resolve_days(request_body.days),
            noise=build_noise(request_body.seed),
            trend_factor=settings.forecast_trend_factor,
        )
    except InvalidInputError as e:
        record_failure("liquidity", "invalid_input")
        logging.warning(f"Invalid input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))
    except InsufficientHistoryError as e:
        record_failure("liquidity", "insufficient_history")
        logging.warning(f"Insufficient history: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    record_forecast("liquidity", points)
    log_analysis(request_id, "liquidity", len(points), (time.time() - start_time) * 1000)

    return LiquidityResponse(points=[ForecastPointSchema.from_domain(p) for p in points])


@router.post("/forecast", response_model=ForecastResponse)
def create_forecast(request_body: ForecastRequest, request: Request, db: Session = Depends(get_db)):
    """
    Forecast liquidity from account balances and raw transactions, then store it.

    Flow:
    1. Sum account balances and aggregate transactions into daily net flows
    2. Project the balance for the requested horizon
    3. Persist forecast points and a liquidity insight when any day is critical
    """
    start_time = time.time()
    request_id = get_request_id(request)
    days = resolve_days(request_body.days)

    try:
        result = forecast_from_transactions(
            [a.to_domain() for a in request_body.accounts],
            [t.to_domain() for t in request_body.transactions],
            days,
            noise=build_noise(request_body.seed),
            trend_factor=settings.forecast_trend_factor,
        )

        ForecastRepository(db).create_forecasts(request_body.user_id, result.points)
        if result.insight is not None:
            InsightRepository(db).create_insight(request_body.user_id, result.insight)
        db.commit()

    except InvalidInputError as e:
        db.rollback()
        record_failure("forecast", "invalid_input")
        logging.warning(f"Invalid input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except InsufficientHistoryError as e:
        db.rollback()
        record_failure("forecast", "insufficient_history")
        logging.warning(f"Insufficient history: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        record_failure("forecast", "error")
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_forecast("forecast", result.points)
    log_analysis(
        request_id,
        "forecast",
        len(result.points),
        (time.time() - start_time) * 1000,
        user_id=request_body.user_id,
    )

    return ForecastResponse(
        user_id=request_body.user_id,
        current_balance=result.current_balance,
        avg_daily_flow=result.avg_daily_flow,
        volatility=result.volatility,
        forecasts=[ForecastPointSchema.from_domain(p) for p in result.points],
        summary=ForecastSummary(
            critical_days=result.critical_days,
            warning_days=result.warning_days,
            healthy_days=result.healthy_days,
            peak_risk_level=result.peak_risk_level.value,
        ),
        insight=InsightSchema.from_domain(result.insight),
    )


@router.get("/forecast/history", response_model=ForecastHistoryResponse)
def get_forecast_history(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """Retrieve stored forecast points for a user"""
    rows = ForecastRepository(db).get_forecasts_by_user(user_id)

    forecasts = [
        StoredForecastPoint(
            id=str(row.id),
            forecast_date=row.forecast_date,
            predicted_balance=row.predicted_balance,
            confidence_level=row.confidence_level,
            risk_level=row.risk_level,
            recommendations=row.recommendations,
            created_at=row.created_at.isoformat(),
        )
        for row in rows
    ]

    return ForecastHistoryResponse(user_id=user_id, forecasts=forecasts)
