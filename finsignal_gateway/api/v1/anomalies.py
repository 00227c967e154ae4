"""Anomaly detection endpoints"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from finsignal_gateway.api.v1.schemas import (
    AnomaliesResponse,
    AnomalyHistoryResponse,
    AnomalySchema,
    InsightSchema,
    ScanRequest,
    ScanResponse,
    StatisticalBaseline,
    StoredAnomaly,
    TransactionsRequest,
)
from finsignal_gateway.api.dependencies import get_request_id
from finsignal_gateway.infrastructure.database.session import get_db
from finsignal_gateway.infrastructure.database.repositories import AnomalyRepository, InsightRepository
from finsignal_gateway.domain.anomalies import (
    detect_statistical_outliers,
    detect_temporal_and_velocity_anomalies,
    scan_transactions,
)
from finsignal_gateway.domain.exceptions import InvalidInputError
from finsignal_gateway.infrastructure.observability.metrics import record_anomalies, record_failure
from finsignal_gateway.infrastructure.observability.logging import log_analysis

router = APIRouter()


@router.post("/anomalies/outliers", response_model=AnomaliesResponse)
def find_outliers(request_body: TransactionsRequest, request: Request):
    """
    Flag statistical outliers (z-score > 3 on absolute amount).

    Returns 400 when the transaction list is empty.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    transactions = [t.to_domain() for t in request_body.transactions]

    try:
        anomalies = detect_statistical_outliers(transactions)
    except InvalidInputError as e:
        record_failure("outliers", "invalid_input")
        logging.warning(f"Invalid input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    record_anomalies("outliers", anomalies)
    log_analysis(request_id, "outliers", len(anomalies), (time.time() - start_time) * 1000)

    return AnomaliesResponse(anomalies=[AnomalySchema.from_domain(a) for a in anomalies])


@router.post("/anomalies/temporal", response_model=AnomaliesResponse)
def find_temporal_anomalies(request_body: TransactionsRequest, request: Request):
    """Flag large transactions at unusual hours (UTC) or in rapid succession"""
    start_time = time.time()
    request_id = get_request_id(request)
    transactions = [t.to_domain() for t in request_body.transactions]

    try:
        anomalies = detect_temporal_and_velocity_anomalies(transactions)
    except InvalidInputError as e:
        record_failure("temporal", "invalid_input")
        logging.warning(f"Invalid input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    record_anomalies("temporal", anomalies)
    log_analysis(request_id, "temporal", len(anomalies), (time.time() - start_time) * 1000)

    return AnomaliesResponse(anomalies=[AnomalySchema.from_domain(a) for a in anomalies])


@router.post("/anomalies/scan", response_model=ScanResponse)
def scan(request_body: ScanRequest, request: Request, db: Session = Depends(get_db)):
    """
    Run every detector over a transaction snapshot and store the results.

    Flow:
    1. Run outlier, temporal/velocity and category checks
    2. Persist anomalies and the summary insight
    3. Return anomalies sorted by risk with the statistical baseline
    """
    start_time = time.time()
    request_id = get_request_id(request)
    transactions = [t.to_domain() for t in request_body.transactions]

    try:
        result = scan_transactions(transactions)

        AnomalyRepository(db).create_anomalies(request_body.user_id, result.anomalies)
        if result.insight is not None:
            InsightRepository(db).create_insight(request_body.user_id, result.insight)
        db.commit()

    except InvalidInputError as e:
        db.rollback()
        record_failure("scan", "invalid_input")
        logging.warning(f"Invalid input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        db.rollback()
        record_failure("scan", "error")
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_anomalies("scan", result.anomalies)
    log_analysis(
        request_id,
        "scan",
        len(result.anomalies),
        (time.time() - start_time) * 1000,
        user_id=request_body.user_id,
    )

    return ScanResponse(
        user_id=request_body.user_id,
        total_transactions_analyzed=result.total_transactions_analyzed,
        anomalies_detected=len(result.anomalies),
        high_risk_count=result.high_risk_count,
        anomalies=[AnomalySchema.from_domain(a) for a in result.anomalies],
        statistical_baseline=StatisticalBaseline(mean=round(result.mean, 2), std_dev=round(result.std_dev, 2)),
        insight=InsightSchema.from_domain(result.insight),
    )


@router.get("/anomalies/history", response_model=AnomalyHistoryResponse)
def get_anomaly_history(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """Retrieve stored anomalies for a user, newest first"""
    rows = AnomalyRepository(db).get_anomalies_by_user(user_id)

    anomalies = [
        StoredAnomaly(
            id=str(row.id),
            transaction_id=row.transaction_id,
            anomaly_type=row.anomaly_type,
            risk_score=row.risk_score,
            description=row.description,
            status=row.status,
            metadata=row.details or {},
            created_at=row.created_at.isoformat(),
        )
        for row in rows
    ]

    return AnomalyHistoryResponse(user_id=user_id, anomalies=anomalies)
