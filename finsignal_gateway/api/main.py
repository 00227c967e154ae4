"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from finsignal_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from finsignal_gateway.api.v1 import anomalies, assistant, forecast, insights
from finsignal_gateway.infrastructure.database import session as db_session
from finsignal_gateway.infrastructure.database.models import Base
from finsignal_gateway.infrastructure.observability.logging import setup_logging
from finsignal_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup (no-op when the schema already exists)"""
    Base.metadata.create_all(bind=db_session.engine)
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="FinSignal Gateway",
        description="Transaction anomaly detection and liquidity forecasting service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(anomalies.router, prefix="/v1", tags=["anomalies"])
    app.include_router(forecast.router, prefix="/v1", tags=["forecast"])
    app.include_router(insights.router, prefix="/v1", tags=["insights"])
    app.include_router(assistant.router, prefix="/v1", tags=["assistant"])

    return app


app = create_app()
