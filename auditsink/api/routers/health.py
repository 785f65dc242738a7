# auditsink/api/routers/health.py

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from auditsink.api.dependencies import get_event_store, get_metrics
from auditsink.application.event_store import EventStore
from auditsink.config.settings import AppSettings, get_settings
from auditsink.observability.metrics import MetricsCollector

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Liveness with correlation ID from request state."""
    settings = get_settings()
    return {
        "status": "ok",
        "correlation_id": request.state.correlation_id,
        "environment": settings.environment,
        "version": settings.version,
    }


@router.get("/ready")
async def ready(store: Annotated[EventStore, Depends(get_event_store)]):
    """Readiness: the event store must answer a trivial query."""
    try:
        await store.ping()
    except Exception as e:
        logger.warning("readiness_check_failed", extra={"error": str(e)})
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ready"}


@router.get("/metrics")
async def metrics(
    collector: Annotated[MetricsCollector, Depends(get_metrics)],
    settings: Annotated[AppSettings, Depends(get_settings)],
):
    """Counter export (received, ingested, deduped, rejected). 404 when metrics are disabled."""
    if not settings.enable_metrics:
        return JSONResponse(status_code=404, content={"detail": "Not Found"})
    return collector.export_metrics()
