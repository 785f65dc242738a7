"""Audit events API: POST /audit/events (idempotent), listing, search, GET by id."""

import uuid
from dataclasses import asdict
from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from auditsink.api.dependencies import (
    get_ingestion_pipeline,
    get_query_engine,
    get_request_metadata,
)
from auditsink.application.ingestion import IngestionPipeline
from auditsink.application.query import QueryEngine
from auditsink.domain.models.event import AuditEvent, RequestMetadata
from auditsink.domain.models.query import DEFAULT_SORT_FIELD, PagedResult, SearchCriteria
from auditsink.domain.schemas.event import (
    AuditEventRequest,
    AuditEventResponse,
    IngestResponse,
    PagedResponse,
)

router = APIRouter()


def _to_response(event: AuditEvent) -> AuditEventResponse:
    return AuditEventResponse(**asdict(event))


def _to_paged_response(result: PagedResult[AuditEvent]) -> PagedResponse[AuditEventResponse]:
    return PagedResponse[AuditEventResponse](
        content=[_to_response(e) for e in result.content],
        page=result.page,
        size=result.size,
        total_elements=result.total_elements,
        total_pages=result.total_pages,
        first=result.first,
        last=result.last,
    )


@router.post(
    "/events",
    response_model=IngestResponse,
    status_code=202,
    responses={200: {"model": IngestResponse, "description": "Already recorded"}},
)
async def ingest_event(
    body: AuditEventRequest,
    metadata: Annotated[RequestMetadata, Depends(get_request_metadata)],
    pipeline: Annotated[IngestionPipeline, Depends(get_ingestion_pipeline)],
):
    """Ingest an audit event. 202 when newly stored, 200 when the submission was already recorded."""
    result = await pipeline.ingest(body, metadata)
    response = IngestResponse(event_id=str(result.event_id), deduped=result.deduped)
    return JSONResponse(
        status_code=200 if result.deduped else 202,
        content=response.model_dump(by_alias=True),
    )


@router.get("/health", response_class=PlainTextResponse)
async def audit_health():
    return "ok"


@router.get("/events", response_model=PagedResponse[AuditEventResponse])
async def list_events(
    query_engine: Annotated[QueryEngine, Depends(get_query_engine)],
    page: Annotated[int, Query(ge=0)] = 0,
    size: Annotated[Optional[int], Query(ge=1)] = None,
    sort_by: Annotated[str, Query(alias="sortBy")] = DEFAULT_SORT_FIELD,
    sort_order: Annotated[str, Query(alias="sortOrder")] = "desc",
):
    """Page through all events."""
    result = await query_engine.search(None, page, size, sort_by, sort_order)
    return _to_paged_response(result)


@router.get("/events/search", response_model=PagedResponse[AuditEventResponse])
async def search_events(
    query_engine: Annotated[QueryEngine, Depends(get_query_engine)],
    tenant_id: Annotated[Optional[str], Query(alias="tenantId")] = None,
    actor_id: Annotated[Optional[str], Query(alias="actorId")] = None,
    subject_id: Annotated[Optional[str], Query(alias="subjectId")] = None,
    action: Optional[str] = None,
    outcome: Optional[str] = None,
    correlation_id: Annotated[Optional[str], Query(alias="correlationId")] = None,
    trace_id: Annotated[Optional[str], Query(alias="traceId")] = None,
    app_id: Annotated[Optional[str], Query(alias="appId")] = None,
    from_date: Annotated[Optional[datetime], Query(alias="fromDate")] = None,
    to_date: Annotated[Optional[datetime], Query(alias="toDate")] = None,
    page: Annotated[int, Query(ge=0)] = 0,
    size: Annotated[Optional[int], Query(ge=1)] = None,
    sort_by: Annotated[str, Query(alias="sortBy")] = DEFAULT_SORT_FIELD,
    sort_order: Annotated[str, Query(alias="sortOrder")] = "desc",
):
    """Filtered search. Omitted criteria are unconstrained; the date range is inclusive."""
    criteria = SearchCriteria(
        tenant_id=tenant_id,
        actor_id=actor_id,
        subject_id=subject_id,
        action=action,
        outcome=outcome,
        correlation_id=correlation_id,
        trace_id=trace_id,
        app_id=app_id,
        from_date=from_date,
        to_date=to_date,
    )
    result = await query_engine.search(criteria, page, size, sort_by, sort_order)
    return _to_paged_response(result)


@router.get("/events/{event_id}", response_model=AuditEventResponse)
async def get_event(
    event_id: uuid.UUID,
    query_engine: Annotated[QueryEngine, Depends(get_query_engine)],
):
    """Get event by ID."""
    event = await query_engine.get(event_id)
    if event is None:
        return JSONResponse(status_code=404, content={"detail": "Event not found"})
    return _to_response(event)
