"""API middleware: correlation ID, API key check, request/response logging."""

import hmac
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from auditsink.core.context import correlation_id_ctx, request_id_ctx
from auditsink.domain.models.event import RequestMetadata
from auditsink.domain.schemas.event import MAX_FIELD_LENGTH, MAX_IP_LENGTH

logger = logging.getLogger(__name__)
request_logger = logging.getLogger("auditsink.requests")

CORRELATION_HEADER = "X-Correlation-ID"
API_KEY_HEADER = "X-Api-Key"
TRACE_HEADER = "X-Trace-ID"
TRACEPARENT_HEADER = "traceparent"

API_KEY_EXEMPT_PATHS = frozenset({"/health", "/ready", "/audit/health"})
SENSITIVE_HEADER_MARKERS = ("authorization", "cookie", "x-api-key", "token", "password")


def _bounded(value: str | None, limit: int) -> str | None:
    """Stripped header value, or None when blank or wider than the column it lands in."""
    if value is None:
        return None
    value = value.strip()
    if not value or len(value) > limit:
        return None
    return value


def client_ip(request: Request) -> str | None:
    """First X-Forwarded-For hop, then X-Real-IP, then the socket peer. Over-long values are skipped."""
    forwarded = request.headers.get("X-Forwarded-For")
    candidates = (
        forwarded.split(",")[0] if forwarded else None,
        request.headers.get("X-Real-IP"),
        request.client.host if request.client else None,
    )
    for candidate in candidates:
        ip = _bounded(candidate, MAX_IP_LENGTH)
        if ip is not None:
            return ip
    return None


def trace_id_from_headers(request: Request) -> str | None:
    """X-Trace-ID, else the trace-id field of a W3C traceparent (version-traceid-parent-flags)."""
    trace_id = _bounded(request.headers.get(TRACE_HEADER), MAX_FIELD_LENGTH)
    if trace_id is not None:
        return trace_id
    traceparent = request.headers.get(TRACEPARENT_HEADER)
    if traceparent:
        parts = traceparent.strip().split("-")
        if len(parts) == 4 and len(parts[1]) == 32:
            return parts[1]
    return None


def request_metadata(request: Request) -> RequestMetadata:
    """Transport metadata for ingestion. Only a client-sent correlation ID is recorded."""
    return RequestMetadata(
        client_ip=client_ip(request),
        user_agent=request.headers.get("User-Agent"),
        correlation_id=_bounded(request.headers.get(CORRELATION_HEADER), MAX_FIELD_LENGTH),
        trace_id=trace_id_from_headers(request),
    )


def _is_sensitive(header_name: str) -> bool:
    lower = header_name.lower()
    return any(marker in lower for marker in SENSITIVE_HEADER_MARKERS)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Generate or preserve correlation ID; attach to request.state, response header, and logging context."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        correlation_id_ctx.set(correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Require X-Api-Key when a key is configured. Health probes and preflight pass through."""

    def __init__(self, app, api_key: str = "") -> None:
        super().__init__(app)
        self._api_key = api_key

    async def dispatch(self, request: Request, call_next) -> Response:
        if (
            not self._api_key
            or request.method == "OPTIONS"
            or request.url.path in API_KEY_EXEMPT_PATHS
        ):
            return await call_next(request)
        provided = request.headers.get(API_KEY_HEADER) or ""
        if not hmac.compare_digest(provided.encode("utf-8"), self._api_key.encode("utf-8")):
            logger.warning(
                "api_key_rejected",
                extra={"path": request.url.path, "client_ip": client_ip(request)},
            )
            return JSONResponse(status_code=401, content={"detail": "unauthorized"})
        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One structured line per request and per response. Sensitive headers are redacted; bodies are never logged."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = str(uuid.uuid4())
        request_id_ctx.set(request_id)
        started = time.perf_counter()

        request_logger.info(
            "request",
            extra={
                "type": "REQUEST",
                "method": request.method,
                "path": request.url.path,
                "query": request.url.query or None,
                "client_ip": client_ip(request),
                "user_agent": request.headers.get("User-Agent"),
                "headers": {
                    name: "[REDACTED]" if _is_sensitive(name) else value
                    for name, value in request.headers.items()
                },
            },
        )

        response = await call_next(request)
        request_logger.info(
            "response",
            extra={
                "type": "RESPONSE",
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response
