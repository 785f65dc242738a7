# auditsink/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from auditsink.api.middleware import (
    ApiKeyMiddleware,
    CorrelationIdMiddleware,
    RequestLoggingMiddleware,
)
from auditsink.api.routers import events, health
from auditsink.application.exceptions import ApplicationError, IngestionError
from auditsink.config.logging import configure_logging
from auditsink.config.settings import get_settings
from auditsink.domain.exceptions import DomainError, DomainValidationError
from auditsink.infrastructure.database.session import create_schema, get_engine

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.db_create_schema:
        await create_schema(get_engine())
    yield
    await get_engine().dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> RequestLogging -> ApiKey.
app.add_middleware(ApiKeyMiddleware, api_key=settings.api_key)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request, exc: DomainValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(IngestionError)
async def ingestion_error_handler(request, exc: IngestionError):
    # Cause is already logged by the pipeline; the caller only learns that nothing was stored.
    return JSONResponse(status_code=500, content={"detail": "Audit event was not stored"})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    logger.error("application_error", extra={"error": exc.message})
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    logger.error("unexpected_error", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Routers: /health, /ready, /metrics, /audit
app.include_router(health.router)
app.include_router(events.router, prefix="/audit")
