"""Document Verification Service - FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from services.document_verification.app.api.routes import router
from services.document_verification.app.api.schemas import ErrorResponse
from services.document_verification.app.config import get_settings
from services.document_verification.app.db.models import Base
from services.document_verification.app.db.repository import RegistryRepository
from services.document_verification.app.middleware.logging import (
    RequestLoggingMiddleware,
    get_client_ip,
)
from shared.utils.db import close_db, create_tables, get_db_session, init_db
from shared.utils.logging import (
    configure_logging,
    get_correlation_id,
    get_logger,
    set_caller_identity,
    set_correlation_id,
)
from shared.utils.metrics import MetricsMiddleware, metrics_endpoint

settings = get_settings()

# Configure logging
configure_logging(
    service_name=settings.service_name,
    log_level=settings.log_level,
    json_format=settings.log_json,
)

logger = get_logger(__name__)


async def bootstrap_registry(administrator: str) -> None:
    """Initialize the registry with its administrator if not done yet."""
    async with get_db_session() as session:
        repository = RegistryRepository(session)
        effective, created = await repository.initialize(administrator)
        await session.commit()

    if not created and effective != administrator:
        logger.warning(
            "registry_administrator_mismatch",
            configured=administrator,
            administrator=effective,
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("starting_service", service=settings.service_name)
    init_db(
        database_url=settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        echo=settings.db_echo,
    )
    if settings.create_tables:
        await create_tables(Base.metadata)
    logger.info("database_initialized")

    if settings.administrator:
        await bootstrap_registry(settings.administrator)

    yield

    # Shutdown
    logger.info("shutting_down_service")
    await close_db()
    logger.info("service_shutdown_complete")


app = FastAPI(
    title="Document Verification Service",
    description="Document registration and verifier-controlled approval registry",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

app.add_middleware(
    RequestLoggingMiddleware,
    caller_header=settings.caller_header,
    exclude_paths=[
        f"{settings.api_prefix}/health",
        f"{settings.api_prefix}/ready",
        "/metrics",
    ],
)

app.add_middleware(MetricsMiddleware)


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    """Extract or generate correlation ID for each request."""
    correlation_id = set_correlation_id(request.headers.get("X-Correlation-ID"))
    set_caller_identity(None)
    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    correlation_id = get_correlation_id()

    logger.exception(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        client_ip=get_client_ip(request),
    )

    error_response = ErrorResponse(
        error_code="INTERNAL_ERROR",
        message="An internal error occurred",
        correlation_id=correlation_id or None,
    )
    return JSONResponse(
        status_code=500,
        content=error_response.model_dump(exclude_none=True),
    )


# Include routes
app.include_router(router, prefix=settings.api_prefix)

# Add metrics endpoint
app.add_route("/metrics", metrics_endpoint)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": settings.service_name,
        "version": "0.1.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.document_verification.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
