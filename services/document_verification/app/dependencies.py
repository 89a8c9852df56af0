"""FastAPI dependency injection."""

from functools import lru_cache
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.document_verification.app.api.errors import create_error_response
from services.document_verification.app.config import Settings, get_settings
from services.document_verification.app.events.publisher import DocumentEventPublisher
from services.document_verification.app.execution import RegistryExecutor
from shared.utils.db import get_db_session
from shared.utils.logging import set_caller_identity
from shared.utils.sqs import SQSClient


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with get_db_session() as session:
        yield session


def get_sqs_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> SQSClient | None:
    """Get SQS client dependency, or None when event forwarding is disabled."""
    if not settings.events_enabled:
        return None
    return SQSClient(
        queue_url=settings.sqs_queue_url,
        region=settings.sqs_region,
        endpoint_url=settings.sqs_endpoint_url,
    )


def get_publisher(
    sqs_client: Annotated[SQSClient | None, Depends(get_sqs_client)],
) -> DocumentEventPublisher:
    """Get event publisher dependency."""
    return DocumentEventPublisher(sqs_client)


@lru_cache
def get_executor() -> RegistryExecutor:
    """Process-wide executor; its lock serializes every mutating call."""
    return RegistryExecutor()


async def get_caller_identity(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str:
    """Extract the authenticated caller identity set by the gateway.

    Raises:
        HTTPException: 401 if the identity header is missing or blank
    """
    identity = (request.headers.get(settings.caller_header) or "").strip()
    if not identity:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=create_error_response(
                error_code="MISSING_CALLER_IDENTITY",
                message="Caller identity header is required",
                details={"header": settings.caller_header},
            ),
        )
    set_caller_identity(identity)
    return identity


# Type aliases for cleaner function signatures
DBSession = Annotated[AsyncSession, Depends(get_db)]
Publisher = Annotated[DocumentEventPublisher, Depends(get_publisher)]
Executor = Annotated[RegistryExecutor, Depends(get_executor)]
Caller = Annotated[str, Depends(get_caller_identity)]
AppSettings = Annotated[Settings, Depends(get_settings)]
