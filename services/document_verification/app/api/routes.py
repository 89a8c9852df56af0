"""API routes for Document Verification service."""

from typing import Callable, TypeVar

from fastapi import APIRouter, Query, status
from prometheus_client import Counter, Histogram
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from services.document_verification.app.api.errors import to_http_exception
from services.document_verification.app.api.schemas import (
    AdministratorResponse,
    DocumentListResponse,
    DocumentRegistrationRequest,
    FingerprintResponse,
    HealthResponse,
    ReadinessResponse,
    RegistryEventResponse,
    VerificationDecisionRequest,
    VerificationRequest,
    VerificationRequestedResponse,
    VerifierListResponse,
    VerifierRequest,
    VerifierStatusResponse,
)
from services.document_verification.app.core.errors import RegistryError
from services.document_verification.app.core.fingerprint import canonicalize, is_zero, to_hex
from services.document_verification.app.core.verification import DocumentVerification
from services.document_verification.app.db.repository import RegistryRepository, to_record
from services.document_verification.app.dependencies import (
    AppSettings,
    Caller,
    DBSession,
    Executor,
    Publisher,
)
from services.document_verification.app.events.publisher import DocumentEventPublisher
from services.document_verification.app.execution import RegistryExecutor
from shared.schemas.document import DocumentRecordSchema, VerificationStatus
from shared.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

T = TypeVar("T")

# Metrics
VERIFICATION_DECISIONS = Counter(
    "verification_decisions_total",
    "Total verification decisions",
    ["status"],
)
REQUEST_LATENCY = Histogram(
    "verification_request_duration_seconds",
    "Request latency in seconds",
    ["endpoint"],
)


async def _execute(
    executor: RegistryExecutor,
    operation_name: str,
    operation: Callable[[DocumentVerification], T],
    db: AsyncSession,
    publisher: DocumentEventPublisher,
    document_hash: str | None = None,
) -> T:
    """Run a mutating registry call, translating registry errors to HTTP."""
    fingerprints = [canonicalize(document_hash)] if document_hash is not None else []
    try:
        return await executor.execute(
            operation_name,
            operation,
            session=db,
            publisher=publisher,
            fingerprints=fingerprints,
        )
    except RegistryError as e:
        raise to_http_exception(e) from e


async def _query(
    executor: RegistryExecutor,
    operation: Callable[[DocumentVerification], T],
    db: AsyncSession,
    document_hash: str | None = None,
) -> T:
    """Run a read-only registry query, translating registry errors to HTTP."""
    fingerprints = [canonicalize(document_hash)] if document_hash is not None else []
    try:
        return await executor.query(operation, session=db, fingerprints=fingerprints)
    except RegistryError as e:
        raise to_http_exception(e) from e


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: AppSettings) -> HealthResponse:
    """Health check endpoint.

    Returns basic liveness status. This endpoint should always return
    quickly and only fail if the service is completely unresponsive.
    """
    return HealthResponse(
        status="healthy",
        service=settings.service_name,
        version="0.1.0",
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(db: DBSession) -> ReadinessResponse:
    """Readiness check endpoint.

    Ready once the database answers and the registry has an administrator.
    """
    checks = {}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        logger.warning("readiness_check_database_failed", error=str(e))
        checks["database"] = False

    if checks["database"]:
        try:
            administrator = await RegistryRepository(db).get_administrator()
            checks["registry_initialized"] = administrator is not None
        except Exception as e:
            logger.warning("readiness_check_registry_failed", error=str(e))
            checks["registry_initialized"] = False
    else:
        checks["registry_initialized"] = False

    return ReadinessResponse(ready=all(checks.values()), checks=checks)


@router.get("/fingerprint", response_model=FingerprintResponse)
async def get_fingerprint(document_hash: str) -> FingerprintResponse:
    """Canonicalize a hash string without touching the registry."""
    fingerprint = canonicalize(document_hash)
    return FingerprintResponse(
        document_hash=document_hash,
        fingerprint=to_hex(fingerprint),
        is_zero=is_zero(fingerprint),
    )


@router.get("/administrator", response_model=AdministratorResponse)
async def get_administrator(db: DBSession, executor: Executor) -> AdministratorResponse:
    """Return the registry administrator."""
    administrator = await _query(executor, lambda registry: registry.administrator, db)
    return AdministratorResponse(administrator=administrator)


@router.get("/verifiers", response_model=VerifierListResponse)
async def list_verifiers(db: DBSession, executor: Executor) -> VerifierListResponse:
    """List the current verifier set in the order verifiers were added."""
    return await _query(
        executor,
        lambda registry: VerifierListResponse(
            administrator=registry.administrator,
            verifiers=registry.verifiers(),
        ),
        db,
    )


@router.get("/verifiers/{identity}", response_model=VerifierStatusResponse)
async def get_verifier_status(
    identity: str,
    db: DBSession,
    executor: Executor,
) -> VerifierStatusResponse:
    """Check whether an identity is a verifier."""
    is_verifier = await _query(executor, lambda registry: registry.is_verifier(identity), db)
    return VerifierStatusResponse(identity=identity, is_verifier=is_verifier)


@router.post(
    "/verifiers",
    response_model=VerifierListResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_verifier(
    request: VerifierRequest,
    caller: Caller,
    db: DBSession,
    executor: Executor,
    publisher: Publisher,
) -> VerifierListResponse:
    """Grant verifier rights (administrator only)."""

    def operation(registry: DocumentVerification) -> VerifierListResponse:
        registry.add_verifier(caller, request.identity)
        return VerifierListResponse(
            administrator=registry.administrator,
            verifiers=registry.verifiers(),
        )

    with REQUEST_LATENCY.labels(endpoint="add_verifier").time():
        return await _execute(executor, "add_verifier", operation, db, publisher)


@router.delete("/verifiers/{identity}", response_model=VerifierListResponse)
async def remove_verifier(
    identity: str,
    caller: Caller,
    db: DBSession,
    executor: Executor,
    publisher: Publisher,
) -> VerifierListResponse:
    """Revoke verifier rights (administrator only, never the last verifier)."""

    def operation(registry: DocumentVerification) -> VerifierListResponse:
        registry.remove_verifier(caller, identity)
        return VerifierListResponse(
            administrator=registry.administrator,
            verifiers=registry.verifiers(),
        )

    with REQUEST_LATENCY.labels(endpoint="remove_verifier").time():
        return await _execute(executor, "remove_verifier", operation, db, publisher)


@router.post(
    "/documents",
    response_model=DocumentRecordSchema,
    status_code=status.HTTP_201_CREATED,
)
async def register_document(
    request: DocumentRegistrationRequest,
    caller: Caller,
    db: DBSession,
    executor: Executor,
    publisher: Publisher,
) -> DocumentRecordSchema:
    """Register a document as pending, owned by the caller."""

    def operation(registry: DocumentVerification) -> DocumentRecordSchema:
        registry.register_document(caller, request.document_hash, request.title)
        return registry.get_document(request.document_hash).to_schema()

    with REQUEST_LATENCY.labels(endpoint="register_document").time():
        return await _execute(
            executor,
            "register_document",
            operation,
            db,
            publisher,
            document_hash=request.document_hash,
        )


@router.get("/documents", response_model=DocumentListResponse)
async def list_documents(
    db: DBSession,
    status_filter: VerificationStatus | None = Query(None, alias="status"),
    owner: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> DocumentListResponse:
    """List registered documents, newest first.

    Args:
        status_filter: Filter by verification status (e.g. pending for a review queue)
        owner: Filter by owner identity
        limit: Maximum documents to return (default 100, max 1000)
        offset: Number of documents to skip (default 0)
    """
    effective_limit = max(1, min(limit, 1000))
    effective_offset = max(0, offset)

    with REQUEST_LATENCY.labels(endpoint="list_documents").time():
        repository = RegistryRepository(db)
        models = await repository.list_documents(
            status=status_filter,
            owner=owner,
            limit=effective_limit,
            offset=effective_offset,
        )
        total = await repository.count_documents(status=status_filter, owner=owner)

        return DocumentListResponse(
            items=[to_record(model).to_schema() for model in models],
            total=total,
            limit=effective_limit,
            offset=effective_offset,
        )


@router.get("/documents/lookup", response_model=DocumentRecordSchema)
async def get_document(
    document_hash: str,
    db: DBSession,
    executor: Executor,
) -> DocumentRecordSchema:
    """Look up a document by hash string.

    Unregistered hashes return the zero record with ``exists=false``.
    """
    with REQUEST_LATENCY.labels(endpoint="get_document").time():
        return await _query(
            executor,
            lambda registry: registry.get_document(document_hash).to_schema(),
            db,
            document_hash=document_hash,
        )


@router.get("/documents/events", response_model=list[RegistryEventResponse])
async def list_document_events(
    db: DBSession,
    document_hash: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[RegistryEventResponse]:
    """Notification history, optionally restricted to one document."""
    fingerprint = canonicalize(document_hash) if document_hash is not None else None
    repository = RegistryRepository(db)
    events = await repository.list_events(
        fingerprint=fingerprint,
        limit=max(1, min(limit, 1000)),
        offset=max(0, offset),
    )
    return [
        RegistryEventResponse(
            sequence=event.sequence,
            event_type=event.event_type,
            fingerprint=event.fingerprint,
            caller=event.caller,
            correlation_id=event.correlation_id,
            payload=event.payload,
            created_at=event.created_at,
        )
        for event in events
    ]


@router.post(
    "/documents/request-verification",
    response_model=VerificationRequestedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def request_verification(
    request: VerificationRequest,
    caller: Caller,
    db: DBSession,
    executor: Executor,
    publisher: Publisher,
) -> VerificationRequestedResponse:
    """Ask the verifiers to review a document (owner only)."""

    def operation(registry: DocumentVerification) -> VerificationRequestedResponse:
        registry.request_verification(caller, request.document_hash)
        record = registry.get_document(request.document_hash)
        return VerificationRequestedResponse(
            fingerprint=to_hex(record.fingerprint),
            owner=record.owner,
        )

    with REQUEST_LATENCY.labels(endpoint="request_verification").time():
        return await _execute(
            executor,
            "request_verification",
            operation,
            db,
            publisher,
            document_hash=request.document_hash,
        )


@router.post("/documents/verify", response_model=DocumentRecordSchema)
async def verify_document(
    request: VerificationDecisionRequest,
    caller: Caller,
    db: DBSession,
    executor: Executor,
    publisher: Publisher,
) -> DocumentRecordSchema:
    """Approve or reject a pending document (verifiers only)."""

    def operation(registry: DocumentVerification) -> DocumentRecordSchema:
        registry.verify_document(
            caller,
            request.document_hash,
            request.approve,
            request.reason,
        )
        return registry.get_document(request.document_hash).to_schema()

    with REQUEST_LATENCY.labels(endpoint="verify_document").time():
        record = await _execute(
            executor,
            "verify_document",
            operation,
            db,
            publisher,
            document_hash=request.document_hash,
        )

    VERIFICATION_DECISIONS.labels(status=record.status.value).inc()
    return record
