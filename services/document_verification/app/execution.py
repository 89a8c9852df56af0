"""Serialized, all-or-nothing execution of registry calls.

The core assumes a substrate that orders calls, discards failed ones and
knows who is calling. ``RegistryExecutor`` provides that on top of the
database: one lock orders mutating calls within the process, each call runs in
its own transaction holding row locks on the registry configuration and the
addressed record, and notifications leave the process only after commit.
Workers sharing one database are therefore ordered by the database itself.
"""

import asyncio
from typing import Callable, Iterable, TypeVar

from prometheus_client import Counter
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from services.document_verification.app.core.errors import (
    AlreadyVerifierError,
    DocumentAlreadyRegisteredError,
    RegistryError,
)
from services.document_verification.app.core.registry import Clock, unix_now
from services.document_verification.app.core.verification import DocumentVerification
from services.document_verification.app.db.repository import RegistryRepository
from services.document_verification.app.events.publisher import DocumentEventPublisher
from shared.schemas.events import DocumentRegisteredEvent, RegistryEvent, VerifierAddedEvent
from shared.utils.logging import get_correlation_id, get_logger

logger = get_logger(__name__)

T = TypeVar("T")

REGISTRY_CALLS = Counter(
    "verification_registry_calls_total",
    "Total registry calls by operation and outcome",
    ["operation", "outcome"],
)


def conflict_error(events: list[RegistryEvent]) -> RegistryError | None:
    """Registry error for a unique-key conflict hit while storing ``events``.

    A conflict means another writer committed the same document or verifier
    first; the call is reported as the duplicate it turned out to be.
    """
    for event in events:
        if isinstance(event, DocumentRegisteredEvent):
            return DocumentAlreadyRegisteredError(
                document_hash=event.document_hash,
                fingerprint=event.fingerprint,
            )
        if isinstance(event, VerifierAddedEvent):
            return AlreadyVerifierError(identity=event.verifier)
    return None


class RegistryExecutor:
    """Runs registry operations against persisted state."""

    def __init__(self, clock: Clock = unix_now):
        """Initialize executor.

        Args:
            clock: Timestamp source handed to the registry for each call
        """
        self.clock = clock
        self._lock = asyncio.Lock()

    async def execute(
        self,
        operation_name: str,
        operation: Callable[[DocumentVerification], T],
        session: AsyncSession,
        publisher: DocumentEventPublisher,
        fingerprints: Iterable[bytes] = (),
    ) -> T:
        """Run a mutating operation as one atomic call.

        Args:
            operation_name: Name used for logs and metrics
            operation: Callable invoking the registry facade
            session: Database session owning the call's transaction
            publisher: Forwarder for committed notifications
            fingerprints: Documents the operation addresses

        Returns:
            Whatever ``operation`` returned

        Raises:
            RegistryError: Propagated unchanged after rolling back
            DocumentAlreadyRegisteredError: If another writer stored the
                document between this call's read and its write
        """
        events: list[RegistryEvent] = []
        async with self._lock:
            repository = RegistryRepository(session)
            try:
                state = await repository.load_state(fingerprints, for_update=True)
                registry = DocumentVerification(state, clock=self.clock)
                result = operation(registry)

                correlation_id = get_correlation_id() or None
                events = [
                    event.model_copy(update={"correlation_id": correlation_id})
                    for event in registry.notifications.entries
                ]
                await repository.apply_events(registry.state, events)
                await session.commit()
            except RegistryError as e:
                await session.rollback()
                REGISTRY_CALLS.labels(operation=operation_name, outcome=e.error_code).inc()
                logger.info(
                    "registry_call_rejected",
                    operation=operation_name,
                    error_code=e.error_code,
                    **e.details,
                )
                raise
            except IntegrityError as e:
                await session.rollback()
                conflict = conflict_error(events)
                if conflict is None:
                    REGISTRY_CALLS.labels(operation=operation_name, outcome="error").inc()
                    raise
                REGISTRY_CALLS.labels(operation=operation_name, outcome=conflict.error_code).inc()
                logger.warning(
                    "registry_write_conflict",
                    operation=operation_name,
                    error_code=conflict.error_code,
                    **conflict.details,
                )
                raise conflict from e
            except Exception:
                await session.rollback()
                REGISTRY_CALLS.labels(operation=operation_name, outcome="error").inc()
                raise

        REGISTRY_CALLS.labels(operation=operation_name, outcome="ok").inc()
        logger.info(
            "registry_call_committed",
            operation=operation_name,
            event_count=len(events),
        )

        await publisher.publish_all(events)
        return result

    async def query(
        self,
        operation: Callable[[DocumentVerification], T],
        session: AsyncSession,
        fingerprints: Iterable[bytes] = (),
    ) -> T:
        """Run a read-only query against the committed state."""
        repository = RegistryRepository(session)
        state = await repository.load_state(fingerprints)
        return operation(DocumentVerification(state, clock=self.clock))
