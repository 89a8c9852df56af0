"""Database repository for registry state."""

from typing import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.document_verification.app.core.errors import RegistryNotInitializedError
from services.document_verification.app.core.fingerprint import from_hex, to_hex
from services.document_verification.app.core.state import DocumentRecord, RegistryState
from services.document_verification.app.db.models import (
    DocumentRecordModel,
    RegistryConfigModel,
    RegistryEventModel,
    VerifierModel,
)
from shared.schemas.document import VerificationStatus
from shared.schemas.events import (
    DocumentRegisteredEvent,
    DocumentVerifiedEvent,
    RegistryEvent,
    VerificationRequestedEvent,
    VerifierAddedEvent,
    VerifierRemovedEvent,
)
from shared.utils.logging import get_logger

logger = get_logger(__name__)


def to_record(model: DocumentRecordModel) -> DocumentRecord:
    """Convert a stored row into a core document record."""
    return DocumentRecord(
        fingerprint=from_hex(model.fingerprint),
        document_hash=model.document_hash,
        title=model.title,
        owner=model.owner,
        registered_at=model.registered_at,
        status=model.status,
        verifiers=list(model.verifiers or []),
        rejection_reason=model.rejection_reason or "",
    )


def _event_caller(event: RegistryEvent) -> str | None:
    """Identity whose call raised the notification."""
    if isinstance(event, (DocumentRegisteredEvent, VerificationRequestedEvent)):
        return event.owner
    if isinstance(event, DocumentVerifiedEvent):
        return event.verifier
    if isinstance(event, VerifierAddedEvent):
        return event.added_by
    if isinstance(event, VerifierRemovedEvent):
        return event.removed_by
    return None


class RegistryRepository:
    """Repository mapping registry state to its persisted tables."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_administrator(self, for_update: bool = False) -> str | None:
        """Return the administrator identity, or None before initialization.

        With ``for_update`` the configuration row stays locked until the
        transaction ends, so writers sharing the database run one at a time.
        """
        query = select(RegistryConfigModel.administrator)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def initialize(self, administrator: str) -> tuple[str, bool]:
        """Set up the registry with ``administrator`` as admin and sole verifier.

        Initialization happens once; later calls leave the stored
        administrator untouched.

        Args:
            administrator: Deploying identity

        Returns:
            Tuple of (effective administrator, created flag)
        """
        existing = await self.get_administrator()
        if existing is not None:
            return existing, False

        self.session.add(RegistryConfigModel(config_id=1, administrator=administrator))
        self.session.add(VerifierModel(identity=administrator))
        await self.session.flush()

        logger.info("registry_initialized", administrator=administrator)
        return administrator, True

    async def list_verifiers(self) -> list[str]:
        """Verifier identities in insertion order."""
        query = select(VerifierModel.identity).order_by(VerifierModel.position)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_document(
        self,
        fingerprint: bytes,
        for_update: bool = False,
    ) -> DocumentRecordModel | None:
        """Get a stored record by fingerprint, optionally locking its row."""
        query = select(DocumentRecordModel).where(
            DocumentRecordModel.fingerprint == to_hex(fingerprint)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def load_state(
        self,
        fingerprints: Iterable[bytes] = (),
        for_update: bool = False,
    ) -> RegistryState:
        """Load the state a single call needs.

        Administrator and verifiers are always loaded; records only for the
        given fingerprints, since every operation addresses at most one
        document. Mutating calls pass ``for_update`` so the configuration row
        and the addressed record are locked for the rest of the transaction.

        Raises:
            RegistryNotInitializedError: If no administrator was set up
        """
        administrator = await self.get_administrator(for_update=for_update)
        if administrator is None:
            raise RegistryNotInitializedError()

        state = RegistryState(
            administrator=administrator,
            verifiers=await self.list_verifiers(),
        )
        for fingerprint in fingerprints:
            model = await self.get_document(fingerprint, for_update=for_update)
            if model is not None:
                state.documents[fingerprint] = to_record(model)
        return state

    async def apply_events(
        self,
        state: RegistryState,
        events: list[RegistryEvent],
    ) -> None:
        """Persist the changes described by a call's notifications.

        Each notification maps to exactly one state change (or none, for
        verification requests) and is appended to the event log.

        Args:
            state: State after the call completed
            events: Notifications raised by the call, in order
        """
        for event in events:
            if isinstance(event, DocumentRegisteredEvent):
                record = state.documents[from_hex(event.fingerprint)]
                self.session.add(
                    DocumentRecordModel(
                        fingerprint=event.fingerprint,
                        document_hash=record.document_hash,
                        title=record.title,
                        owner=record.owner,
                        registered_at=record.registered_at,
                        status=record.status,
                        verifiers=list(record.verifiers),
                        rejection_reason=record.rejection_reason,
                    )
                )
            elif isinstance(event, DocumentVerifiedEvent):
                fingerprint = from_hex(event.fingerprint)
                record = state.documents[fingerprint]
                model = await self.get_document(fingerprint)
                if model is None:
                    raise RuntimeError(f"Verified document {event.fingerprint} is not stored")
                model.status = record.status
                model.verifiers = list(record.verifiers)
                model.rejection_reason = record.rejection_reason
            elif isinstance(event, VerifierAddedEvent):
                self.session.add(VerifierModel(identity=event.verifier))
            elif isinstance(event, VerifierRemovedEvent):
                await self.session.execute(
                    delete(VerifierModel).where(VerifierModel.identity == event.verifier)
                )

            self.session.add(
                RegistryEventModel(
                    event_type=event.event_type,
                    fingerprint=getattr(event, "fingerprint", None),
                    caller=_event_caller(event),
                    correlation_id=event.correlation_id,
                    payload=event.model_dump(mode="json"),
                )
            )
            # Flush per event so inserts and deletes hit the database in call order
            await self.session.flush()

    async def list_documents(
        self,
        status: VerificationStatus | None = None,
        owner: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[DocumentRecordModel]:
        """List stored records, newest registration first.

        Args:
            status: Optional status filter
            owner: Optional owner filter
            limit: Maximum records to return
            offset: Number of records to skip

        Returns:
            List of document models
        """
        query = select(DocumentRecordModel).order_by(
            DocumentRecordModel.registered_at.desc(),
            DocumentRecordModel.fingerprint,
        )
        if status is not None:
            query = query.where(DocumentRecordModel.status == status)
        if owner is not None:
            query = query.where(DocumentRecordModel.owner == owner)

        query = query.limit(limit).offset(offset)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_documents(
        self,
        status: VerificationStatus | None = None,
        owner: str | None = None,
    ) -> int:
        """Count stored records with optional filtering."""
        query = select(func.count()).select_from(DocumentRecordModel)
        if status is not None:
            query = query.where(DocumentRecordModel.status == status)
        if owner is not None:
            query = query.where(DocumentRecordModel.owner == owner)

        result = await self.session.execute(query)
        return result.scalar() or 0

    async def list_events(
        self,
        fingerprint: bytes | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[RegistryEventModel]:
        """List logged notifications in emission order.

        Args:
            fingerprint: Restrict to notifications about one document
            limit: Maximum entries to return
            offset: Number of entries to skip
        """
        query = select(RegistryEventModel).order_by(RegistryEventModel.sequence)
        if fingerprint is not None:
            query = query.where(RegistryEventModel.fingerprint == to_hex(fingerprint))

        query = query.limit(limit).offset(offset)
        result = await self.session.execute(query)
        return list(result.scalars().all())
