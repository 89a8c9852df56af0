"""Document registry keyed by canonical fingerprint."""

import time
from typing import Callable

from services.document_verification.app.core.errors import (
    DocumentAlreadyRegisteredError,
    DocumentDoesNotExistError,
    EmptyHashError,
    OnlyOwnerCanRequestError,
)
from services.document_verification.app.core.fingerprint import canonicalize, is_zero, to_hex
from services.document_verification.app.core.notifications import NotificationLog
from services.document_verification.app.core.state import DocumentRecord, RegistryState
from shared.schemas.events import DocumentRegisteredEvent, VerificationRequestedEvent
from shared.utils.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], int]


def unix_now() -> int:
    """Current time in whole Unix seconds."""
    return int(time.time())


class DocumentRegistry:
    """Creates and looks up document records.

    Records are created only by registration and are never deleted.
    """

    def __init__(
        self,
        state: RegistryState,
        notifications: NotificationLog,
        clock: Clock = unix_now,
    ):
        """Initialize the registry.

        Args:
            state: Registry state holding the record mapping
            notifications: Log receiving registry notifications
            clock: Source of registration timestamps
        """
        self.state = state
        self.notifications = notifications
        self.clock = clock

    def find(self, document_hash: str) -> DocumentRecord | None:
        """Return the live record for a hash string, or None."""
        return self.state.documents.get(canonicalize(document_hash))

    def require_document(self, document_hash: str) -> DocumentRecord:
        """Return the live record or raise DocumentDoesNotExistError."""
        record = self.find(document_hash)
        if record is None:
            raise DocumentDoesNotExistError(document_hash=document_hash)
        return record

    def register_document(self, caller: str, document_hash: str, title: str) -> None:
        """Register a document as pending, owned by the caller.

        Args:
            caller: Identity registering the document
            document_hash: Externally supplied content hash string
            title: Free-text title

        Raises:
            EmptyHashError: If the hash canonicalizes to the zero fingerprint
            DocumentAlreadyRegisteredError: If the fingerprint is already taken
        """
        fingerprint = canonicalize(document_hash)
        if is_zero(fingerprint):
            raise EmptyHashError()
        if fingerprint in self.state.documents:
            raise DocumentAlreadyRegisteredError(
                document_hash=document_hash,
                fingerprint=to_hex(fingerprint),
            )

        record = DocumentRecord(
            fingerprint=fingerprint,
            document_hash=document_hash,
            title=title,
            owner=caller,
            registered_at=self.clock(),
        )
        self.state.documents[fingerprint] = record

        logger.info(
            "document_registered",
            fingerprint=to_hex(fingerprint),
            owner=caller,
        )
        self.notifications.emit(
            DocumentRegisteredEvent(
                fingerprint=to_hex(fingerprint),
                document_hash=document_hash,
                title=title,
                owner=caller,
            )
        )

    def get_document(self, document_hash: str) -> DocumentRecord:
        """Return a copy of the record, or the zero record if absent.

        Never raises for unknown input.
        """
        record = self.state.documents.get(canonicalize(document_hash))
        if record is None:
            return DocumentRecord.empty()
        return record.copy()

    def request_verification(self, caller: str, document_hash: str) -> None:
        """Signal the verifiers that the owner wants a decision.

        The record is not modified; this only raises a notification.

        Raises:
            DocumentDoesNotExistError: If the document is not registered
            OnlyOwnerCanRequestError: If caller is not the owner
        """
        record = self.require_document(document_hash)
        if caller != record.owner:
            raise OnlyOwnerCanRequestError(caller=caller, owner=record.owner)

        logger.info(
            "verification_requested",
            fingerprint=to_hex(record.fingerprint),
            owner=record.owner,
        )
        self.notifications.emit(
            VerificationRequestedEvent(
                fingerprint=to_hex(record.fingerprint),
                document_hash=record.document_hash,
                owner=record.owner,
            )
        )
