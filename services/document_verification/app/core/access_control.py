"""Administrator and verifier membership rules."""

from services.document_verification.app.core.errors import (
    AlreadyVerifierError,
    CannotRemoveLastVerifierError,
    NotAuthorizedError,
    NotAuthorizedVerifierError,
    NotVerifierError,
)
from services.document_verification.app.core.notifications import NotificationLog
from services.document_verification.app.core.state import RegistryState
from shared.schemas.events import VerifierAddedEvent, VerifierRemovedEvent
from shared.utils.logging import get_logger

logger = get_logger(__name__)


class AccessControl:
    """Tracks one administrator and a non-empty set of verifiers.

    Only the administrator changes membership, and the last verifier can never
    be removed, so there is always someone eligible to decide on documents.
    """

    def __init__(self, state: RegistryState, notifications: NotificationLog):
        """Initialize access control over a registry state.

        Args:
            state: Registry state holding administrator and verifiers
            notifications: Log receiving membership notifications
        """
        self.state = state
        self.notifications = notifications

    @property
    def administrator(self) -> str:
        return self.state.administrator

    def is_administrator(self, identity: str) -> bool:
        return identity == self.state.administrator

    def is_verifier(self, identity: str) -> bool:
        """Pure membership check."""
        return identity in self.state.verifiers

    def verifiers(self) -> list[str]:
        """Verifier identities in the order they were added."""
        return list(self.state.verifiers)

    def require_administrator(self, caller: str) -> None:
        """Raise NotAuthorizedError unless caller is the administrator."""
        if not self.is_administrator(caller):
            raise NotAuthorizedError(caller=caller)

    def require_verifier(self, caller: str) -> None:
        """Raise NotAuthorizedVerifierError unless caller is a verifier."""
        if not self.is_verifier(caller):
            raise NotAuthorizedVerifierError(caller=caller)

    def add_verifier(self, caller: str, identity: str) -> None:
        """Add a verifier.

        Args:
            caller: Identity invoking the operation
            identity: Identity to grant verifier rights

        Raises:
            NotAuthorizedError: If caller is not the administrator
            AlreadyVerifierError: If identity is already a verifier
        """
        self.require_administrator(caller)
        if self.is_verifier(identity):
            raise AlreadyVerifierError(identity=identity)

        self.state.verifiers.append(identity)

        logger.info("verifier_added", verifier=identity, added_by=caller)
        self.notifications.emit(VerifierAddedEvent(verifier=identity, added_by=caller))

    def remove_verifier(self, caller: str, identity: str) -> None:
        """Remove a verifier.

        Args:
            caller: Identity invoking the operation
            identity: Identity losing verifier rights

        Raises:
            NotAuthorizedError: If caller is not the administrator
            NotVerifierError: If identity is not a verifier
            CannotRemoveLastVerifierError: If identity is the only verifier left
        """
        self.require_administrator(caller)
        if not self.is_verifier(identity):
            raise NotVerifierError(identity=identity)
        if len(self.state.verifiers) <= 1:
            raise CannotRemoveLastVerifierError(identity=identity)

        self.state.verifiers.remove(identity)

        logger.info("verifier_removed", verifier=identity, removed_by=caller)
        self.notifications.emit(VerifierRemovedEvent(verifier=identity, removed_by=caller))
