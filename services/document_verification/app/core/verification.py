"""Document verification registry facade.

Combines access control, the document registry and the verification state
machine over a single ``RegistryState``. Every mutating operation takes the
caller identity explicitly; the substrate that runs the facade is
responsible for authenticating it, serializing calls and discarding the state
of a call that raised.

All checks of an operation run before its first mutation, so a rejected call
leaves the state untouched.
"""

from services.document_verification.app.core.access_control import AccessControl
from services.document_verification.app.core.errors import RejectionReasonRequiredError
from services.document_verification.app.core.fingerprint import canonicalize, to_hex
from services.document_verification.app.core.notifications import NotificationLog
from services.document_verification.app.core.registry import Clock, DocumentRegistry, unix_now
from services.document_verification.app.core.state import DocumentRecord, RegistryState
from services.document_verification.app.core.state_machine import StateMachine
from shared.schemas.document import VerificationStatus
from shared.schemas.events import DocumentVerifiedEvent
from shared.utils.logging import get_logger

logger = get_logger(__name__)


class DocumentVerification:
    """Authoritative document registry with a two-step verification workflow."""

    def __init__(
        self,
        state: RegistryState,
        clock: Clock = unix_now,
        notifications: NotificationLog | None = None,
    ):
        self.state = state
        self.notifications = notifications if notifications is not None else NotificationLog()
        self.access = AccessControl(state, self.notifications)
        self.documents = DocumentRegistry(state, self.notifications, clock)

    @classmethod
    def deploy(cls, deployer: str, clock: Clock = unix_now) -> "DocumentVerification":
        """Create a new registry administered and verified by ``deployer``."""
        return cls(RegistryState.initialize(deployer), clock=clock)

    # Read-only queries

    @property
    def administrator(self) -> str:
        return self.access.administrator

    def is_verifier(self, identity: str) -> bool:
        return self.access.is_verifier(identity)

    def verifiers(self) -> list[str]:
        return self.access.verifiers()

    def get_document(self, document_hash: str) -> DocumentRecord:
        return self.documents.get_document(document_hash)

    @staticmethod
    def canonicalize(document_hash: str) -> bytes:
        return canonicalize(document_hash)

    # Membership

    def add_verifier(self, caller: str, identity: str) -> None:
        self.access.add_verifier(caller, identity)

    def remove_verifier(self, caller: str, identity: str) -> None:
        self.access.remove_verifier(caller, identity)

    # Document workflow

    def register_document(self, caller: str, document_hash: str, title: str) -> None:
        self.documents.register_document(caller, document_hash, title)

    def request_verification(self, caller: str, document_hash: str) -> None:
        self.documents.request_verification(caller, document_hash)

    def verify_document(
        self,
        caller: str,
        document_hash: str,
        approve: bool,
        reason: str = "",
    ) -> None:
        """Approve or reject a pending document.

        Checks run in a fixed order, which decides the reported error when
        several preconditions fail at once: existence, caller authorization,
        terminal status, then rejection reason.

        Args:
            caller: Verifier rendering the decision
            document_hash: Hash string of the document
            approve: True to approve, False to reject
            reason: Justification, mandatory when rejecting

        Raises:
            DocumentDoesNotExistError: If the document is not registered
            NotAuthorizedVerifierError: If caller is not a verifier
            VerificationCompletedError: If a decision was already recorded
            RejectionReasonRequiredError: If rejecting without a reason
        """
        record = self.documents.require_document(document_hash)
        self.access.require_verifier(caller)

        target = StateMachine.decision_status(approve)
        StateMachine.validate_transition(record.status, target)

        if not approve and not reason:
            raise RejectionReasonRequiredError(document_hash=document_hash)

        stored_reason = reason if target == VerificationStatus.REJECTED else ""
        record.status = target
        record.verifiers.append(caller)
        record.rejection_reason = stored_reason

        logger.info(
            "document_verified",
            fingerprint=to_hex(record.fingerprint),
            status=target.value,
            verifier=caller,
        )
        self.notifications.emit(
            DocumentVerifiedEvent(
                fingerprint=to_hex(record.fingerprint),
                document_hash=record.document_hash,
                status=target,
                verifier=caller,
                reason=stored_reason,
            )
        )
