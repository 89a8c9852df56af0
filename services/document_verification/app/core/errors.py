"""Named error conditions raised by the registry.

Each error names exactly one violated precondition. Errors propagate to the
caller unchanged; the registry never retries or swallows them.
"""

from typing import Any

from shared.schemas.document import VerificationStatus


class RegistryError(Exception):
    """Base class for rejected registry operations."""

    error_code: str = "REGISTRY_ERROR"
    default_message: str = "Registry operation rejected"

    def __init__(self, message: str | None = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class EmptyHashError(RegistryError):
    """Raised when registering a hash that canonicalizes to the zero fingerprint."""

    error_code = "EMPTY_HASH"
    default_message = "Document hash must not be empty"


class DocumentAlreadyRegisteredError(RegistryError):
    """Raised when a record already exists for the fingerprint."""

    error_code = "DOCUMENT_ALREADY_REGISTERED"
    default_message = "Document is already registered"


class DocumentDoesNotExistError(RegistryError):
    """Raised when no record exists for the fingerprint."""

    error_code = "DOCUMENT_DOES_NOT_EXIST"
    default_message = "Document does not exist"


class OnlyOwnerCanRequestError(RegistryError):
    """Raised when someone other than the owner requests verification."""

    error_code = "ONLY_OWNER_CAN_REQUEST"
    default_message = "Only the document owner can request verification"


class NotAuthorizedVerifierError(RegistryError):
    """Raised when a non-verifier tries to decide on a document."""

    error_code = "NOT_AUTHORIZED_VERIFIER"
    default_message = "Caller is not an authorized verifier"


class InvalidTransitionError(RegistryError):
    """Raised when an invalid status transition is attempted."""

    error_code = "INVALID_TRANSITION"

    def __init__(
        self,
        current_state: VerificationStatus,
        target_state: VerificationStatus,
        message: str | None = None,
    ):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            message or f"Invalid transition from {current_state.value} to {target_state.value}",
            current_state=current_state.value,
            target_state=target_state.value,
        )


class VerificationCompletedError(InvalidTransitionError):
    """Raised when a decision was already recorded for the document."""

    error_code = "VERIFICATION_COMPLETED"

    def __init__(
        self,
        current_state: VerificationStatus,
        target_state: VerificationStatus,
    ):
        super().__init__(
            current_state,
            target_state,
            message=f"Verification already completed with status {current_state.value}",
        )


class RejectionReasonRequiredError(RegistryError):
    """Raised when a rejection carries no reason."""

    error_code = "REJECTION_REASON_REQUIRED"
    default_message = "A reason is required to reject a document"


class AlreadyVerifierError(RegistryError):
    """Raised when adding an identity that is already a verifier."""

    error_code = "ALREADY_VERIFIER"
    default_message = "Identity is already a verifier"


class NotVerifierError(RegistryError):
    """Raised when removing an identity that is not a verifier."""

    error_code = "NOT_VERIFIER"
    default_message = "Identity is not a verifier"


class CannotRemoveLastVerifierError(RegistryError):
    """Raised when a removal would leave the verifier set empty."""

    error_code = "CANNOT_REMOVE_LAST_VERIFIER"
    default_message = "Cannot remove the last verifier"


class NotAuthorizedError(RegistryError):
    """Raised when a non-administrator manages verifier membership."""

    error_code = "NOT_AUTHORIZED"
    default_message = "Caller is not the administrator"


class RegistryNotInitializedError(RegistryError):
    """Raised when no administrator has been set up for the registry."""

    error_code = "REGISTRY_NOT_INITIALIZED"
    default_message = "Registry has not been initialized"
