"""Core business logic for Document Verification."""

from services.document_verification.app.core.access_control import AccessControl
from services.document_verification.app.core.errors import (
    AlreadyVerifierError,
    CannotRemoveLastVerifierError,
    DocumentAlreadyRegisteredError,
    DocumentDoesNotExistError,
    EmptyHashError,
    InvalidTransitionError,
    NotAuthorizedError,
    NotAuthorizedVerifierError,
    NotVerifierError,
    OnlyOwnerCanRequestError,
    RegistryError,
    RegistryNotInitializedError,
    RejectionReasonRequiredError,
    VerificationCompletedError,
)
from services.document_verification.app.core.fingerprint import (
    ZERO_FINGERPRINT,
    canonicalize,
)
from services.document_verification.app.core.notifications import NotificationLog
from services.document_verification.app.core.registry import DocumentRegistry
from services.document_verification.app.core.state import (
    ZERO_IDENTITY,
    DocumentRecord,
    RegistryState,
)
from services.document_verification.app.core.state_machine import StateMachine
from services.document_verification.app.core.verification import DocumentVerification

__all__ = [
    "AccessControl",
    "DocumentRegistry",
    "DocumentVerification",
    "NotificationLog",
    "StateMachine",
    "DocumentRecord",
    "RegistryState",
    "ZERO_FINGERPRINT",
    "ZERO_IDENTITY",
    "canonicalize",
    "RegistryError",
    "RegistryNotInitializedError",
    "EmptyHashError",
    "DocumentAlreadyRegisteredError",
    "DocumentDoesNotExistError",
    "OnlyOwnerCanRequestError",
    "NotAuthorizedVerifierError",
    "InvalidTransitionError",
    "VerificationCompletedError",
    "RejectionReasonRequiredError",
    "AlreadyVerifierError",
    "NotVerifierError",
    "CannotRemoveLastVerifierError",
    "NotAuthorizedError",
]
