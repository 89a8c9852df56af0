"""Shared Pydantic schemas for registry services."""

from shared.schemas.document import (
    DocumentRecordSchema,
    VerificationStatus,
)
from shared.schemas.events import (
    DocumentRegisteredEvent,
    DocumentVerifiedEvent,
    RegistryEvent,
    VerificationRequestedEvent,
    VerifierAddedEvent,
    VerifierRemovedEvent,
)

__all__ = [
    "DocumentRecordSchema",
    "VerificationStatus",
    "DocumentRegisteredEvent",
    "DocumentVerifiedEvent",
    "RegistryEvent",
    "VerificationRequestedEvent",
    "VerifierAddedEvent",
    "VerifierRemovedEvent",
]
