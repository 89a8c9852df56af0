"""Event schemas for registry notifications."""

from datetime import datetime, timezone
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from shared.schemas.document import VerificationStatus


def utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


class BaseEvent(BaseModel):
    """Base event schema."""

    correlation_id: Optional[str] = Field(
        default=None, description="Request correlation ID for tracing"
    )
    timestamp: datetime = Field(default_factory=utc_now)


class DocumentRegisteredEvent(BaseEvent):
    """Event raised when a new document is registered."""

    event_type: Literal["DocumentRegistered"] = "DocumentRegistered"
    fingerprint: str
    document_hash: str
    title: str
    owner: str


class VerificationRequestedEvent(BaseEvent):
    """Event raised when an owner asks the verifiers to review a document."""

    event_type: Literal["VerificationRequested"] = "VerificationRequested"
    fingerprint: str
    document_hash: str
    owner: str


class DocumentVerifiedEvent(BaseEvent):
    """Event raised when a verifier approves or rejects a document."""

    event_type: Literal["DocumentVerified"] = "DocumentVerified"
    fingerprint: str
    document_hash: str
    status: VerificationStatus
    verifier: str
    reason: str = ""


class VerifierAddedEvent(BaseEvent):
    """Event raised when the administrator adds a verifier."""

    event_type: Literal["VerifierAdded"] = "VerifierAdded"
    verifier: str
    added_by: str


class VerifierRemovedEvent(BaseEvent):
    """Event raised when the administrator removes a verifier."""

    event_type: Literal["VerifierRemoved"] = "VerifierRemoved"
    verifier: str
    removed_by: str


RegistryEvent = Union[
    DocumentRegisteredEvent,
    VerificationRequestedEvent,
    DocumentVerifiedEvent,
    VerifierAddedEvent,
    VerifierRemovedEvent,
]
