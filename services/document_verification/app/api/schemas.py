"""Request and response schemas for Document Verification API."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from shared.schemas.document import DocumentRecordSchema


class DocumentRegistrationRequest(BaseModel):
    """Request schema for document registration.

    An empty ``document_hash`` is accepted here and rejected by the registry
    with EMPTY_HASH.
    """

    document_hash: str = Field(..., description="Content hash string of the document")
    title: str = Field("", description="Document title")


class VerificationRequest(BaseModel):
    """Request schema for asking verifiers to review a document."""

    document_hash: str = Field(..., description="Content hash string of the document")


class VerificationDecisionRequest(BaseModel):
    """Request schema for approving or rejecting a document."""

    document_hash: str = Field(..., description="Content hash string of the document")
    approve: bool = Field(..., description="True to approve, False to reject")
    reason: str = Field("", description="Justification (required when rejecting)")


class VerificationRequestedResponse(BaseModel):
    """Response schema for a verification request."""

    fingerprint: str
    owner: str
    status: Literal["requested"] = "requested"


class DocumentListResponse(BaseModel):
    """Offset-paginated list of document records."""

    items: list[DocumentRecordSchema] = Field(default_factory=list)
    total: int = Field(..., description="Total number of records matching filters")
    limit: int = Field(..., description="Maximum items per page")
    offset: int = Field(..., description="Number of records skipped")


class RegistryEventResponse(BaseModel):
    """Logged notification."""

    sequence: int
    event_type: str
    fingerprint: Optional[str] = None
    caller: Optional[str] = None
    correlation_id: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class VerifierRequest(BaseModel):
    """Request schema for adding a verifier."""

    identity: str = Field(..., min_length=1, description="Identity to grant verifier rights")


class VerifierStatusResponse(BaseModel):
    """Membership check response."""

    identity: str
    is_verifier: bool


class VerifierListResponse(BaseModel):
    """Current verifier set."""

    administrator: str
    verifiers: list[str] = Field(default_factory=list)


class AdministratorResponse(BaseModel):
    """Administrator identity response."""

    administrator: str


class FingerprintResponse(BaseModel):
    """Canonical fingerprint of a hash string."""

    document_hash: str
    fingerprint: str
    is_zero: bool


class ErrorResponse(BaseModel):
    """Standardized error response schema."""

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(
        None, description="Additional error details"
    )
    correlation_id: Optional[str] = Field(
        None, description="Request correlation ID for tracing"
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"]
    service: str
    version: str = "0.1.0"


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    checks: dict[str, bool] = Field(default_factory=dict)

