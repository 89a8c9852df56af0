"""Document schema models."""

from enum import Enum

from pydantic import BaseModel, Field


class VerificationStatus(str, Enum):
    """Document verification status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DocumentRecordSchema(BaseModel):
    """Externally visible document record.

    Absent documents are represented by the zero record (``exists=False``)
    rather than an error.
    """

    fingerprint: str = Field(..., description="0x-prefixed Keccak-256 fingerprint")
    document_hash: str = Field(..., description="Hash string as registered")
    title: str
    owner: str
    registered_at: int = Field(..., description="Registration time (Unix seconds)")
    exists: bool
    status: VerificationStatus = VerificationStatus.PENDING
    verifiers: list[str] = Field(default_factory=list)
    rejection_reason: str = ""
