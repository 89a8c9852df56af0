"""Registry state container and document records."""

from dataclasses import dataclass, field, replace

from services.document_verification.app.core.fingerprint import ZERO_FINGERPRINT, to_hex
from shared.schemas.document import DocumentRecordSchema, VerificationStatus

ZERO_IDENTITY = "0x0000000000000000000000000000000000000000"


@dataclass
class DocumentRecord:
    """Persisted state for one registered document."""

    fingerprint: bytes
    document_hash: str
    title: str
    owner: str
    registered_at: int
    status: VerificationStatus = VerificationStatus.PENDING
    verifiers: list[str] = field(default_factory=list)
    rejection_reason: str = ""
    exists: bool = True

    @classmethod
    def empty(cls) -> "DocumentRecord":
        """Zero-valued record returned for unregistered fingerprints."""
        return cls(
            fingerprint=ZERO_FINGERPRINT,
            document_hash="",
            title="",
            owner=ZERO_IDENTITY,
            registered_at=0,
            exists=False,
        )

    def copy(self) -> "DocumentRecord":
        """Detached copy safe to hand out to readers."""
        return replace(self, verifiers=list(self.verifiers))

    def to_schema(self) -> DocumentRecordSchema:
        return DocumentRecordSchema(
            fingerprint=to_hex(self.fingerprint),
            document_hash=self.document_hash,
            title=self.title,
            owner=self.owner,
            registered_at=self.registered_at,
            exists=self.exists,
            status=self.status,
            verifiers=list(self.verifiers),
            rejection_reason=self.rejection_reason,
        )


@dataclass
class RegistryState:
    """Explicitly owned authoritative state of one registry.

    Holds the administrator, the ordered verifier set (never empty) and the
    fingerprint -> record mapping. All core components read and mutate this
    object; nothing is kept in module globals.
    """

    administrator: str
    verifiers: list[str]
    documents: dict[bytes, DocumentRecord] = field(default_factory=dict)

    @classmethod
    def initialize(cls, deployer: str) -> "RegistryState":
        """Create state with the deployer as administrator and sole verifier."""
        if not deployer:
            raise ValueError("deployer identity must not be empty")
        return cls(administrator=deployer, verifiers=[deployer])
