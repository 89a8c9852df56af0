"""Database models and repository."""

from services.document_verification.app.db.models import (
    Base,
    DocumentRecordModel,
    RegistryConfigModel,
    RegistryEventModel,
    VerifierModel,
)
from services.document_verification.app.db.repository import RegistryRepository

__all__ = [
    "Base",
    "DocumentRecordModel",
    "RegistryConfigModel",
    "RegistryEventModel",
    "VerifierModel",
    "RegistryRepository",
]
