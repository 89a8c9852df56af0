"""SQLAlchemy models for Document Verification."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime,
    Enum,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from shared.schemas.document import VerificationStatus


def utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


class RegistryConfigModel(Base):
    """SQLAlchemy model for the singleton registry_config row."""

    __tablename__ = "registry_config"

    config_id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    administrator: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )


class VerifierModel(Base):
    """SQLAlchemy model for registry_verifiers table."""

    __tablename__ = "registry_verifiers"

    position: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    identity: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )


class DocumentRecordModel(Base):
    """SQLAlchemy model for registry_documents table."""

    __tablename__ = "registry_documents"

    fingerprint: Mapped[str] = mapped_column(String(66), primary_key=True)
    document_hash: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    owner: Mapped[str] = mapped_column(String(255), nullable=False)
    registered_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[VerificationStatus] = mapped_column(
        Enum(
            VerificationStatus,
            name="verification_status",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=VerificationStatus.PENDING,
        nullable=False,
    )
    verifiers: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    rejection_reason: Mapped[str] = mapped_column(Text, default="", nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_registry_documents_status", "status"),
        Index("idx_registry_documents_owner", "owner"),
        Index("idx_registry_documents_registered_at", "registered_at"),
    )


class RegistryEventModel(Base):
    """SQLAlchemy model for the append-only registry_events log."""

    __tablename__ = "registry_events"

    sequence: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    fingerprint: Mapped[str | None] = mapped_column(String(66), nullable=True)
    caller: Mapped[str | None] = mapped_column(String(255), nullable=True)
    correlation_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_registry_events_fingerprint", "fingerprint"),
        Index("idx_registry_events_event_type", "event_type"),
    )
