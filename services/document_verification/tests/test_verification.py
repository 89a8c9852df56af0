"""Tests for document registration and the verification workflow."""

import pytest

from services.document_verification.app.core.errors import (
    DocumentAlreadyRegisteredError,
    DocumentDoesNotExistError,
    EmptyHashError,
    NotAuthorizedVerifierError,
    OnlyOwnerCanRequestError,
    RejectionReasonRequiredError,
    VerificationCompletedError,
)
from services.document_verification.app.core.fingerprint import ZERO_FINGERPRINT, canonicalize, to_hex
from services.document_verification.app.core.state import ZERO_IDENTITY
from services.document_verification.tests.helpers import (
    ADMIN,
    FIXED_TIME,
    OTHER_HASH,
    OUTSIDER,
    OWNER,
    VERIFIER,
)
from shared.schemas.document import VerificationStatus


@pytest.fixture
def staffed_registry(registry):
    """Registry with VERIFIER added by the administrator."""
    registry.add_verifier(ADMIN, VERIFIER)
    return registry


class TestRegisterDocument:
    """Tests for register_document."""

    def test_register_creates_pending_record(self, registry):
        registry.register_document(OWNER, "0xabc", "T")

        record = registry.get_document("0xabc")
        assert record.exists
        assert record.fingerprint == canonicalize("0xabc")
        assert record.document_hash == "0xabc"
        assert record.title == "T"
        assert record.owner == OWNER
        assert record.registered_at == FIXED_TIME
        assert record.status == VerificationStatus.PENDING
        assert record.verifiers == []
        assert record.rejection_reason == ""

    def test_register_emits_notification(self, registry):
        registry.register_document(OWNER, "0xabc", "T")

        [event] = registry.notifications.entries
        assert event.event_type == "DocumentRegistered"
        assert event.fingerprint == to_hex(canonicalize("0xabc"))
        assert event.title == "T"
        assert event.owner == OWNER

    def test_anyone_may_register(self, registry):
        """Test registration needs no role."""
        registry.register_document(OUTSIDER, "0xabc", "")
        assert registry.get_document("0xabc").owner == OUTSIDER

    def test_empty_hash_rejected(self, registry):
        with pytest.raises(EmptyHashError):
            registry.register_document(OWNER, "", "T")

        assert len(registry.notifications) == 0
        assert registry.state.documents == {}

    def test_duplicate_registration_fails_regardless_of_title(self, registry):
        registry.register_document(OWNER, "0xabc", "T")

        with pytest.raises(DocumentAlreadyRegisteredError):
            registry.register_document(OWNER, "0xabc", "T")
        with pytest.raises(DocumentAlreadyRegisteredError):
            registry.register_document(OUTSIDER, "0xabc", "Another title")

        record = registry.get_document("0xabc")
        assert record.owner == OWNER
        assert record.title == "T"
        assert len(registry.notifications) == 1

    def test_case_variants_are_distinct(self, registry):
        registry.register_document(OWNER, "0xABC", "upper")
        registry.register_document(OWNER, "0xabc", "lower")

        assert registry.get_document("0xABC").title == "upper"
        assert registry.get_document("0xabc").title == "lower"


class TestGetDocument:
    """Tests for get_document."""

    def test_unregistered_returns_zero_record(self, registry):
        record = registry.get_document("0xnothing")

        assert not record.exists
        assert record.fingerprint == ZERO_FINGERPRINT
        assert record.document_hash == ""
        assert record.title == ""
        assert record.owner == ZERO_IDENTITY
        assert record.registered_at == 0
        assert record.status == VerificationStatus.PENDING
        assert record.verifiers == []
        assert record.rejection_reason == ""

    def test_empty_hash_returns_zero_record(self, registry):
        record = registry.get_document("")

        assert not record.exists
        assert record.fingerprint == ZERO_FINGERPRINT

    def test_returned_record_is_detached(self, registry):
        """Test mutating a returned record does not change the registry."""
        registry.register_document(OWNER, "0xabc", "T")

        record = registry.get_document("0xabc")
        record.verifiers.append(OUTSIDER)
        record.status = VerificationStatus.APPROVED

        stored = registry.get_document("0xabc")
        assert stored.verifiers == []
        assert stored.status == VerificationStatus.PENDING


class TestRequestVerification:
    """Tests for request_verification."""

    def test_owner_request_emits_without_state_change(self, registry):
        registry.register_document(OWNER, "0xabc", "T")
        before = registry.get_document("0xabc")

        registry.request_verification(OWNER, "0xabc")

        assert registry.get_document("0xabc") == before
        event = registry.notifications.entries[-1]
        assert event.event_type == "VerificationRequested"
        assert event.owner == OWNER

    def test_non_owner_rejected(self, registry):
        registry.register_document(OWNER, "0xabc", "T")

        with pytest.raises(OnlyOwnerCanRequestError):
            registry.request_verification(OUTSIDER, "0xabc")

    def test_unknown_document_rejected(self, registry):
        with pytest.raises(DocumentDoesNotExistError):
            registry.request_verification(OWNER, OTHER_HASH)

    def test_allowed_after_decision(self, registry):
        """Test requesting is notification-only and not gated on status."""
        registry.register_document(OWNER, "0xabc", "T")
        registry.verify_document(ADMIN, "0xabc", True)

        registry.request_verification(OWNER, "0xabc")

        assert registry.notifications.entries[-1].event_type == "VerificationRequested"


class TestVerifyDocument:
    """Tests for verify_document."""

    def test_approve_then_second_decision_fails(self, staffed_registry):
        registry = staffed_registry
        registry.register_document(OWNER, "0xabc", "T")

        registry.verify_document(VERIFIER, "0xabc", True, "")

        record = registry.get_document("0xabc")
        assert record.status == VerificationStatus.APPROVED
        assert record.verifiers == [VERIFIER]

        for approve, reason in [(True, ""), (False, "changed my mind"), (False, "")]:
            with pytest.raises(VerificationCompletedError):
                registry.verify_document(VERIFIER, "0xabc", approve, reason)

        assert registry.get_document("0xabc") == record

    def test_reject_requires_reason(self, staffed_registry):
        registry = staffed_registry
        registry.register_document(OWNER, "0xdef", "T")

        with pytest.raises(RejectionReasonRequiredError):
            registry.verify_document(VERIFIER, "0xdef", False, "")

        assert registry.get_document("0xdef").status == VerificationStatus.PENDING

        registry.verify_document(VERIFIER, "0xdef", False, "bad scan")

        record = registry.get_document("0xdef")
        assert record.status == VerificationStatus.REJECTED
        assert record.rejection_reason == "bad scan"
        assert record.verifiers == [VERIFIER]

    def test_approval_ignores_reason(self, registry):
        registry.register_document(OWNER, "0xabc", "T")

        registry.verify_document(ADMIN, "0xabc", True, "looks fine")

        assert registry.get_document("0xabc").rejection_reason == ""
        assert registry.notifications.entries[-1].reason == ""

    def test_decision_notification(self, registry):
        registry.register_document(OWNER, "0xabc", "T")
        registry.verify_document(ADMIN, "0xabc", False, "unreadable")

        event = registry.notifications.entries[-1]
        assert event.event_type == "DocumentVerified"
        assert event.status == VerificationStatus.REJECTED
        assert event.verifier == ADMIN
        assert event.reason == "unreadable"

    def test_non_verifier_rejected(self, registry):
        registry.register_document(OWNER, "0xabc", "T")

        with pytest.raises(NotAuthorizedVerifierError):
            registry.verify_document(OWNER, "0xabc", True)

    def test_existence_checked_before_authorization(self, registry):
        with pytest.raises(DocumentDoesNotExistError):
            registry.verify_document(OUTSIDER, "0xmissing", True)

    def test_authorization_checked_before_terminality(self, registry):
        registry.register_document(OWNER, "0xabc", "T")
        registry.verify_document(ADMIN, "0xabc", True)

        with pytest.raises(NotAuthorizedVerifierError):
            registry.verify_document(OUTSIDER, "0xabc", True)

    def test_terminality_checked_before_reason(self, registry):
        registry.register_document(OWNER, "0xabc", "T")
        registry.verify_document(ADMIN, "0xabc", True)

        with pytest.raises(VerificationCompletedError):
            registry.verify_document(ADMIN, "0xabc", False, "")

    def test_removed_verifier_loses_rights(self, staffed_registry):
        registry = staffed_registry
        registry.register_document(OWNER, "0xabc", "T")
        registry.remove_verifier(ADMIN, VERIFIER)

        with pytest.raises(NotAuthorizedVerifierError):
            registry.verify_document(VERIFIER, "0xabc", True)

    def test_failed_call_emits_nothing(self, registry):
        registry.register_document(OWNER, "0xabc", "T")
        count = len(registry.notifications)

        with pytest.raises(RejectionReasonRequiredError):
            registry.verify_document(ADMIN, "0xabc", False, "")

        assert len(registry.notifications) == count


class TestNotificationOrdering:
    """Tests that notifications follow the state change they report."""

    def test_subscriber_reads_updated_state(self, registry):
        seen = []

        def on_event(event):
            if event.event_type == "DocumentVerified":
                seen.append(registry.get_document("0xabc").status)

        registry.notifications.subscribe(on_event)
        registry.register_document(OWNER, "0xabc", "T")
        registry.verify_document(ADMIN, "0xabc", True)

        assert seen == [VerificationStatus.APPROVED]
