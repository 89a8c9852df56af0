"""Tests for Registry Repository operations."""

import pytest

from services.document_verification.app.core.errors import RegistryNotInitializedError
from services.document_verification.app.core.fingerprint import canonicalize, to_hex
from services.document_verification.app.core.verification import DocumentVerification
from services.document_verification.app.db.repository import RegistryRepository, to_record
from services.document_verification.tests.helpers import (
    ADMIN,
    DOC_HASH,
    FIXED_TIME,
    OTHER_HASH,
    OUTSIDER,
    OWNER,
    VERIFIER,
    fixed_clock,
)
from shared.schemas.document import VerificationStatus


async def _run(session, operation, fingerprints=()):
    """Load state, run an operation on the facade and persist its events."""
    repository = RegistryRepository(session)
    state = await repository.load_state(fingerprints)
    registry = DocumentVerification(state, clock=fixed_clock)
    operation(registry)
    await repository.apply_events(registry.state, registry.notifications.entries)
    await session.commit()
    return registry


class TestInitialize:
    """Tests for registry initialization."""

    @pytest.mark.asyncio
    async def test_initialize_sets_admin_and_verifier(self, db_session):
        repository = RegistryRepository(db_session)

        administrator, created = await repository.initialize(ADMIN)
        await db_session.commit()

        assert created is True
        assert administrator == ADMIN
        assert await repository.get_administrator() == ADMIN
        assert await repository.list_verifiers() == [ADMIN]

    @pytest.mark.asyncio
    async def test_initialize_is_one_shot(self, db_session, initialized_registry):
        repository = RegistryRepository(db_session)

        administrator, created = await repository.initialize(OUTSIDER)

        assert created is False
        assert administrator == ADMIN
        assert await repository.list_verifiers() == [ADMIN]

    @pytest.mark.asyncio
    async def test_load_state_before_initialize_fails(self, db_session):
        repository = RegistryRepository(db_session)

        with pytest.raises(RegistryNotInitializedError):
            await repository.load_state()


class TestApplyEvents:
    """Tests for persisting call results."""

    @pytest.mark.asyncio
    async def test_registration_persisted(self, db_session, initialized_registry):
        fingerprint = canonicalize(DOC_HASH)
        await _run(
            db_session,
            lambda r: r.register_document(OWNER, DOC_HASH, "Title"),
            [fingerprint],
        )

        repository = RegistryRepository(db_session)
        model = await repository.get_document(fingerprint)
        assert model is not None
        assert model.fingerprint == to_hex(fingerprint)
        assert model.owner == OWNER
        assert model.registered_at == FIXED_TIME
        assert model.status == VerificationStatus.PENDING

        state = await repository.load_state([fingerprint])
        assert state.documents[fingerprint].title == "Title"

    @pytest.mark.asyncio
    async def test_decision_persisted(self, db_session, initialized_registry):
        fingerprint = canonicalize(DOC_HASH)
        await _run(db_session, lambda r: r.register_document(OWNER, DOC_HASH, "T"), [fingerprint])
        await _run(
            db_session,
            lambda r: r.verify_document(ADMIN, DOC_HASH, False, "bad scan"),
            [fingerprint],
        )

        record = to_record(await RegistryRepository(db_session).get_document(fingerprint))
        assert record.status == VerificationStatus.REJECTED
        assert record.verifiers == [ADMIN]
        assert record.rejection_reason == "bad scan"

    @pytest.mark.asyncio
    async def test_membership_persisted_in_order(self, db_session, initialized_registry):
        await _run(db_session, lambda r: r.add_verifier(ADMIN, VERIFIER))
        await _run(db_session, lambda r: r.add_verifier(ADMIN, OUTSIDER))
        await _run(db_session, lambda r: r.remove_verifier(ADMIN, VERIFIER))

        repository = RegistryRepository(db_session)
        assert await repository.list_verifiers() == [ADMIN, OUTSIDER]

    @pytest.mark.asyncio
    async def test_readd_after_removal(self, db_session, initialized_registry):
        """Test a removed identity can be added again in the same call."""

        def churn(registry):
            registry.add_verifier(ADMIN, VERIFIER)
            registry.remove_verifier(ADMIN, VERIFIER)
            registry.add_verifier(ADMIN, VERIFIER)

        await _run(db_session, churn)

        assert await RegistryRepository(db_session).list_verifiers() == [ADMIN, VERIFIER]

    @pytest.mark.asyncio
    async def test_events_logged(self, db_session, initialized_registry):
        fingerprint = canonicalize(DOC_HASH)
        await _run(db_session, lambda r: r.register_document(OWNER, DOC_HASH, "T"), [fingerprint])
        await _run(db_session, lambda r: r.request_verification(OWNER, DOC_HASH), [fingerprint])
        await _run(db_session, lambda r: r.verify_document(ADMIN, DOC_HASH, True), [fingerprint])
        await _run(db_session, lambda r: r.add_verifier(ADMIN, VERIFIER))

        repository = RegistryRepository(db_session)
        events = await repository.list_events()
        assert [e.event_type for e in events] == [
            "DocumentRegistered",
            "VerificationRequested",
            "DocumentVerified",
            "VerifierAdded",
        ]
        assert [e.caller for e in events] == [OWNER, OWNER, ADMIN, ADMIN]
        assert events[-1].fingerprint is None
        assert events[2].payload["status"] == "approved"

        document_events = await repository.list_events(fingerprint=fingerprint)
        assert len(document_events) == 3


class TestListDocuments:
    """Tests for listing documents."""

    @pytest.mark.asyncio
    async def test_filters_and_counts(self, db_session, initialized_registry):
        for document_hash, owner in [(DOC_HASH, OWNER), (OTHER_HASH, OUTSIDER)]:
            await _run(
                db_session,
                lambda r, h=document_hash, o=owner: r.register_document(o, h, "T"),
                [canonicalize(document_hash)],
            )
        await _run(
            db_session,
            lambda r: r.verify_document(ADMIN, DOC_HASH, True),
            [canonicalize(DOC_HASH)],
        )

        repository = RegistryRepository(db_session)

        assert await repository.count_documents() == 2
        pending = await repository.list_documents(status=VerificationStatus.PENDING)
        assert [m.document_hash for m in pending] == [OTHER_HASH]
        owned = await repository.list_documents(owner=OWNER)
        assert [m.document_hash for m in owned] == [DOC_HASH]
        assert await repository.count_documents(status=VerificationStatus.APPROVED) == 1

    @pytest.mark.asyncio
    async def test_pagination(self, db_session, initialized_registry):
        hashes = [f"0x{i:04x}" for i in range(5)]
        for document_hash in hashes:
            await _run(
                db_session,
                lambda r, h=document_hash: r.register_document(OWNER, h, "T"),
                [canonicalize(document_hash)],
            )

        repository = RegistryRepository(db_session)
        first = await repository.list_documents(limit=2, offset=0)
        rest = await repository.list_documents(limit=10, offset=2)

        assert len(first) == 2
        assert len(rest) == 3
        assert {m.document_hash for m in first + rest} == set(hashes)
