"""Unit tests for ImportService batch reconciliation. In-memory repo, no Neo4j."""

import pytest

from contactbook.application import (
    DuplicateKeyError,
    ImportCandidate,
    ImportService,
    ImportSource,
    StoreUnavailable,
)
from contactbook.application.import_service import (
    MISSING_FIELDS_REASON,
    NAME_EXISTS_REASON,
)
from contactbook.domain import Contact
from contactbook.infrastructure import InMemoryContactRepository


class RecordingRepository(InMemoryContactRepository):
    """Counts insert calls so tests can assert what reached the store."""

    def __init__(self) -> None:
        super().__init__()
        self.inserted: list[Contact] = []

    def insert(self, contact: Contact) -> Contact:
        self.inserted.append(contact)
        return super().insert(contact)


class RacingRepository(InMemoryContactRepository):
    """Lookup never sees the conflicting row, but the unique key still rejects it."""

    def find_by_normalized_phone(self, owner_id, key, *, exclude_id=None):
        return None


class UnreachableRepository(InMemoryContactRepository):
    def __init__(self, fail_after: int) -> None:
        super().__init__()
        self._remaining = fail_after

    def insert(self, contact: Contact) -> Contact:
        if self._remaining <= 0:
            raise StoreUnavailable("connection refused")
        self._remaining -= 1
        return super().insert(contact)


def _candidate(name, phone, source=ImportSource.BULK_API, **kwargs) -> ImportCandidate:
    return ImportCandidate(name=name, phone=phone, source=source, **kwargs)


def test_all_valid_candidates_are_added() -> None:
    repo = InMemoryContactRepository()
    service = ImportService(repo)
    batch = [
        _candidate("Ann", "111"),
        _candidate("Bob", "222"),
        _candidate("Cid", "333"),
    ]
    summary = service.reconcile("u1", batch)
    assert summary.added_count == 3
    assert summary.skipped_count == 0
    assert [c.name for c in repo.list_all("u1")] == ["Ann", "Bob", "Cid"]


def test_empty_batch_returns_empty_summary() -> None:
    summary = ImportService(InMemoryContactRepository()).reconcile("u1", [])
    assert summary.added == []
    assert summary.skipped == []


def test_same_phone_in_one_batch_first_wins() -> None:
    service = ImportService(InMemoryContactRepository())
    first = _candidate("Ann", "+1 555 111 2222")
    second = _candidate("Ann Again", "1-555-111-2222")
    summary = service.reconcile("u1", [first, second])
    assert [c.name for c in summary.added] == ["Ann"]
    assert summary.skipped_count == 1
    assert summary.skipped[0].candidate == second
    assert summary.skipped[0].reason == "phone exists"


def test_order_decides_which_duplicate_is_added() -> None:
    service = ImportService(InMemoryContactRepository())
    summary = service.reconcile(
        "u1", [_candidate("Second", "(555) 000"), _candidate("First", "555000")]
    )
    assert [c.name for c in summary.added] == ["Second"]


def test_missing_name_or_phone_never_reaches_store() -> None:
    repo = RecordingRepository()
    service = ImportService(repo)
    batch = [
        _candidate(None, "111"),
        _candidate("Ann", None),
        _candidate("   ", "222"),
        _candidate("Bob", "  "),
    ]
    summary = service.reconcile("u1", batch)
    assert summary.added_count == 0
    assert [s.reason for s in summary.skipped] == [MISSING_FIELDS_REASON] * 4
    assert repo.inserted == []


def test_all_skipped_still_returns_summary() -> None:
    repo = InMemoryContactRepository()
    repo.insert(Contact(owner_id="u1", name="Ann", phone="111", phone_normalized="111"))
    summary = ImportService(repo).reconcile("u1", [_candidate("X", "111")])
    assert summary.added_count == 0
    assert summary.skipped_count == 1


def test_google_reason_keeps_its_capitalization() -> None:
    repo = InMemoryContactRepository()
    repo.insert(Contact(owner_id="u1", name="Ann", phone="111", phone_normalized="111"))
    service = ImportService(repo)
    google = service.reconcile("u1", [_candidate("G", "111", ImportSource.GOOGLE)])
    csv_ = service.reconcile("u1", [_candidate("C", "111", ImportSource.CSV)])
    assert google.skipped[0].reason == "Phone already exists"
    assert csv_.skipped[0].reason == "phone exists"


def test_import_checks_phone_only_by_default() -> None:
    repo = InMemoryContactRepository()
    repo.insert(Contact(owner_id="u1", name="Ann", phone="111", phone_normalized="111"))
    summary = ImportService(repo).reconcile("u1", [_candidate("ANN", "222")])
    assert summary.added_count == 1


def test_name_check_when_enabled() -> None:
    repo = InMemoryContactRepository()
    repo.insert(Contact(owner_id="u1", name="Ann", phone="111", phone_normalized="111"))
    service = ImportService(repo, check_name_conflicts=True)
    summary = service.reconcile("u1", [_candidate("ANN", "222")])
    assert summary.added_count == 0
    assert summary.skipped[0].reason == NAME_EXISTS_REASON


def test_lost_insert_race_is_a_skip_with_store_reason() -> None:
    repo = RacingRepository()
    repo.insert(Contact(owner_id="u1", name="Ann", phone="111", phone_normalized="111"))
    summary = ImportService(repo).reconcile(
        "u1", [_candidate("Racer", "111"), _candidate("Bob", "222")]
    )
    assert [c.name for c in summary.added] == ["Bob"]
    assert summary.skipped_count == 1
    assert "already exists" in summary.skipped[0].reason


def test_store_unavailable_aborts_the_batch() -> None:
    repo = UnreachableRepository(fail_after=1)
    service = ImportService(repo)
    with pytest.raises(StoreUnavailable):
        service.reconcile("u1", [_candidate("Ann", "111"), _candidate("Bob", "222")])
    assert [c.name for c in repo.list_all("u1")] == ["Ann"]


def test_store_unavailable_is_not_a_duplicate_key_error() -> None:
    assert not issubclass(StoreUnavailable, DuplicateKeyError)


def test_initial_derived_or_kept() -> None:
    service = ImportService(InMemoryContactRepository())
    summary = service.reconcile(
        "u1",
        [_candidate("ann", "111"), _candidate("bob", "222", initial="Z")],
    )
    assert [c.initial for c in summary.added] == ["A", "Z"]
    assert all(c.contact_type == "personal" for c in summary.added)


def test_owners_are_isolated() -> None:
    repo = InMemoryContactRepository()
    service = ImportService(repo)
    service.reconcile("u1", [_candidate("Ann", "111")])
    summary = service.reconcile("u2", [_candidate("Ann", "111")])
    assert summary.added_count == 1


def test_region_mode_keeps_numbers_differing_by_leading_zero_apart() -> None:
    service = ImportService(InMemoryContactRepository(), default_region="US")
    summary = service.reconcile(
        "u1",
        [_candidate("Ann", "+39 06 1234 5678"), _candidate("Bob", "+39 6 1234 5678")],
    )
    assert summary.added_count == 2
    assert summary.skipped == []
    assert len({c.phone_normalized for c in summary.added}) == 2


def test_end_to_end_existing_contact_blocks_reformatted_phone() -> None:
    repo = InMemoryContactRepository()
    seed = ImportService(repo, default_region="US").reconcile(
        "U1", [_candidate("Ann", "+1 (555) 111-2222")]
    )
    assert seed.added[0].phone_normalized == "+15551112222"

    service = ImportService(repo, default_region="US")
    summary = service.reconcile(
        "U1",
        [_candidate("Ann2", "555-111-2222"), _candidate("Bob", "5559998888")],
    )
    assert summary.added_count == 1
    assert summary.added[0].name == "Bob"
    assert summary.skipped_count == 1
    assert summary.skipped[0].candidate.name == "Ann2"
    assert summary.skipped[0].reason == "phone exists"
