"""Unit tests for DuplicateResolver against the in-memory repository."""

from contactbook.application import (
    DuplicateResolver,
    NameConflict,
    NoConflict,
    PhoneConflict,
)
from contactbook.domain import Contact
from contactbook.infrastructure import InMemoryContactRepository


def _repo_with(*contacts: Contact) -> InMemoryContactRepository:
    repo = InMemoryContactRepository()
    for contact in contacts:
        repo.insert(contact)
    return repo


def _contact(owner_id: str, name: str, key: str) -> Contact:
    return Contact(owner_id=owner_id, name=name, phone=key, phone_normalized=key)


def test_no_conflict_on_empty_store() -> None:
    resolver = DuplicateResolver(InMemoryContactRepository())
    assert isinstance(resolver.find_duplicate("u1", "5551112222", "Ann"), NoConflict)


def test_phone_conflict_returns_existing() -> None:
    ann = _contact("u1", "Ann", "15551112222")
    resolver = DuplicateResolver(_repo_with(ann))
    result = resolver.find_duplicate("u1", "15551112222", "Someone Else")
    assert isinstance(result, PhoneConflict)
    assert result.existing.id == ann.id


def test_name_conflict_is_case_insensitive() -> None:
    ann = _contact("u1", "Ann Lee", "111")
    resolver = DuplicateResolver(_repo_with(ann))
    result = resolver.find_duplicate("u1", "222", "ann LEE")
    assert isinstance(result, NameConflict)
    assert result.existing.id == ann.id


def test_name_match_does_not_normalize_whitespace() -> None:
    resolver = DuplicateResolver(_repo_with(_contact("u1", "Ann Lee", "111")))
    assert isinstance(resolver.find_duplicate("u1", "222", "Ann  Lee"), NoConflict)


def test_phone_conflict_wins_over_name_conflict() -> None:
    ann = _contact("u1", "Ann", "111")
    bob = _contact("u1", "Bob", "222")
    resolver = DuplicateResolver(_repo_with(ann, bob))
    result = resolver.find_duplicate("u1", "222", "Ann")
    assert isinstance(result, PhoneConflict)
    assert result.existing.id == bob.id


def test_name_check_can_be_disabled() -> None:
    resolver = DuplicateResolver(_repo_with(_contact("u1", "Ann", "111")))
    result = resolver.find_duplicate("u1", "222", "Ann", check_name=False)
    assert isinstance(result, NoConflict)


def test_scoped_to_owner() -> None:
    resolver = DuplicateResolver(_repo_with(_contact("u1", "Ann", "111")))
    assert isinstance(resolver.find_duplicate("u2", "111", "Ann"), NoConflict)


def test_exclude_id_ignores_the_contact_itself() -> None:
    ann = _contact("u1", "Ann", "111")
    resolver = DuplicateResolver(_repo_with(ann))
    result = resolver.find_duplicate("u1", "111", "Ann", exclude_id=ann.id)
    assert isinstance(result, NoConflict)
