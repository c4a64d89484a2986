"""Tests for the Neo4j repositories. Integration tests need Docker
(testcontainers) and skip without it; transaction tests use a fake driver."""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from contactbook.application import (
    ContactCreated,
    ContactData,
    ContactService,
    DuplicateKeyError,
    GroupData,
    GroupService,
    ImportCandidate,
    ImportService,
)
from contactbook.domain import Contact, DirectoryEntry, GeoPoint, Group, Todo
from contactbook.infrastructure import (
    Neo4jContactRepository,
    Neo4jDirectoryRepository,
    Neo4jGroupRepository,
    Neo4jTodoRepository,
    ensure_constraints,
)


@pytest.fixture(scope="session")
def neo4j_driver():
    from testcontainers.neo4j import Neo4jContainer

    try:
        neo4j = Neo4jContainer()
        neo4j.start()
    except Exception as e:
        pytest.skip(f"Neo4j container unavailable: {e}")
    try:
        driver = neo4j.get_driver()
        try:
            ensure_constraints(driver)
            yield driver
        finally:
            driver.close()
    finally:
        neo4j.stop()


@pytest.fixture
def clean_neo4j(neo4j_driver):
    """Clear the graph before each test so tests are independent."""
    with neo4j_driver.session() as session:
        session.run("MATCH (n) DETACH DELETE n")
    yield neo4j_driver


def _contact(owner_id="u1", name="Ann", key="111", **kwargs) -> Contact:
    return Contact(owner_id=owner_id, name=name, phone=key, phone_normalized=key, **kwargs)


def test_insert_get_list(clean_neo4j):
    repo = Neo4jContactRepository(clean_neo4j)
    ann = repo.insert(_contact(email="a@x.io", initial="A", location=GeoPoint(45.0, 9.0)))
    bob = repo.insert(_contact(name="Bob", key="222"))

    got = repo.get_by_id("u1", ann.id)
    assert got is not None
    assert got.email == "a@x.io"
    assert got.location == GeoPoint(45.0, 9.0)
    assert got.created_at == ann.created_at
    assert [c.id for c in repo.list_all("u1")] == [ann.id, bob.id]
    assert repo.get_by_id("u2", ann.id) is None


def test_unique_phone_constraint_raises_duplicate_key(clean_neo4j):
    repo = Neo4jContactRepository(clean_neo4j)
    repo.insert(_contact())
    with pytest.raises(DuplicateKeyError):
        repo.insert(_contact(name="Other"))
    # Same key for another owner is fine.
    repo.insert(_contact(owner_id="u2"))


def test_find_by_phone_and_name(clean_neo4j):
    repo = Neo4jContactRepository(clean_neo4j)
    ann = repo.insert(_contact(name="Ann Lee"))
    assert repo.find_by_normalized_phone("u1", "111").id == ann.id
    assert repo.find_by_normalized_phone("u1", "111", exclude_id=ann.id) is None
    assert repo.find_by_normalized_phone("u2", "111") is None
    assert repo.find_by_name_ci("u1", "ANN lee").id == ann.id
    assert repo.find_by_name_ci("u1", "Ann") is None


def test_update_and_delete(clean_neo4j):
    repo = Neo4jContactRepository(clean_neo4j)
    ann = repo.insert(_contact())
    bob = repo.insert(_contact(name="Bob", key="222"))

    assert repo.update(replace(ann, name="Zed", initial="Z"))
    assert repo.get_by_id("u1", ann.id).name == "Zed"
    with pytest.raises(DuplicateKeyError):
        repo.update(replace(ann, phone_normalized="222"))
    assert not repo.update(_contact(name="Ghost", key="999"))

    assert repo.delete("u1", bob.id)
    assert not repo.delete("u1", bob.id)


def test_find_nearby(clean_neo4j):
    repo = Neo4jContactRepository(clean_neo4j)
    near = repo.insert(_contact(name="Near", key="1", location=GeoPoint(45.4642, 9.19)))
    repo.insert(_contact(name="Far", key="2", location=GeoPoint(41.9028, 12.4964)))
    repo.insert(_contact(name="Nowhere", key="3"))
    hits = repo.find_nearby("u1", GeoPoint(45.46, 9.19), 5.0)
    assert [c.id for c in hits] == [near.id]


def test_import_service_against_neo4j(clean_neo4j):
    repo = Neo4jContactRepository(clean_neo4j)
    repo.insert(_contact(key="+15551112222"))
    service = ImportService(repo, default_region="US")
    summary = service.reconcile(
        "u1",
        [
            ImportCandidate(name="Ann2", phone="555-111-2222"),
            ImportCandidate(name="Bob", phone="5559998888"),
            ImportCandidate(name="Bob again", phone="(555) 999-8888"),
        ],
    )
    assert [c.name for c in summary.added] == ["Bob"]
    assert [s.reason for s in summary.skipped] == ["phone exists", "phone exists"]


def test_groups_members_and_contact_deletion(clean_neo4j):
    contacts = Neo4jContactRepository(clean_neo4j)
    groups = Neo4jGroupRepository(clean_neo4j)
    contact_service = ContactService(contacts, groups=groups)
    group_service = GroupService(groups, contacts)

    ann = contact_service.create_contact("u1", ContactData(name="Ann", phone="1"))
    bob = contact_service.create_contact("u1", ContactData(name="Bob", phone="2"))
    assert isinstance(ann, ContactCreated) and isinstance(bob, ContactCreated)

    view = group_service.create_group(
        "u1", GroupData(name="Team", member_ids=[bob.contact.id, ann.contact.id])
    )
    stored = groups.get_by_id("u1", view.group.id)
    assert stored.member_ids == (bob.contact.id, ann.contact.id)

    contact_service.delete_contact("u1", bob.contact.id)
    assert groups.get_by_id("u1", view.group.id).member_ids == (ann.contact.id,)

    assert groups.delete("u1", view.group.id)
    assert groups.list_all("u1") == []


def test_todos_roundtrip(clean_neo4j):
    repo = Neo4jTodoRepository(clean_neo4j)
    due = datetime(2024, 5, 10, 9, 0, tzinfo=timezone.utc)
    todo = Todo(owner_id="u1", description="call Ann", due_date=due)
    repo.add(todo)

    got = repo.get_by_id("u1", todo.id)
    assert got.due_date == due
    assert got.is_completed is False

    assert repo.update(replace(todo, is_completed=True))
    assert repo.get_by_id("u1", todo.id).is_completed is True
    assert repo.delete("u1", todo.id)
    assert repo.list_all("u1") == []


def test_directory_unique_phone(clean_neo4j):
    repo = Neo4jDirectoryRepository(clean_neo4j)
    entry = DirectoryEntry(owner_id="u1", name="Pizza", phone="02-1234", phone_normalized="021234")
    repo.add(entry)
    with pytest.raises(DuplicateKeyError):
        repo.add(
            DirectoryEntry(owner_id="u1", name="Other", phone="021234", phone_normalized="021234")
        )
    assert repo.find_by_phone("u1", "021234").name == "Pizza"
    assert repo.find_by_phone("u2", "021234") is None
    assert [e.id for e in repo.list_all("u1")] == [entry.id]


class _RecordingTx:
    def __init__(self, fail_on: str | None = None) -> None:
        self.queries: list[str] = []
        self._fail_on = fail_on

    def run(self, query, **params):
        self.queries.append(query)
        if self._fail_on and self._fail_on in query:
            raise RuntimeError("member write failed")
        return self

    def consume(self):
        return None

    def single(self):
        return {"id": "g"}


class _RecordingSession:
    def __init__(self, tx: _RecordingTx) -> None:
        self.tx = tx
        self.transactions = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def run(self, query, **params):
        raise AssertionError("group writes must not use auto-commit queries")

    def execute_write(self, fn, *args):
        self.transactions += 1
        return fn(self.tx, *args)


class _RecordingDriver:
    def __init__(self, session: _RecordingSession) -> None:
        self._session = session

    def session(self):
        return self._session


def test_group_and_members_written_in_one_transaction():
    session = _RecordingSession(_RecordingTx())
    repo = Neo4jGroupRepository(_RecordingDriver(session))
    group = Group(owner_id="u1", name="Team", member_ids=("c1", "c2"))

    repo.add(group)
    assert repo.update(group) is True
    assert session.transactions == 2
    assert sum("HAS_MEMBER" in q for q in session.tx.queries) == 2


def test_member_write_failure_propagates_from_the_transaction():
    session = _RecordingSession(_RecordingTx(fail_on="UNWIND"))
    repo = Neo4jGroupRepository(_RecordingDriver(session))
    with pytest.raises(RuntimeError):
        repo.add(Group(owner_id="u1", name="Team", member_ids=("c1",)))
    assert session.transactions == 1
