"""Unit tests for TodoService with a fixed clock."""

from datetime import datetime, timedelta, timezone

from contactbook.application import (
    Invalid,
    TodoData,
    TodoDeleted,
    TodoFilter,
    TodoNotFound,
    TodoService,
)
from contactbook.domain import Todo
from contactbook.infrastructure import InMemoryTodoRepository

NOW = datetime(2024, 5, 10, 15, 30, tzinfo=timezone.utc)


def _service() -> TodoService:
    return TodoService(InMemoryTodoRepository(), clock=lambda: NOW)


def _seeded():
    service = _service()
    yesterday = service.create_todo("u1", "yesterday", NOW - timedelta(days=1))
    this_morning = service.create_todo("u1", "this morning", NOW.replace(hour=8))
    tomorrow = service.create_todo("u1", "tomorrow", NOW + timedelta(days=1))
    undated = service.create_todo("u1", "someday")
    return service, yesterday, this_morning, tomorrow, undated


def test_create_todo_requires_description() -> None:
    service = _service()
    assert isinstance(service.create_todo("u1", "  "), Invalid)
    todo = service.create_todo("u1", " call Ann ")
    assert isinstance(todo, Todo)
    assert todo.description == "call Ann"
    assert todo.is_completed is False


def test_naive_due_date_is_treated_as_utc() -> None:
    service = _service()
    todo = service.create_todo("u1", "x", datetime(2024, 5, 10, 9, 0))
    assert todo.due_date == datetime(2024, 5, 10, 9, 0, tzinfo=timezone.utc)


def test_all_filter_lists_undated_first_then_by_due_date() -> None:
    service, yesterday, this_morning, tomorrow, undated = _seeded()
    listed = service.list_todos("u1")
    assert [t.id for t in listed] == [undated.id, yesterday.id, this_morning.id, tomorrow.id]


def test_today_upcoming_past_filters() -> None:
    service, yesterday, this_morning, tomorrow, _ = _seeded()
    assert [t.id for t in service.list_todos("u1", TodoFilter.TODAY)] == [this_morning.id]
    assert [t.id for t in service.list_todos("u1", TodoFilter.UPCOMING)] == [
        this_morning.id,
        tomorrow.id,
    ]
    assert [t.id for t in service.list_todos("u1", TodoFilter.PAST)] == [yesterday.id]


def test_complete_and_update_todo() -> None:
    service, _, this_morning, _, _ = _seeded()
    done = service.complete_todo("u1", this_morning.id)
    assert done.is_completed is True
    updated = service.update_todo("u1", this_morning.id, TodoData(description="renamed"))
    assert updated.description == "renamed"
    assert updated.is_completed is True


def test_missing_todo_is_not_found() -> None:
    service = _service()
    assert isinstance(service.update_todo("u1", "nope", TodoData()), TodoNotFound)
    assert isinstance(service.complete_todo("u1", "nope"), TodoNotFound)
    assert isinstance(service.delete_todo("u1", "nope"), TodoNotFound)


def test_delete_todo_is_owner_scoped() -> None:
    service = _service()
    todo = service.create_todo("u1", "x")
    assert isinstance(service.delete_todo("u2", todo.id), TodoNotFound)
    assert isinstance(service.delete_todo("u1", todo.id), TodoDeleted)
    assert service.list_todos("u1") == []
