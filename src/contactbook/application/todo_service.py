"""Todos with due-date filters relative to the current day (UTC)."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from contactbook.application.dto import (
    Invalid,
    TodoData,
    TodoDeleted,
    TodoFilter,
    TodoNotFound,
)
from contactbook.application.ports import TodoRepository
from contactbook.domain import Todo


def _as_utc(dt: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so aware and naive due dates compare."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _sort_key(todo: Todo) -> tuple[bool, datetime]:
    # Undated todos first, then by due date ascending.
    due = _as_utc(todo.due_date)
    return (due is not None, due or datetime.min.replace(tzinfo=timezone.utc))


class TodoService:
    def __init__(
        self,
        repository: TodoRepository,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repo = repository
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def create_todo(
        self, owner_id: str, description: str | None, due_date: datetime | None = None
    ) -> Todo | Invalid:
        text = (description or "").strip()
        if not text:
            return Invalid(reason="Description is required")
        todo = Todo(owner_id=owner_id, description=text, due_date=_as_utc(due_date))
        self._repo.add(todo)
        return todo

    def list_todos(
        self, owner_id: str, todo_filter: TodoFilter = TodoFilter.ALL
    ) -> list[Todo]:
        """Return the owner's todos matching todo_filter, sorted by due date.

        today: due in [start of today, start of tomorrow).
        upcoming: due at or after the start of today.
        past: due before the start of today.
        Filters other than all exclude undated todos.
        """
        start = _as_utc(self._clock()).replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1)

        def matches(todo: Todo) -> bool:
            if todo_filter == TodoFilter.ALL:
                return True
            due = _as_utc(todo.due_date)
            if due is None:
                return False
            if todo_filter == TodoFilter.TODAY:
                return start <= due < end
            if todo_filter == TodoFilter.UPCOMING:
                return due >= start
            return due < start

        return sorted(
            (t for t in self._repo.list_all(owner_id) if matches(t)), key=_sort_key
        )

    def update_todo(
        self, owner_id: str, todo_id: str, data: TodoData
    ) -> Todo | TodoNotFound | Invalid:
        current = self._repo.get_by_id(owner_id, todo_id)
        if current is None:
            return TodoNotFound(todo_id=todo_id)
        if data.description is not None and not data.description.strip():
            return Invalid(reason="Description must be non-empty.")
        updated = replace(
            current,
            description=(
                data.description.strip()
                if data.description is not None
                else current.description
            ),
            due_date=_as_utc(data.due_date) if data.due_date is not None else current.due_date,
            is_completed=(
                data.is_completed if data.is_completed is not None else current.is_completed
            ),
        )
        if not self._repo.update(updated):
            return TodoNotFound(todo_id=todo_id)
        return updated

    def complete_todo(self, owner_id: str, todo_id: str) -> Todo | TodoNotFound:
        result = self.update_todo(owner_id, todo_id, TodoData(is_completed=True))
        if isinstance(result, Invalid):
            return TodoNotFound(todo_id=todo_id)
        return result

    def delete_todo(self, owner_id: str, todo_id: str) -> TodoDeleted | TodoNotFound:
        if not self._repo.delete(owner_id, todo_id):
            return TodoNotFound(todo_id=todo_id)
        return TodoDeleted(todo_id=todo_id)
