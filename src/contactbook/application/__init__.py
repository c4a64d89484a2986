"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from contactbook.application.contact_service import ContactService
from contactbook.application.directory_service import DirectoryService
from contactbook.application.dto import (
    ContactCreated,
    ContactData,
    ContactDeleted,
    ContactNotFound,
    ContactUpdated,
    DirectoryConflict,
    GroupData,
    GroupDeleted,
    GroupNotFound,
    GroupView,
    ImportCandidate,
    ImportSource,
    ImportSummary,
    Invalid,
    NameConflict,
    NoConflict,
    PhoneConflict,
    SkippedCandidate,
    TodoData,
    TodoDeleted,
    TodoFilter,
    TodoNotFound,
)
from contactbook.application.duplicates import DuplicateResolver
from contactbook.application.errors import DuplicateKeyError, StoreError, StoreUnavailable
from contactbook.application.group_service import GroupService
from contactbook.application.import_service import ImportService
from contactbook.application.ports import (
    ContactRepository,
    DirectoryRepository,
    GroupRepository,
    TodoRepository,
)
from contactbook.application.todo_service import TodoService

__all__ = [
    "ContactCreated",
    "ContactData",
    "ContactDeleted",
    "ContactNotFound",
    "ContactRepository",
    "ContactService",
    "ContactUpdated",
    "DirectoryConflict",
    "DirectoryRepository",
    "DirectoryService",
    "DuplicateKeyError",
    "DuplicateResolver",
    "GroupData",
    "GroupDeleted",
    "GroupNotFound",
    "GroupRepository",
    "GroupService",
    "GroupView",
    "ImportCandidate",
    "ImportService",
    "ImportSource",
    "ImportSummary",
    "Invalid",
    "NameConflict",
    "NoConflict",
    "PhoneConflict",
    "SkippedCandidate",
    "StoreError",
    "StoreUnavailable",
    "TodoData",
    "TodoDeleted",
    "TodoFilter",
    "TodoNotFound",
    "TodoRepository",
    "TodoService",
]
