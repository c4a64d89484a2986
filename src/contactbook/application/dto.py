"""Input DTOs and result types for contacts, imports, groups, todos and the directory."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from contactbook.domain import Contact, DirectoryEntry, GeoPoint, Group

PHONE_EXISTS_MESSAGE = "Phone number already exists in contacts"
NAME_EXISTS_MESSAGE = "Name already exists"


# --- contacts ---


@dataclass(frozen=True)
class ContactData:
    """Fields supplied by a caller to create or update a contact."""

    name: str | None = None
    phone: str | None = None
    email: str | None = None
    avatar: str | None = None
    initial: str | None = None
    contact_type: str | None = None
    location: GeoPoint | None = None


@dataclass(frozen=True)
class PhoneConflict:
    """An existing contact of the owner already uses this normalized phone."""

    existing: Contact
    message: str = PHONE_EXISTS_MESSAGE


@dataclass(frozen=True)
class NameConflict:
    """An existing contact of the owner has the same name, ignoring case."""

    existing: Contact
    message: str = NAME_EXISTS_MESSAGE


@dataclass(frozen=True)
class NoConflict:
    pass


@dataclass(frozen=True)
class Invalid:
    reason: str


@dataclass(frozen=True)
class ContactCreated:
    contact: Contact


@dataclass(frozen=True)
class ContactUpdated:
    contact: Contact


@dataclass(frozen=True)
class ContactDeleted:
    contact_id: str


@dataclass(frozen=True)
class ContactNotFound:
    contact_id: str


# --- imports ---


class ImportSource(str, Enum):
    GOOGLE = "google"
    CSV = "csv"
    BULK_API = "bulk-api"


@dataclass(frozen=True)
class ImportCandidate:
    """An unvalidated contact record waiting to be reconciled. Never stored as-is."""

    name: str | None = None
    phone: str | None = None
    email: str | None = None
    source: ImportSource = ImportSource.BULK_API
    avatar: str | None = None
    initial: str | None = None
    contact_type: str | None = None
    location: GeoPoint | None = None


@dataclass(frozen=True)
class SkippedCandidate:
    candidate: ImportCandidate
    reason: str


@dataclass(frozen=True)
class ImportSummary:
    """Per-record outcomes of one import batch. There is no batch-level verdict."""

    added: list[Contact] = field(default_factory=list)
    skipped: list[SkippedCandidate] = field(default_factory=list)

    @property
    def added_count(self) -> int:
        return len(self.added)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


# --- groups ---


@dataclass(frozen=True)
class GroupData:
    name: str | None = None
    description: str | None = None
    member_ids: list[str] | None = None


@dataclass(frozen=True)
class GroupView:
    """A group with its member ids resolved to the owner's contacts."""

    group: Group
    members: list[Contact]


@dataclass(frozen=True)
class GroupDeleted:
    group_id: str


@dataclass(frozen=True)
class GroupNotFound:
    group_id: str


# --- todos ---


class TodoFilter(str, Enum):
    ALL = "all"
    TODAY = "today"
    UPCOMING = "upcoming"
    PAST = "past"


@dataclass(frozen=True)
class TodoData:
    """Fields to change on a todo. None leaves a field untouched."""

    description: str | None = None
    due_date: datetime | None = None
    is_completed: bool | None = None


@dataclass(frozen=True)
class TodoDeleted:
    todo_id: str


@dataclass(frozen=True)
class TodoNotFound:
    todo_id: str


# --- directory ---


@dataclass(frozen=True)
class DirectoryConflict:
    """The owner's directory already has an entry for this phone."""

    existing: DirectoryEntry
    message: str = "Phone already exists"
