"""Request and response bodies. JSON keys are camelCase; snake_case is accepted on input."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from contactbook.application import (
    ContactData,
    GroupView,
    ImportSummary,
    SkippedCandidate,
    TodoData,
)
from contactbook.domain import Contact, DirectoryEntry, GeoPoint, Todo


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(CamelModel):
    lat: float
    lng: float

    def to_point(self) -> GeoPoint:
        return GeoPoint(latitude=self.lat, longitude=self.lng)

    @classmethod
    def from_point(cls, point: GeoPoint | None) -> "Location | None":
        if point is None:
            return None
        return cls(lat=point.latitude, lng=point.longitude)


# --- contacts ---


class ContactBody(CamelModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    avatar: str | None = None
    initial: str | None = None
    contact_type: str | None = Field(default=None, alias="type")
    location: Location | None = None

    def to_data(self) -> ContactData:
        """Raises ValueError for out-of-range coordinates."""
        return ContactData(
            name=self.name,
            phone=self.phone,
            email=self.email,
            avatar=self.avatar,
            initial=self.initial,
            contact_type=self.contact_type,
            location=self.location.to_point() if self.location else None,
        )


class ContactOut(CamelModel):
    id: str
    owner_id: str = Field(alias="userId")
    name: str
    phone: str
    phone_normalized: str
    email: str | None = None
    avatar: str | None = None
    initial: str | None = None
    contact_type: str = Field(alias="type")
    location: Location | None = None
    created_at: str

    @classmethod
    def from_contact(cls, contact: Contact) -> "ContactOut":
        return cls(
            id=contact.id,
            owner_id=contact.owner_id,
            name=contact.name,
            phone=contact.phone,
            phone_normalized=contact.phone_normalized,
            email=contact.email,
            avatar=contact.avatar,
            initial=contact.initial,
            contact_type=contact.contact_type,
            location=Location.from_point(contact.location),
            created_at=contact.created_at.isoformat(),
        )


def existing_contact_detail(message: str, contact: Contact) -> dict:
    return {
        "message": message,
        "existingContact": {"name": contact.name, "phone": contact.phone},
    }


# --- imports ---


class BulkImportBody(CamelModel):
    contacts: list[Any] = Field(default_factory=list)


class GoogleImportBody(CamelModel):
    """One People API connections.list page, fetched by the caller."""

    connections: list[Any] = Field(default_factory=list)


class SkippedOut(CamelModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    source: str
    reason: str

    @classmethod
    def from_skipped(cls, skipped: SkippedCandidate) -> "SkippedOut":
        c = skipped.candidate
        return cls(
            name=c.name,
            phone=c.phone,
            email=c.email,
            source=c.source.value,
            reason=skipped.reason,
        )


class ImportSummaryOut(CamelModel):
    success: bool = True
    added_count: int
    skipped_count: int
    added: list[ContactOut]
    skipped: list[SkippedOut]

    @classmethod
    def from_summary(cls, summary: ImportSummary) -> "ImportSummaryOut":
        return cls(
            added_count=summary.added_count,
            skipped_count=summary.skipped_count,
            added=[ContactOut.from_contact(c) for c in summary.added],
            skipped=[SkippedOut.from_skipped(s) for s in summary.skipped],
        )


# --- groups ---


class GroupBody(CamelModel):
    name: str | None = None
    description: str | None = None
    members: list[str] | None = None


class MemberOut(CamelModel):
    id: str
    name: str
    phone: str
    avatar: str | None = None
    initial: str | None = None


class GroupOut(CamelModel):
    id: str
    name: str
    description: str | None = None
    members: list[MemberOut]
    created_at: str

    @classmethod
    def from_view(cls, view: GroupView) -> "GroupOut":
        group = view.group
        return cls(
            id=group.id,
            name=group.name,
            description=group.description,
            members=[
                MemberOut(
                    id=c.id, name=c.name, phone=c.phone, avatar=c.avatar, initial=c.initial
                )
                for c in view.members
            ],
            created_at=group.created_at.isoformat(),
        )


# --- todos ---


class TodoBody(CamelModel):
    description: str | None = None
    due_date: datetime | None = None
    is_completed: bool | None = None

    def to_data(self) -> TodoData:
        return TodoData(
            description=self.description,
            due_date=self.due_date,
            is_completed=self.is_completed,
        )


class TodoOut(CamelModel):
    id: str
    description: str
    due_date: str | None = None
    is_completed: bool
    created_at: str

    @classmethod
    def from_todo(cls, todo: Todo) -> "TodoOut":
        return cls(
            id=todo.id,
            description=todo.description,
            due_date=todo.due_date.isoformat() if todo.due_date else None,
            is_completed=todo.is_completed,
            created_at=todo.created_at.isoformat(),
        )


# --- directory ---


class DirectoryBody(CamelModel):
    name: str | None = None
    phone: str | None = None


class DirectoryEntryOut(CamelModel):
    id: str
    name: str
    phone: str

    @classmethod
    def from_entry(cls, entry: DirectoryEntry) -> "DirectoryEntryOut":
        return cls(id=entry.id, name=entry.name, phone=entry.phone)
