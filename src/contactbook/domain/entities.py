"""Domain entities: Contact, GeoPoint, Group, Todo, and DirectoryEntry."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

DEFAULT_CONTACT_TYPE = "personal"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def initial_for(name: str | None) -> str:
    """First character of the name, upper-cased; empty when there is no name."""
    name = name or ""
    return name[:1].upper()


@dataclass(frozen=True)
class GeoPoint:
    """WGS84 coordinates of a contact."""

    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError("Latitude must be between -90 and 90.")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError("Longitude must be between -180 and 180.")


@dataclass(frozen=True)
class Contact:
    """
    A person in an owner's contact book.
    phone_normalized is the identity key: unique per owner.
    """

    id: str = field(default_factory=_new_id)
    owner_id: str = field(default="")
    name: str = field(default="")
    phone: str = field(default="")
    phone_normalized: str = field(default="")
    email: str | None = None
    avatar: str | None = None
    initial: str | None = None
    contact_type: str = DEFAULT_CONTACT_TYPE
    location: GeoPoint | None = None
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if not self.owner_id or not self.owner_id.strip():
            raise ValueError("Contact owner_id must be non-empty.")
        if not self.name or not self.name.strip():
            raise ValueError("Contact name must be non-empty.")


@dataclass(frozen=True)
class Group:
    """A named, ordered set of an owner's contacts."""

    id: str = field(default_factory=_new_id)
    owner_id: str = field(default="")
    name: str = field(default="")
    description: str | None = None
    member_ids: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Group name must be non-empty.")
        # Keep first occurrence order, drop repeats.
        object.__setattr__(self, "member_ids", tuple(dict.fromkeys(self.member_ids)))


@dataclass(frozen=True)
class Todo:
    id: str = field(default_factory=_new_id)
    owner_id: str = field(default="")
    description: str = field(default="")
    due_date: datetime | None = None
    is_completed: bool = False
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if not self.description or not self.description.strip():
            raise ValueError("Todo description must be non-empty.")


@dataclass(frozen=True)
class DirectoryEntry:
    """
    A known name for a phone number that is not (yet) a contact.
    Used to identify unknown callers; unique per (phone_normalized, owner).
    """

    id: str = field(default_factory=_new_id)
    owner_id: str = field(default="")
    name: str = field(default="")
    phone: str = field(default="")
    phone_normalized: str = field(default="")

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Directory entry name must be non-empty.")
        if not self.phone or not self.phone.strip():
            raise ValueError("Directory entry phone must be non-empty.")
