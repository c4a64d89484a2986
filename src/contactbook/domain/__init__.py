"""Domain layer: entities and value objects. No dependencies on outer layers."""

from contactbook.domain.entities import (
    DEFAULT_CONTACT_TYPE,
    Contact,
    DirectoryEntry,
    GeoPoint,
    Group,
    Todo,
    initial_for,
)

__all__ = [
    "DEFAULT_CONTACT_TYPE",
    "Contact",
    "DirectoryEntry",
    "GeoPoint",
    "Group",
    "Todo",
    "initial_for",
]
