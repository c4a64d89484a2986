"""Application ports (interfaces). Implemented by infrastructure adapters.

Every method is scoped to one owner. Adapters raise StoreUnavailable when the
backing store cannot be reached.
"""

from typing import Protocol

from contactbook.domain import Contact, DirectoryEntry, GeoPoint, Group, Todo


class ContactRepository(Protocol):
    """Persists contacts and is the single authority on (owner, phone) uniqueness."""

    def insert(self, contact: Contact) -> Contact:
        """Store a new contact. Raises DuplicateKeyError if its normalized phone is taken."""
        ...

    def get_by_id(self, owner_id: str, contact_id: str) -> Contact | None:
        ...

    def list_all(self, owner_id: str) -> list[Contact]:
        """Return the owner's contacts in creation order."""
        ...

    def find_by_normalized_phone(
        self, owner_id: str, key: str, *, exclude_id: str | None = None
    ) -> Contact | None:
        """Return the contact whose phone_normalized equals key, or None."""
        ...

    def find_by_name_ci(self, owner_id: str, name: str) -> Contact | None:
        """Return a contact whose name equals name ignoring case, or None."""
        ...

    def update(self, contact: Contact) -> bool:
        """Replace a stored contact. False if not found; DuplicateKeyError on phone clash."""
        ...

    def delete(self, owner_id: str, contact_id: str) -> bool:
        ...

    def find_nearby(
        self, owner_id: str, point: GeoPoint, radius_km: float
    ) -> list[Contact]:
        """Return located contacts within radius_km of point, nearest first."""
        ...


class GroupRepository(Protocol):
    def add(self, group: Group) -> None:
        ...

    def get_by_id(self, owner_id: str, group_id: str) -> Group | None:
        ...

    def list_all(self, owner_id: str) -> list[Group]:
        ...

    def update(self, group: Group) -> bool:
        ...

    def delete(self, owner_id: str, group_id: str) -> bool:
        ...

    def remove_member(self, owner_id: str, contact_id: str) -> None:
        """Drop contact_id from every group of the owner."""
        ...


class TodoRepository(Protocol):
    def add(self, todo: Todo) -> None:
        ...

    def get_by_id(self, owner_id: str, todo_id: str) -> Todo | None:
        ...

    def list_all(self, owner_id: str) -> list[Todo]:
        ...

    def update(self, todo: Todo) -> bool:
        ...

    def delete(self, owner_id: str, todo_id: str) -> bool:
        ...


class DirectoryRepository(Protocol):
    """Unknown-number lookup entries, unique per (owner, normalized phone)."""

    def add(self, entry: DirectoryEntry) -> None:
        """Raises DuplicateKeyError if the owner already has this phone."""
        ...

    def list_all(self, owner_id: str) -> list[DirectoryEntry]:
        ...

    def find_by_phone(self, owner_id: str, key: str) -> DirectoryEntry | None:
        ...
