"""In-memory implementations of the repository ports (no DB)."""

import math

from contactbook.application.errors import DuplicateKeyError
from contactbook.domain import Contact, DirectoryEntry, GeoPoint, Group, Todo

_EARTH_RADIUS_KM = 6371.0088


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in kilometres."""
    lat1, lon1, lat2, lon2 = map(
        math.radians, (a.latitude, a.longitude, b.latitude, b.longitude)
    )
    h = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    )
    return 2 * _EARTH_RADIUS_KM * math.asin(math.sqrt(h))


class InMemoryContactRepository:
    """Stores contacts in memory. Order preserved by insertion.
    Enforces the (owner_id, phone_normalized) unique key like the Neo4j constraint.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, Contact] = {}
        self._order: list[str] = []

    def _owned(self, owner_id: str) -> list[Contact]:
        return [
            self._by_id[cid]
            for cid in self._order
            if cid in self._by_id and self._by_id[cid].owner_id == owner_id
        ]

    def _phone_taken(self, contact: Contact) -> bool:
        return any(
            c.phone_normalized == contact.phone_normalized and c.id != contact.id
            for c in self._owned(contact.owner_id)
        )

    def insert(self, contact: Contact) -> Contact:
        if contact.id in self._by_id:
            raise DuplicateKeyError(f"Contact {contact.id} already exists")
        if self._phone_taken(contact):
            raise DuplicateKeyError(
                f"Duplicate key: phone {contact.phone_normalized} already exists"
            )
        self._by_id[contact.id] = contact
        self._order.append(contact.id)
        return contact

    def get_by_id(self, owner_id: str, contact_id: str) -> Contact | None:
        contact = self._by_id.get(contact_id)
        if contact is None or contact.owner_id != owner_id:
            return None
        return contact

    def list_all(self, owner_id: str) -> list[Contact]:
        return self._owned(owner_id)

    def find_by_normalized_phone(
        self, owner_id: str, key: str, *, exclude_id: str | None = None
    ) -> Contact | None:
        for contact in self._owned(owner_id):
            if contact.phone_normalized == key and contact.id != exclude_id:
                return contact
        return None

    def find_by_name_ci(self, owner_id: str, name: str) -> Contact | None:
        needle = name.lower()
        for contact in self._owned(owner_id):
            if contact.name.lower() == needle:
                return contact
        return None

    def update(self, contact: Contact) -> bool:
        if self.get_by_id(contact.owner_id, contact.id) is None:
            return False
        if self._phone_taken(contact):
            raise DuplicateKeyError(
                f"Duplicate key: phone {contact.phone_normalized} already exists"
            )
        self._by_id[contact.id] = contact
        return True

    def delete(self, owner_id: str, contact_id: str) -> bool:
        if self.get_by_id(owner_id, contact_id) is None:
            return False
        del self._by_id[contact_id]
        self._order.remove(contact_id)
        return True

    def find_nearby(
        self, owner_id: str, point: GeoPoint, radius_km: float
    ) -> list[Contact]:
        hits = []
        for contact in self._owned(owner_id):
            if contact.location is None:
                continue
            distance = haversine_km(point, contact.location)
            if distance <= radius_km:
                hits.append((distance, contact))
        hits.sort(key=lambda hit: hit[0])
        return [contact for _, contact in hits]


class InMemoryGroupRepository:
    def __init__(self) -> None:
        self._by_id: dict[str, Group] = {}

    def add(self, group: Group) -> None:
        self._by_id[group.id] = group

    def get_by_id(self, owner_id: str, group_id: str) -> Group | None:
        group = self._by_id.get(group_id)
        if group is None or group.owner_id != owner_id:
            return None
        return group

    def list_all(self, owner_id: str) -> list[Group]:
        return [g for g in self._by_id.values() if g.owner_id == owner_id]

    def update(self, group: Group) -> bool:
        if self.get_by_id(group.owner_id, group.id) is None:
            return False
        self._by_id[group.id] = group
        return True

    def delete(self, owner_id: str, group_id: str) -> bool:
        if self.get_by_id(owner_id, group_id) is None:
            return False
        del self._by_id[group_id]
        return True

    def remove_member(self, owner_id: str, contact_id: str) -> None:
        for group in self.list_all(owner_id):
            if contact_id in group.member_ids:
                self._by_id[group.id] = Group(
                    id=group.id,
                    owner_id=group.owner_id,
                    name=group.name,
                    description=group.description,
                    member_ids=tuple(m for m in group.member_ids if m != contact_id),
                    created_at=group.created_at,
                )


class InMemoryTodoRepository:
    def __init__(self) -> None:
        self._by_id: dict[str, Todo] = {}

    def add(self, todo: Todo) -> None:
        self._by_id[todo.id] = todo

    def get_by_id(self, owner_id: str, todo_id: str) -> Todo | None:
        todo = self._by_id.get(todo_id)
        if todo is None or todo.owner_id != owner_id:
            return None
        return todo

    def list_all(self, owner_id: str) -> list[Todo]:
        return [t for t in self._by_id.values() if t.owner_id == owner_id]

    def update(self, todo: Todo) -> bool:
        if self.get_by_id(todo.owner_id, todo.id) is None:
            return False
        self._by_id[todo.id] = todo
        return True

    def delete(self, owner_id: str, todo_id: str) -> bool:
        if self.get_by_id(owner_id, todo_id) is None:
            return False
        del self._by_id[todo_id]
        return True


class InMemoryDirectoryRepository:
    def __init__(self) -> None:
        self._entries: list[DirectoryEntry] = []

    def add(self, entry: DirectoryEntry) -> None:
        if self.find_by_phone(entry.owner_id, entry.phone_normalized) is not None:
            raise DuplicateKeyError(
                f"Duplicate key: phone {entry.phone_normalized} already exists"
            )
        self._entries.append(entry)

    def list_all(self, owner_id: str) -> list[DirectoryEntry]:
        return [e for e in self._entries if e.owner_id == owner_id]

    def find_by_phone(self, owner_id: str, key: str) -> DirectoryEntry | None:
        for entry in self._entries:
            if entry.owner_id == owner_id and entry.phone_normalized == key:
                return entry
        return None
