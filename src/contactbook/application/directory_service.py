"""Unknown-number directory: names for phone numbers that are not contacts."""

from contactbook.application.dto import DirectoryConflict, Invalid
from contactbook.application.errors import DuplicateKeyError
from contactbook.application.ports import DirectoryRepository
from contactbook.domain import DirectoryEntry
from contactbook.domain.phone import normalize_phone


class DirectoryService:
    def __init__(
        self, repository: DirectoryRepository, *, default_region: str | None = None
    ) -> None:
        self._repo = repository
        self._default_region = default_region

    def add_entry(
        self, owner_id: str, name: str | None, phone: str | None
    ) -> DirectoryEntry | DirectoryConflict | Invalid:
        name = (name or "").strip()
        phone = (phone or "").strip()
        if not name or not phone:
            return Invalid(reason="Phone and Name are required")

        key = normalize_phone(phone, self._default_region)
        existing = self._repo.find_by_phone(owner_id, key)
        if existing is not None:
            return DirectoryConflict(existing=existing)

        entry = DirectoryEntry(owner_id=owner_id, name=name, phone=phone, phone_normalized=key)
        try:
            self._repo.add(entry)
        except DuplicateKeyError:
            existing = self._repo.find_by_phone(owner_id, key)
            if existing is None:
                raise
            return DirectoryConflict(existing=existing)
        return entry

    def list_entries(self, owner_id: str) -> list[DirectoryEntry]:
        return self._repo.list_all(owner_id)

    def lookup(self, owner_id: str, phone: str | None) -> DirectoryEntry | None:
        """Return the entry for phone (any formatting), or None."""
        key = normalize_phone(phone, self._default_region)
        if not key:
            return None
        return self._repo.find_by_phone(owner_id, key)
