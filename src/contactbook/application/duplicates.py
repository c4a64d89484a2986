"""Duplicate detection against the contact store. Read-only."""

from contactbook.application.dto import NameConflict, NoConflict, PhoneConflict
from contactbook.application.ports import ContactRepository


class DuplicateResolver:
    """Decides whether a contact already exists for an owner.

    Phone is checked before name: a shared phone is the stronger identity
    signal, so when both match the caller always sees PhoneConflict.
    """

    def __init__(self, repository: ContactRepository) -> None:
        self._repo = repository

    def find_duplicate(
        self,
        owner_id: str,
        normalized_phone: str,
        name: str | None,
        *,
        check_name: bool = True,
        exclude_id: str | None = None,
    ) -> PhoneConflict | NameConflict | NoConflict:
        """Return the first conflict for (owner_id, normalized_phone, name).

        check_name=False restricts the check to the phone (import flows).
        exclude_id ignores one contact, for updates of that contact.
        """
        existing = self._repo.find_by_normalized_phone(
            owner_id, normalized_phone, exclude_id=exclude_id
        )
        if existing is not None:
            return PhoneConflict(existing=existing)

        if check_name and name:
            existing = self._repo.find_by_name_ci(owner_id, name)
            if existing is not None and existing.id != exclude_id:
                return NameConflict(existing=existing)

        return NoConflict()
