"""Contact creation, update, deletion, listing and nearby search."""

from dataclasses import replace

from contactbook.application.dto import (
    ContactCreated,
    ContactData,
    ContactDeleted,
    ContactNotFound,
    ContactUpdated,
    Invalid,
    NameConflict,
    NoConflict,
    PhoneConflict,
)
from contactbook.application.duplicates import DuplicateResolver
from contactbook.application.errors import DuplicateKeyError
from contactbook.application.ports import ContactRepository, GroupRepository
from contactbook.domain import DEFAULT_CONTACT_TYPE, Contact, GeoPoint, initial_for
from contactbook.domain.phone import normalize_phone

DEFAULT_NEARBY_RADIUS_KM = 5.0


def _clean(value: str | None) -> str | None:
    return (value or "").strip() or None


class ContactService:
    """Single-contact flows. Creation rejects phone and (by default) name duplicates."""

    def __init__(
        self,
        repository: ContactRepository,
        *,
        groups: GroupRepository | None = None,
        default_region: str | None = None,
        check_name_conflicts: bool = True,
    ) -> None:
        self._repo = repository
        self._groups = groups
        self._resolver = DuplicateResolver(repository)
        self._default_region = default_region
        self._check_name_conflicts = check_name_conflicts

    def create_contact(
        self, owner_id: str, data: ContactData
    ) -> ContactCreated | PhoneConflict | NameConflict | Invalid:
        """Validate, check for duplicates, and store a new contact."""
        name = (data.name or "").strip()
        phone = (data.phone or "").strip()
        if not name or not phone:
            return Invalid(reason="Name and phone are required.")

        key = normalize_phone(phone, self._default_region)
        conflict = self._resolver.find_duplicate(
            owner_id, key, name, check_name=self._check_name_conflicts
        )
        if not isinstance(conflict, NoConflict):
            return conflict

        try:
            contact = Contact(
                owner_id=owner_id,
                name=name,
                phone=phone,
                phone_normalized=key,
                email=_clean(data.email),
                avatar=_clean(data.avatar),
                initial=_clean(data.initial) or initial_for(name),
                contact_type=_clean(data.contact_type) or DEFAULT_CONTACT_TYPE,
                location=data.location,
            )
        except ValueError as e:
            return Invalid(reason=str(e))

        try:
            stored = self._repo.insert(contact)
        except DuplicateKeyError:
            # Another writer took the phone between the check and the insert.
            existing = self._repo.find_by_normalized_phone(owner_id, key)
            if existing is None:
                raise
            return PhoneConflict(existing=existing)
        return ContactCreated(contact=stored)

    def update_contact(
        self, owner_id: str, contact_id: str, data: ContactData
    ) -> ContactUpdated | ContactNotFound | PhoneConflict | Invalid:
        """Apply the non-None fields of data. The initial always follows the name."""
        current = self._repo.get_by_id(owner_id, contact_id)
        if current is None:
            return ContactNotFound(contact_id=contact_id)

        if data.name is not None and not data.name.strip():
            return Invalid(reason="Name must be non-empty.")
        if data.phone is not None and not data.phone.strip():
            return Invalid(reason="Phone must be non-empty.")

        name = data.name.strip() if data.name is not None else current.name
        phone = data.phone.strip() if data.phone is not None else current.phone
        key = normalize_phone(phone, self._default_region)
        if data.phone is not None:
            conflict = self._resolver.find_duplicate(
                owner_id, key, name, check_name=False, exclude_id=contact_id
            )
            if isinstance(conflict, PhoneConflict):
                return conflict

        updated = replace(
            current,
            name=name,
            phone=phone,
            phone_normalized=key,
            email=_clean(data.email) if data.email is not None else current.email,
            avatar=_clean(data.avatar) if data.avatar is not None else current.avatar,
            initial=initial_for(name),
            contact_type=_clean(data.contact_type) or current.contact_type,
            location=data.location if data.location is not None else current.location,
        )
        try:
            found = self._repo.update(updated)
        except DuplicateKeyError:
            existing = self._repo.find_by_normalized_phone(
                owner_id, key, exclude_id=contact_id
            )
            if existing is None:
                raise
            return PhoneConflict(existing=existing)
        if not found:
            return ContactNotFound(contact_id=contact_id)
        return ContactUpdated(contact=updated)

    def delete_contact(
        self, owner_id: str, contact_id: str
    ) -> ContactDeleted | ContactNotFound:
        """Delete a contact and remove it from all of the owner's groups."""
        if not self._repo.delete(owner_id, contact_id):
            return ContactNotFound(contact_id=contact_id)
        if self._groups is not None:
            self._groups.remove_member(owner_id, contact_id)
        return ContactDeleted(contact_id=contact_id)

    def list_contacts(self, owner_id: str) -> list[Contact]:
        return self._repo.list_all(owner_id)

    def get_contact(self, owner_id: str, contact_id: str) -> Contact | None:
        return self._repo.get_by_id(owner_id, contact_id)

    def find_nearby(
        self,
        owner_id: str,
        latitude: float,
        longitude: float,
        radius_km: float = DEFAULT_NEARBY_RADIUS_KM,
    ) -> list[Contact] | Invalid:
        """Return contacts located within radius_km of (latitude, longitude), nearest first."""
        if radius_km <= 0:
            return Invalid(reason="Radius must be positive.")
        try:
            point = GeoPoint(latitude=latitude, longitude=longitude)
        except ValueError as e:
            return Invalid(reason=str(e))
        return self._repo.find_nearby(owner_id, point, radius_km)
