"""Batch import: reconcile candidate contacts against the store, one at a time."""

import logging
from collections.abc import Iterable

from contactbook.application.dto import (
    ImportCandidate,
    ImportSource,
    ImportSummary,
    NameConflict,
    PhoneConflict,
    SkippedCandidate,
)
from contactbook.application.duplicates import DuplicateResolver
from contactbook.application.errors import DuplicateKeyError
from contactbook.application.ports import ContactRepository
from contactbook.domain import DEFAULT_CONTACT_TYPE, Contact, initial_for
from contactbook.domain.phone import normalize_phone

logger = logging.getLogger(__name__)

MISSING_FIELDS_REASON = "missing name or phone"
NAME_EXISTS_REASON = "name exists"

# Google imports have always reported the capitalized form.
_PHONE_EXISTS_REASONS = {
    ImportSource.GOOGLE: "Phone already exists",
    ImportSource.CSV: "phone exists",
    ImportSource.BULK_API: "phone exists",
}


def phone_exists_reason(source: ImportSource) -> str:
    return _PHONE_EXISTS_REASONS.get(source, "phone exists")


class ImportService:
    """Reconciles batches of ImportCandidate into added contacts and skipped records.

    Candidates are processed strictly in input order and each accepted one is
    written before the next is checked, so a later candidate sharing a phone
    with an earlier one is skipped. The duplicate check is advisory; the
    store's unique key has the final word and a lost race is a skip.
    StoreUnavailable is not caught: the whole batch fails.
    """

    def __init__(
        self,
        repository: ContactRepository,
        *,
        default_region: str | None = None,
        check_name_conflicts: bool = False,
    ) -> None:
        self._repo = repository
        self._resolver = DuplicateResolver(repository)
        self._default_region = default_region
        self._check_name_conflicts = check_name_conflicts

    def reconcile(
        self, owner_id: str, candidates: Iterable[ImportCandidate]
    ) -> ImportSummary:
        """Import candidates for owner_id and return per-record outcomes."""
        summary = ImportSummary()
        for candidate in candidates:
            outcome = self._reconcile_one(owner_id, candidate)
            if isinstance(outcome, SkippedCandidate):
                summary.skipped.append(outcome)
            else:
                summary.added.append(outcome)
        logger.info(
            "Import for owner %s: %d added, %d skipped",
            owner_id,
            summary.added_count,
            summary.skipped_count,
        )
        return summary

    def _reconcile_one(
        self, owner_id: str, candidate: ImportCandidate
    ) -> Contact | SkippedCandidate:
        name = (candidate.name or "").strip()
        phone = (candidate.phone or "").strip()
        if not name or not phone:
            return SkippedCandidate(candidate=candidate, reason=MISSING_FIELDS_REASON)

        key = normalize_phone(phone, self._default_region)
        conflict = self._resolver.find_duplicate(
            owner_id, key, name, check_name=self._check_name_conflicts
        )
        if isinstance(conflict, PhoneConflict):
            return SkippedCandidate(
                candidate=candidate, reason=phone_exists_reason(candidate.source)
            )
        if isinstance(conflict, NameConflict):
            return SkippedCandidate(candidate=candidate, reason=NAME_EXISTS_REASON)

        try:
            contact = Contact(
                owner_id=owner_id,
                name=name,
                phone=phone,
                phone_normalized=key,
                email=(candidate.email or "").strip() or None,
                avatar=(candidate.avatar or "").strip() or None,
                initial=(candidate.initial or "").strip() or initial_for(name),
                contact_type=(candidate.contact_type or "").strip()
                or DEFAULT_CONTACT_TYPE,
                location=candidate.location,
            )
        except ValueError as e:
            return SkippedCandidate(candidate=candidate, reason=str(e))

        try:
            return self._repo.insert(contact)
        except DuplicateKeyError as e:
            logger.warning(
                "Import for owner %s lost insert race on phone %s: %s", owner_id, key, e
            )
            return SkippedCandidate(candidate=candidate, reason=str(e))
