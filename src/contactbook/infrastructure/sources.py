"""Map external contact payloads (Google People API, CSV, bulk JSON) to ImportCandidate.

These only reshape data that was already fetched; none of them performs I/O.
"""

import csv
import io
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from contactbook.application.dto import ImportCandidate, ImportSource
from contactbook.domain import GeoPoint

logger = logging.getLogger(__name__)

DEFAULT_GOOGLE_PAGE_SIZE = 2000
GOOGLE_NO_NAME = "No Name"


def _as_non_empty_string(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _first_value(entries: Any, key: str) -> str | None:
    """Return entries[0][key] for a People API list field, or None."""
    if not isinstance(entries, list) or not entries:
        return None
    first = entries[0]
    if not isinstance(first, dict):
        return None
    return _as_non_empty_string(first.get(key))


def candidates_from_google_connections(
    connections: Iterable[Mapping[str, Any]] | None,
    page_size: int = DEFAULT_GOOGLE_PAGE_SIZE,
) -> list[ImportCandidate]:
    """Build candidates from a People API connections page.

    At most page_size people are considered. Each uses its first name, email
    and phone; people without any phone number are dropped.
    """
    out: list[ImportCandidate] = []
    for i, person in enumerate(connections or []):
        if i >= page_size:
            break
        if not isinstance(person, Mapping):
            continue
        phone = _first_value(person.get("phoneNumbers"), "value")
        if phone is None:
            continue
        out.append(
            ImportCandidate(
                name=_first_value(person.get("names"), "displayName") or GOOGLE_NO_NAME,
                phone=phone,
                email=_first_value(person.get("emailAddresses"), "value"),
                source=ImportSource.GOOGLE,
            )
        )
    return out


def candidates_from_csv(text: str) -> list[ImportCandidate]:
    """Build one candidate per data row. Header names are case-insensitive.

    Recognized columns: name, phone, email, type. Rows missing name or phone
    are kept so the reconciler reports them as skipped.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    out: list[ImportCandidate] = []
    for row in reader:
        fields = {
            (k or "").strip().lower(): v for k, v in row.items() if isinstance(v, str)
        }
        if not any((v or "").strip() for v in fields.values()):
            continue
        out.append(
            ImportCandidate(
                name=_as_non_empty_string(fields.get("name")),
                phone=_as_non_empty_string(fields.get("phone")),
                email=_as_non_empty_string(fields.get("email")),
                contact_type=_as_non_empty_string(fields.get("type")),
                source=ImportSource.CSV,
            )
        )
    return out


def _location(raw: Any) -> GeoPoint | None:
    if not isinstance(raw, Mapping):
        return None
    try:
        return GeoPoint(latitude=float(raw["lat"]), longitude=float(raw["lng"]))
    except (KeyError, TypeError, ValueError):
        logger.warning("Ignoring invalid location in bulk payload: %r", raw)
        return None


def candidates_from_bulk(items: Iterable[Mapping[str, Any]]) -> list[ImportCandidate]:
    """Build candidates from bulk API objects {name, phone, email, avatar, initial, type, location}."""
    out: list[ImportCandidate] = []
    for item in items:
        if not isinstance(item, Mapping):
            out.append(ImportCandidate(source=ImportSource.BULK_API))
            continue
        out.append(
            ImportCandidate(
                name=_as_non_empty_string(item.get("name")),
                phone=_as_non_empty_string(item.get("phone")),
                email=_as_non_empty_string(item.get("email")),
                avatar=_as_non_empty_string(item.get("avatar")),
                initial=_as_non_empty_string(item.get("initial")),
                contact_type=_as_non_empty_string(item.get("type")),
                location=_location(item.get("location")),
                source=ImportSource.BULK_API,
            )
        )
    return out
