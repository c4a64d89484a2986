"""Neo4j constraints and error translation shared by the repositories."""

from contextlib import contextmanager
from datetime import datetime

from neo4j.exceptions import ConstraintError, ServiceUnavailable, SessionExpired

from contactbook.application.errors import DuplicateKeyError, StoreUnavailable

_CONSTRAINTS = (
    """
    CREATE CONSTRAINT contact_id_unique IF NOT EXISTS
    FOR (c:Contact) REQUIRE c.id IS UNIQUE
    """,
    """
    CREATE CONSTRAINT contact_phone_unique IF NOT EXISTS
    FOR (c:Contact) REQUIRE (c.owner_id, c.phone_normalized) IS UNIQUE
    """,
    """
    CREATE CONSTRAINT directory_phone_unique IF NOT EXISTS
    FOR (d:DirectoryEntry) REQUIRE (d.owner_id, d.phone_normalized) IS UNIQUE
    """,
    """
    CREATE CONSTRAINT owner_id_unique IF NOT EXISTS
    FOR (o:Owner) REQUIRE o.id IS UNIQUE
    """,
)


def ensure_constraints(driver) -> None:
    """Create unique constraints if missing. Call once at startup."""
    with translate_errors(), driver.session() as session:
        for query in _CONSTRAINTS:
            session.run(query).consume()


@contextmanager
def translate_errors():
    """Re-raise driver errors as application store errors."""
    try:
        yield
    except ConstraintError as e:
        raise DuplicateKeyError(e.message or str(e)) from e
    except (ServiceUnavailable, SessionExpired) as e:
        raise StoreUnavailable(str(e)) from e


def datetime_to_iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.isoformat()


def iso_to_datetime(s: str | None) -> datetime | None:
    if not s:
        return None
    return datetime.fromisoformat(s.replace("Z", "+00:00"))
