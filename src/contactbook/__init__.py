"""
Contactbook core: clean-architecture layout.

- domain: entities (Contact, Group, Todo, DirectoryEntry) and phone normalization.
- application: use cases (ContactService, ImportService, ...), ports, DTOs.
- infrastructure: adapters (in-memory and Neo4j repositories, import sources).
"""

from contactbook.application import (
    ContactService,
    DirectoryService,
    DuplicateResolver,
    GroupService,
    ImportCandidate,
    ImportService,
    ImportSource,
    ImportSummary,
    TodoService,
)
from contactbook.domain import Contact, DirectoryEntry, GeoPoint, Group, Todo
from contactbook.domain.phone import normalize_phone
from contactbook.infrastructure import (
    InMemoryContactRepository,
    Neo4jContactRepository,
    Stores,
    in_memory_stores,
    neo4j_stores,
)

__all__ = [
    "Contact",
    "ContactService",
    "DirectoryEntry",
    "DirectoryService",
    "DuplicateResolver",
    "GeoPoint",
    "Group",
    "GroupService",
    "ImportCandidate",
    "ImportService",
    "ImportSource",
    "ImportSummary",
    "InMemoryContactRepository",
    "Neo4jContactRepository",
    "Stores",
    "Todo",
    "TodoService",
    "in_memory_stores",
    "neo4j_stores",
    "normalize_phone",
]
