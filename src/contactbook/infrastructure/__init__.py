"""Infrastructure layer: concrete implementations of application ports."""

from contactbook.infrastructure.memory_repository import (
    InMemoryContactRepository,
    InMemoryDirectoryRepository,
    InMemoryGroupRepository,
    InMemoryTodoRepository,
)
from contactbook.infrastructure.persistence.neo4j_repository import (
    Neo4jContactRepository,
    Neo4jDirectoryRepository,
    Neo4jGroupRepository,
    Neo4jTodoRepository,
)
from contactbook.infrastructure.persistence.schema import ensure_constraints
from contactbook.infrastructure.sources import (
    candidates_from_bulk,
    candidates_from_csv,
    candidates_from_google_connections,
)
from contactbook.infrastructure.stores import Stores, in_memory_stores, neo4j_stores

__all__ = [
    "InMemoryContactRepository",
    "InMemoryDirectoryRepository",
    "InMemoryGroupRepository",
    "InMemoryTodoRepository",
    "Neo4jContactRepository",
    "Neo4jDirectoryRepository",
    "Neo4jGroupRepository",
    "Neo4jTodoRepository",
    "Stores",
    "candidates_from_bulk",
    "candidates_from_csv",
    "candidates_from_google_connections",
    "ensure_constraints",
    "in_memory_stores",
    "neo4j_stores",
]
