"""One bundle of repositories per backend, handed to the services."""

from dataclasses import dataclass

from contactbook.application.ports import (
    ContactRepository,
    DirectoryRepository,
    GroupRepository,
    TodoRepository,
)
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


@dataclass(frozen=True)
class Stores:
    contacts: ContactRepository
    groups: GroupRepository
    todos: TodoRepository
    directory: DirectoryRepository


def in_memory_stores() -> Stores:
    return Stores(
        contacts=InMemoryContactRepository(),
        groups=InMemoryGroupRepository(),
        todos=InMemoryTodoRepository(),
        directory=InMemoryDirectoryRepository(),
    )


def neo4j_stores(driver) -> Stores:
    return Stores(
        contacts=Neo4jContactRepository(driver),
        groups=Neo4jGroupRepository(driver),
        todos=Neo4jTodoRepository(driver),
        directory=Neo4jDirectoryRepository(driver),
    )
