"""Neo4j implementations of the repository ports.
Graph: one Owner node per user id; everything else hangs off it.
(owner:Owner {id})-[:HAS_CONTACT]->(c:Contact {owner_id, phone_normalized, ...})
(owner)-[:HAS_GROUP]->(g:Group)-[:HAS_MEMBER {position}]->(c)
(owner)-[:HAS_TODO]->(t:Todo)
(owner)-[:HAS_ENTRY]->(d:DirectoryEntry)
Contact and DirectoryEntry carry owner_id so the composite unique constraints
in schema.py can enforce one phone per owner.
"""

from contactbook.domain import (
    DEFAULT_CONTACT_TYPE,
    Contact,
    DirectoryEntry,
    GeoPoint,
    Group,
    Todo,
)
from contactbook.infrastructure.persistence.schema import (
    datetime_to_iso,
    iso_to_datetime,
    translate_errors,
)

# --- contacts ---

_INSERT_CONTACT = """
MERGE (owner:Owner {id: $owner_id})
CREATE (owner)-[:HAS_CONTACT]->(c:Contact {
    id: $id,
    owner_id: $owner_id,
    name: $name,
    phone: $phone,
    phone_normalized: $phone_normalized,
    email: $email,
    avatar: $avatar,
    initial: $initial,
    contact_type: $contact_type,
    latitude: $latitude,
    longitude: $longitude,
    created_at: $created_at
})
"""

_UPDATE_CONTACT = """
MATCH (:Owner {id: $owner_id})-[:HAS_CONTACT]->(c:Contact {id: $id})
SET c.name = $name,
    c.phone = $phone,
    c.phone_normalized = $phone_normalized,
    c.email = $email,
    c.avatar = $avatar,
    c.initial = $initial,
    c.contact_type = $contact_type,
    c.latitude = $latitude,
    c.longitude = $longitude
RETURN c.id AS id
"""

_GET_CONTACT = """
MATCH (:Owner {id: $owner_id})-[:HAS_CONTACT]->(c:Contact {id: $id})
RETURN c
"""

_LIST_CONTACTS = """
MATCH (:Owner {id: $owner_id})-[:HAS_CONTACT]->(c:Contact)
RETURN c
ORDER BY c.created_at
"""

_FIND_BY_PHONE = """
MATCH (:Owner {id: $owner_id})-[:HAS_CONTACT]->(c:Contact {phone_normalized: $key})
WHERE $exclude_id IS NULL OR c.id <> $exclude_id
RETURN c
LIMIT 1
"""

_FIND_BY_NAME_CI = """
MATCH (:Owner {id: $owner_id})-[:HAS_CONTACT]->(c:Contact)
WHERE toLower(c.name) = toLower($name)
RETURN c
ORDER BY c.created_at
LIMIT 1
"""

_DELETE_CONTACT = """
MATCH (:Owner {id: $owner_id})-[:HAS_CONTACT]->(c:Contact {id: $id})
DETACH DELETE c
RETURN 1 AS ok
"""

_FIND_NEARBY = """
MATCH (:Owner {id: $owner_id})-[:HAS_CONTACT]->(c:Contact)
WHERE c.latitude IS NOT NULL AND c.longitude IS NOT NULL
WITH c, point.distance(
    point({latitude: c.latitude, longitude: c.longitude}),
    point({latitude: $latitude, longitude: $longitude})
) AS meters
WHERE meters <= $max_meters
RETURN c
ORDER BY meters
"""


def _contact_params(contact: Contact) -> dict:
    location = contact.location
    return {
        "id": contact.id,
        "owner_id": contact.owner_id,
        "name": contact.name,
        "phone": contact.phone,
        "phone_normalized": contact.phone_normalized,
        "email": contact.email,
        "avatar": contact.avatar,
        "initial": contact.initial,
        "contact_type": contact.contact_type,
        "latitude": location.latitude if location else None,
        "longitude": location.longitude if location else None,
        "created_at": datetime_to_iso(contact.created_at),
    }


def _node_to_contact(c) -> Contact:
    location = None
    if c.get("latitude") is not None and c.get("longitude") is not None:
        location = GeoPoint(latitude=c["latitude"], longitude=c["longitude"])
    return Contact(
        id=c["id"],
        owner_id=c["owner_id"],
        name=c["name"],
        phone=c.get("phone") or "",
        phone_normalized=c.get("phone_normalized") or "",
        email=c.get("email"),
        avatar=c.get("avatar"),
        initial=c.get("initial"),
        contact_type=c.get("contact_type") or DEFAULT_CONTACT_TYPE,
        location=location,
        created_at=iso_to_datetime(c["created_at"]),
    )


class Neo4jContactRepository:
    """Stores contacts in Neo4j. The contact_phone_unique constraint is the
    authority on (owner_id, phone_normalized); violations surface as DuplicateKeyError.
    """

    def __init__(self, driver: object) -> None:
        self._driver = driver

    def insert(self, contact: Contact) -> Contact:
        with translate_errors(), self._driver.session() as session:
            session.run(_INSERT_CONTACT, **_contact_params(contact)).consume()
        return contact

    def get_by_id(self, owner_id: str, contact_id: str) -> Contact | None:
        with translate_errors(), self._driver.session() as session:
            record = session.run(_GET_CONTACT, owner_id=owner_id, id=contact_id).single()
        if not record:
            return None
        return _node_to_contact(record["c"])

    def list_all(self, owner_id: str) -> list[Contact]:
        with translate_errors(), self._driver.session() as session:
            result = session.run(_LIST_CONTACTS, owner_id=owner_id)
            return [_node_to_contact(rec["c"]) for rec in result]

    def find_by_normalized_phone(
        self, owner_id: str, key: str, *, exclude_id: str | None = None
    ) -> Contact | None:
        with translate_errors(), self._driver.session() as session:
            record = session.run(
                _FIND_BY_PHONE, owner_id=owner_id, key=key, exclude_id=exclude_id
            ).single()
        if not record:
            return None
        return _node_to_contact(record["c"])

    def find_by_name_ci(self, owner_id: str, name: str) -> Contact | None:
        with translate_errors(), self._driver.session() as session:
            record = session.run(_FIND_BY_NAME_CI, owner_id=owner_id, name=name).single()
        if not record:
            return None
        return _node_to_contact(record["c"])

    def update(self, contact: Contact) -> bool:
        with translate_errors(), self._driver.session() as session:
            record = session.run(_UPDATE_CONTACT, **_contact_params(contact)).single()
        return record is not None

    def delete(self, owner_id: str, contact_id: str) -> bool:
        with translate_errors(), self._driver.session() as session:
            record = session.run(_DELETE_CONTACT, owner_id=owner_id, id=contact_id).single()
        return record is not None

    def find_nearby(
        self, owner_id: str, point: GeoPoint, radius_km: float
    ) -> list[Contact]:
        with translate_errors(), self._driver.session() as session:
            result = session.run(
                _FIND_NEARBY,
                owner_id=owner_id,
                latitude=point.latitude,
                longitude=point.longitude,
                max_meters=radius_km * 1000,
            )
            return [_node_to_contact(rec["c"]) for rec in result]


# --- groups ---

_CREATE_GROUP = """
MERGE (owner:Owner {id: $owner_id})
CREATE (owner)-[:HAS_GROUP]->(:Group {
    id: $id,
    owner_id: $owner_id,
    name: $name,
    description: $description,
    created_at: $created_at
})
"""

_SET_GROUP_MEMBERS = """
MATCH (:Owner {id: $owner_id})-[:HAS_GROUP]->(g:Group {id: $id})
OPTIONAL MATCH (g)-[m:HAS_MEMBER]->()
DELETE m
WITH DISTINCT g
UNWIND range(0, size($member_ids) - 1) AS i
MATCH (:Owner {id: $owner_id})-[:HAS_CONTACT]->(c:Contact {id: $member_ids[i]})
CREATE (g)-[:HAS_MEMBER {position: i}]->(c)
"""

_UPDATE_GROUP = """
MATCH (:Owner {id: $owner_id})-[:HAS_GROUP]->(g:Group {id: $id})
SET g.name = $name, g.description = $description
RETURN g.id AS id
"""

_GROUPS_WITH_MEMBERS = """
MATCH (:Owner {id: $owner_id})-[:HAS_GROUP]->(g:Group)
WHERE $id IS NULL OR g.id = $id
OPTIONAL MATCH (g)-[m:HAS_MEMBER]->(c:Contact)
WITH g, m, c
ORDER BY m.position
RETURN g, collect(c.id) AS member_ids
ORDER BY g.created_at
"""

_DELETE_GROUP = """
MATCH (:Owner {id: $owner_id})-[:HAS_GROUP]->(g:Group {id: $id})
DETACH DELETE g
RETURN 1 AS ok
"""

_REMOVE_MEMBER = """
MATCH (:Owner {id: $owner_id})-[:HAS_GROUP]->(:Group)-[m:HAS_MEMBER]->(:Contact {id: $contact_id})
DELETE m
"""


def _record_to_group(record) -> Group:
    g = record["g"]
    return Group(
        id=g["id"],
        owner_id=g["owner_id"],
        name=g["name"],
        description=g.get("description"),
        member_ids=tuple(record["member_ids"]),
        created_at=iso_to_datetime(g["created_at"]),
    )


def _set_members_tx(tx, group: Group) -> None:
    tx.run(
        _SET_GROUP_MEMBERS,
        id=group.id,
        owner_id=group.owner_id,
        member_ids=list(group.member_ids),
    ).consume()


def _create_group_tx(tx, group: Group) -> None:
    tx.run(
        _CREATE_GROUP,
        id=group.id,
        owner_id=group.owner_id,
        name=group.name,
        description=group.description,
        created_at=datetime_to_iso(group.created_at),
    ).consume()
    _set_members_tx(tx, group)


def _update_group_tx(tx, group: Group) -> bool:
    record = tx.run(
        _UPDATE_GROUP,
        id=group.id,
        owner_id=group.owner_id,
        name=group.name,
        description=group.description,
    ).single()
    if record is None:
        return False
    _set_members_tx(tx, group)
    return True


class Neo4jGroupRepository:
    """Group node and its HAS_MEMBER edges are written in one transaction."""

    def __init__(self, driver: object) -> None:
        self._driver = driver

    def add(self, group: Group) -> None:
        with translate_errors(), self._driver.session() as session:
            session.execute_write(_create_group_tx, group)

    def get_by_id(self, owner_id: str, group_id: str) -> Group | None:
        with translate_errors(), self._driver.session() as session:
            record = session.run(
                _GROUPS_WITH_MEMBERS, owner_id=owner_id, id=group_id
            ).single()
        if not record:
            return None
        return _record_to_group(record)

    def list_all(self, owner_id: str) -> list[Group]:
        with translate_errors(), self._driver.session() as session:
            result = session.run(_GROUPS_WITH_MEMBERS, owner_id=owner_id, id=None)
            return [_record_to_group(rec) for rec in result]

    def update(self, group: Group) -> bool:
        with translate_errors(), self._driver.session() as session:
            return session.execute_write(_update_group_tx, group)

    def delete(self, owner_id: str, group_id: str) -> bool:
        with translate_errors(), self._driver.session() as session:
            record = session.run(_DELETE_GROUP, owner_id=owner_id, id=group_id).single()
        return record is not None

    def remove_member(self, owner_id: str, contact_id: str) -> None:
        # DETACH DELETE of the contact already drops HAS_MEMBER; this covers callers
        # that unlink without deleting.
        with translate_errors(), self._driver.session() as session:
            session.run(_REMOVE_MEMBER, owner_id=owner_id, contact_id=contact_id).consume()


# --- todos ---

_CREATE_TODO = """
MERGE (owner:Owner {id: $owner_id})
CREATE (owner)-[:HAS_TODO]->(:Todo {
    id: $id,
    owner_id: $owner_id,
    description: $description,
    due_date: $due_date,
    is_completed: $is_completed,
    created_at: $created_at
})
"""

_UPDATE_TODO = """
MATCH (:Owner {id: $owner_id})-[:HAS_TODO]->(t:Todo {id: $id})
SET t.description = $description,
    t.due_date = $due_date,
    t.is_completed = $is_completed
RETURN t.id AS id
"""

_GET_TODO = """
MATCH (:Owner {id: $owner_id})-[:HAS_TODO]->(t:Todo {id: $id})
RETURN t
"""

_LIST_TODOS = """
MATCH (:Owner {id: $owner_id})-[:HAS_TODO]->(t:Todo)
RETURN t
ORDER BY t.created_at
"""

_DELETE_TODO = """
MATCH (:Owner {id: $owner_id})-[:HAS_TODO]->(t:Todo {id: $id})
DETACH DELETE t
RETURN 1 AS ok
"""


def _todo_params(todo: Todo) -> dict:
    return {
        "id": todo.id,
        "owner_id": todo.owner_id,
        "description": todo.description,
        "due_date": datetime_to_iso(todo.due_date),
        "is_completed": todo.is_completed,
        "created_at": datetime_to_iso(todo.created_at),
    }


def _node_to_todo(t) -> Todo:
    return Todo(
        id=t["id"],
        owner_id=t["owner_id"],
        description=t["description"],
        due_date=iso_to_datetime(t.get("due_date")),
        is_completed=bool(t.get("is_completed")),
        created_at=iso_to_datetime(t["created_at"]),
    )


class Neo4jTodoRepository:
    def __init__(self, driver: object) -> None:
        self._driver = driver

    def add(self, todo: Todo) -> None:
        with translate_errors(), self._driver.session() as session:
            session.run(_CREATE_TODO, **_todo_params(todo)).consume()

    def get_by_id(self, owner_id: str, todo_id: str) -> Todo | None:
        with translate_errors(), self._driver.session() as session:
            record = session.run(_GET_TODO, owner_id=owner_id, id=todo_id).single()
        if not record:
            return None
        return _node_to_todo(record["t"])

    def list_all(self, owner_id: str) -> list[Todo]:
        with translate_errors(), self._driver.session() as session:
            result = session.run(_LIST_TODOS, owner_id=owner_id)
            return [_node_to_todo(rec["t"]) for rec in result]

    def update(self, todo: Todo) -> bool:
        params = _todo_params(todo)
        params.pop("created_at")
        with translate_errors(), self._driver.session() as session:
            record = session.run(_UPDATE_TODO, **params).single()
        return record is not None

    def delete(self, owner_id: str, todo_id: str) -> bool:
        with translate_errors(), self._driver.session() as session:
            record = session.run(_DELETE_TODO, owner_id=owner_id, id=todo_id).single()
        return record is not None


# --- unknown-number directory ---

_CREATE_ENTRY = """
MERGE (owner:Owner {id: $owner_id})
CREATE (owner)-[:HAS_ENTRY]->(:DirectoryEntry {
    id: $id,
    owner_id: $owner_id,
    name: $name,
    phone: $phone,
    phone_normalized: $phone_normalized
})
"""

_LIST_ENTRIES = """
MATCH (:Owner {id: $owner_id})-[:HAS_ENTRY]->(d:DirectoryEntry)
RETURN d
ORDER BY d.name
"""

_FIND_ENTRY = """
MATCH (:Owner {id: $owner_id})-[:HAS_ENTRY]->(d:DirectoryEntry {phone_normalized: $key})
RETURN d
LIMIT 1
"""


def _node_to_entry(d) -> DirectoryEntry:
    return DirectoryEntry(
        id=d["id"],
        owner_id=d["owner_id"],
        name=d["name"],
        phone=d["phone"],
        phone_normalized=d.get("phone_normalized") or "",
    )


class Neo4jDirectoryRepository:
    def __init__(self, driver: object) -> None:
        self._driver = driver

    def add(self, entry: DirectoryEntry) -> None:
        with translate_errors(), self._driver.session() as session:
            session.run(
                _CREATE_ENTRY,
                id=entry.id,
                owner_id=entry.owner_id,
                name=entry.name,
                phone=entry.phone,
                phone_normalized=entry.phone_normalized,
            ).consume()

    def list_all(self, owner_id: str) -> list[DirectoryEntry]:
        with translate_errors(), self._driver.session() as session:
            result = session.run(_LIST_ENTRIES, owner_id=owner_id)
            return [_node_to_entry(rec["d"]) for rec in result]

    def find_by_phone(self, owner_id: str, key: str) -> DirectoryEntry | None:
        with translate_errors(), self._driver.session() as session:
            record = session.run(_FIND_ENTRY, owner_id=owner_id, key=key).single()
        if not record:
            return None
        return _node_to_entry(record["d"])
