"""
FastAPI backend: REST API for contacts, imports, groups, todos and the unknown-number directory.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging

from api.config import Settings, load_env_file, load_settings

load_env_file()

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from neo4j import GraphDatabase

from api.schemas import (
    BulkImportBody,
    ContactBody,
    ContactOut,
    DirectoryBody,
    DirectoryEntryOut,
    GoogleImportBody,
    GroupBody,
    GroupOut,
    ImportSummaryOut,
    TodoBody,
    TodoOut,
    existing_contact_detail,
)
from contactbook.application import (
    ContactNotFound,
    ContactService,
    DirectoryConflict,
    DirectoryService,
    DuplicateKeyError,
    GroupData,
    GroupNotFound,
    GroupService,
    ImportCandidate,
    ImportService,
    Invalid,
    NameConflict,
    PhoneConflict,
    StoreUnavailable,
    TodoFilter,
    TodoNotFound,
    TodoService,
)
from contactbook.infrastructure import (
    Stores,
    candidates_from_bulk,
    candidates_from_csv,
    candidates_from_google_connections,
    ensure_constraints,
    neo4j_stores,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=load_settings().log_level,
)
logger = logging.getLogger(__name__)

# Owner scope is supplied by the calling layer (auth/session lives elsewhere).
USER_ID_HEADER = "X-User-Id"


def _get_settings(app: FastAPI) -> Settings:
    if getattr(app.state, "settings", None) is None:
        app.state.settings = load_settings()
    return app.state.settings


def _get_driver(settings: Settings):
    return GraphDatabase.driver(
        settings.neo4j_uri, auth=(settings.neo4j_user, settings.neo4j_password)
    )


def _get_cached_driver(app: FastAPI):
    if getattr(app.state, "driver", None) is None:
        app.state.driver = _get_driver(_get_settings(app))
    return app.state.driver


def _get_stores(app: FastAPI) -> Stores:
    if getattr(app.state, "stores", None) is None:
        app.state.stores = neo4j_stores(_get_cached_driver(app))
    return app.state.stores


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.driver = None
    try:
        if getattr(app.state, "stores", None) is None:
            app.state.driver = _get_driver(_get_settings(app))
            ensure_constraints(app.state.driver)
        yield
    finally:
        if getattr(app.state, "driver", None) is not None:
            app.state.driver.close()


app = FastAPI(title="Contactbook API", lifespan=lifespan)


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error("Store unavailable during %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Store unavailable"})


@app.exception_handler(DuplicateKeyError)
async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    logger.warning("Unresolved duplicate key on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=409, content={"detail": str(exc)})


def require_owner(x_user_id: str | None = Header(None, alias=USER_ID_HEADER)) -> str:
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="User ID required")
    return user_id


def contact_service(request: Request) -> ContactService:
    stores = _get_stores(request.app)
    return ContactService(
        stores.contacts,
        groups=stores.groups,
        default_region=_get_settings(request.app).default_region,
    )


def import_service(request: Request) -> ImportService:
    settings = _get_settings(request.app)
    return ImportService(
        _get_stores(request.app).contacts,
        default_region=settings.default_region,
        check_name_conflicts=settings.import_check_names,
    )


def group_service(request: Request) -> GroupService:
    stores = _get_stores(request.app)
    return GroupService(stores.groups, stores.contacts)


def todo_service(request: Request) -> TodoService:
    return TodoService(_get_stores(request.app).todos)


def directory_service(request: Request) -> DirectoryService:
    return DirectoryService(
        _get_stores(request.app).directory,
        default_region=_get_settings(request.app).default_region,
    )


def _conflict(result: PhoneConflict | NameConflict) -> HTTPException:
    return HTTPException(
        status_code=400, detail=existing_contact_detail(result.message, result.existing)
    )


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- REST: contacts ---


@app.get("/contacts")
def list_contacts(
    owner: str = Depends(require_owner),
    service: ContactService = Depends(contact_service),
):
    return [ContactOut.from_contact(c) for c in service.list_contacts(owner)]


@app.post("/contacts", status_code=201)
def create_contact(
    body: ContactBody,
    owner: str = Depends(require_owner),
    service: ContactService = Depends(contact_service),
):
    try:
        data = body.to_data()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    result = service.create_contact(owner, data)
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    if isinstance(result, PhoneConflict | NameConflict):
        raise _conflict(result)
    return ContactOut.from_contact(result.contact)


@app.get("/contacts/nearby")
def nearby_contacts(
    lat: float | None = None,
    lng: float | None = None,
    radius: float = 5.0,
    owner: str = Depends(require_owner),
    service: ContactService = Depends(contact_service),
):
    """Contacts within radius km of (lat, lng), nearest first."""
    if lat is None or lng is None:
        raise HTTPException(status_code=400, detail="Latitude and longitude required")
    result = service.find_nearby(owner, lat, lng, radius)
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    return [ContactOut.from_contact(c) for c in result]


def _import_response(
    owner: str, candidates: list[ImportCandidate], service: ImportService
) -> ImportSummaryOut:
    summary = service.reconcile(owner, candidates)
    return ImportSummaryOut.from_summary(summary)


@app.post("/contacts/bulk")
def import_bulk(
    body: BulkImportBody,
    owner: str = Depends(require_owner),
    service: ImportService = Depends(import_service),
):
    if not body.contacts:
        raise HTTPException(status_code=400, detail="No contacts provided")
    return _import_response(owner, candidates_from_bulk(body.contacts), service)


@app.post("/contacts/import-csv")
async def import_csv(
    request: Request,
    owner: str = Depends(require_owner),
    service: ImportService = Depends(import_service),
):
    """Import a CSV document sent as the raw request body (name, phone, email, type columns)."""
    raw = await request.body()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8") from e
    candidates = candidates_from_csv(text)
    if not candidates:
        raise HTTPException(status_code=400, detail="No contacts provided")
    return _import_response(owner, candidates, service)


@app.post("/contacts/import-google")
def import_google(
    body: GoogleImportBody,
    request: Request,
    owner: str = Depends(require_owner),
    service: ImportService = Depends(import_service),
):
    """Import a Google People API connections page fetched by the caller."""
    page_size = _get_settings(request.app).google_page_size
    candidates = candidates_from_google_connections(body.connections, page_size=page_size)
    return _import_response(owner, candidates, service)


@app.get("/contacts/{contact_id}")
def get_contact(
    contact_id: str,
    owner: str = Depends(require_owner),
    service: ContactService = Depends(contact_service),
):
    contact = service.get_contact(owner, contact_id)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return ContactOut.from_contact(contact)


@app.put("/contacts/{contact_id}")
def update_contact(
    contact_id: str,
    body: ContactBody,
    owner: str = Depends(require_owner),
    service: ContactService = Depends(contact_service),
):
    try:
        data = body.to_data()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    result = service.update_contact(owner, contact_id, data)
    if isinstance(result, ContactNotFound):
        raise HTTPException(status_code=404, detail="Contact not found")
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    if isinstance(result, PhoneConflict):
        raise _conflict(result)
    return ContactOut.from_contact(result.contact)


@app.delete("/contacts/{contact_id}")
def delete_contact(
    contact_id: str,
    owner: str = Depends(require_owner),
    service: ContactService = Depends(contact_service),
):
    result = service.delete_contact(owner, contact_id)
    if isinstance(result, ContactNotFound):
        raise HTTPException(status_code=404, detail="Contact not found")
    return {"message": "Contact deleted successfully"}


# --- REST: groups ---


def _group_data(body: GroupBody) -> GroupData:
    return GroupData(name=body.name, description=body.description, member_ids=body.members)


@app.get("/groups")
def list_groups(
    owner: str = Depends(require_owner),
    service: GroupService = Depends(group_service),
):
    return [GroupOut.from_view(v) for v in service.list_groups(owner)]


@app.post("/groups", status_code=201)
def create_group(
    body: GroupBody,
    owner: str = Depends(require_owner),
    service: GroupService = Depends(group_service),
):
    result = service.create_group(owner, _group_data(body))
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    return GroupOut.from_view(result)


@app.put("/groups/{group_id}")
def update_group(
    group_id: str,
    body: GroupBody,
    owner: str = Depends(require_owner),
    service: GroupService = Depends(group_service),
):
    result = service.update_group(owner, group_id, _group_data(body))
    if isinstance(result, GroupNotFound):
        raise HTTPException(status_code=404, detail="Group not found")
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    return GroupOut.from_view(result)


@app.delete("/groups/{group_id}")
def delete_group(
    group_id: str,
    owner: str = Depends(require_owner),
    service: GroupService = Depends(group_service),
):
    result = service.delete_group(owner, group_id)
    if isinstance(result, GroupNotFound):
        raise HTTPException(status_code=404, detail="Group not found")
    return {"message": "Group deleted successfully"}


# --- REST: todos ---


@app.get("/todos")
def list_todos(
    todo_filter: TodoFilter = Query(TodoFilter.ALL, alias="filter"),
    owner: str = Depends(require_owner),
    service: TodoService = Depends(todo_service),
):
    return [TodoOut.from_todo(t) for t in service.list_todos(owner, todo_filter)]


@app.post("/todos", status_code=201)
def create_todo(
    body: TodoBody,
    owner: str = Depends(require_owner),
    service: TodoService = Depends(todo_service),
):
    result = service.create_todo(owner, body.description, body.due_date)
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    return TodoOut.from_todo(result)


@app.put("/todos/{todo_id}")
def update_todo(
    todo_id: str,
    body: TodoBody,
    owner: str = Depends(require_owner),
    service: TodoService = Depends(todo_service),
):
    result = service.update_todo(owner, todo_id, body.to_data())
    if isinstance(result, TodoNotFound):
        raise HTTPException(status_code=404, detail="Todo not found")
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    return TodoOut.from_todo(result)


@app.patch("/todos/{todo_id}/complete")
def complete_todo(
    todo_id: str,
    owner: str = Depends(require_owner),
    service: TodoService = Depends(todo_service),
):
    result = service.complete_todo(owner, todo_id)
    if isinstance(result, TodoNotFound):
        raise HTTPException(status_code=404, detail="Todo not found")
    return TodoOut.from_todo(result)


@app.delete("/todos/{todo_id}")
def delete_todo(
    todo_id: str,
    owner: str = Depends(require_owner),
    service: TodoService = Depends(todo_service),
):
    result = service.delete_todo(owner, todo_id)
    if isinstance(result, TodoNotFound):
        raise HTTPException(status_code=404, detail="Todo not found")
    return {"message": "Todo deleted successfully"}


# --- REST: unknown-number directory ---


@app.get("/directory")
def list_directory(
    owner: str = Depends(require_owner),
    service: DirectoryService = Depends(directory_service),
):
    return [DirectoryEntryOut.from_entry(e) for e in service.list_entries(owner)]


@app.post("/directory", status_code=201)
def add_directory_entry(
    body: DirectoryBody,
    owner: str = Depends(require_owner),
    service: DirectoryService = Depends(directory_service),
):
    result = service.add_entry(owner, body.name, body.phone)
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    if isinstance(result, DirectoryConflict):
        raise HTTPException(status_code=400, detail=result.message)
    return {"success": True, "contact": DirectoryEntryOut.from_entry(result)}


@app.get("/directory/{phone}")
def lookup_number(
    phone: str,
    owner: str = Depends(require_owner),
    service: DirectoryService = Depends(directory_service),
):
    entry = service.lookup(owner, phone)
    if entry is None:
        return JSONResponse(
            status_code=404, content={"found": False, "message": "Number not found"}
        )
    return {"found": True, "name": entry.name, "phone": entry.phone}
