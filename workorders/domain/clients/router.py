"""Client router - FastAPI endpoints for client operations"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...auth import get_current_actor
from ...database import get_db
from ..audit.schemas import ChangeEntryResponse, change_entry_response
from ..audit.service import ChangeAuditLog, get_audit_log
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import CARD_FIELDS, ClientService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Clients"])


def get_client_service(
    db: Session = Depends(get_db), audit: ChangeAuditLog = Depends(get_audit_log)
) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db, audit)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("/clients", response_model=list[ClientResponse])
def get_clients(service: ClientService = Depends(get_client_service)):
    """Get all clients"""
    return [ClientResponse.model_validate(c) for c in service.get_clients()]


@router.get("/clients/{client_id}", response_model=ClientResponse)
def get_client(client_id: int, service: ClientService = Depends(get_client_service)):
    return ClientResponse.model_validate(service.get_client(client_id))


@router.post("/clients", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def create_client(
    data: ClientCreate,
    actor_id: str = Depends(get_current_actor),
    service: ClientService = Depends(get_client_service),
):
    """Create a client from a name and phone number"""
    return ClientResponse.model_validate(service.create_client(data, actor_id))


@router.post("/add-client", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def add_client_card(
    data: ClientCreate,
    actor_id: str = Depends(get_current_actor),
    service: ClientService = Depends(get_client_service),
):
    """Create a client with the full card filled in"""
    return ClientResponse.model_validate(service.create_client(data, actor_id, required=CARD_FIELDS))


@router.put("/clients/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: int,
    data: ClientUpdate,
    actor_id: str = Depends(get_current_actor),
    service: ClientService = Depends(get_client_service),
):
    return ClientResponse.model_validate(service.update_client(client_id, data, actor_id))


@router.delete("/clients/{client_id}")
def delete_client(
    client_id: int,
    actor_id: str = Depends(get_current_actor),
    service: ClientService = Depends(get_client_service),
):
    return service.delete_client(client_id, actor_id)


# ============================================================================
# HISTORY
# ============================================================================


@router.get("/clients/{client_id}/changes", response_model=list[ChangeEntryResponse])
def get_client_changes(client_id: int, service: ClientService = Depends(get_client_service)):
    """Who changed this client and how, newest first"""
    return [change_entry_response(entry, "client_id") for entry in service.history(client_id)]
