"""Inventory router - FastAPI endpoints for stock items"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...auth import get_current_actor
from ...database import get_db
from ..audit.schemas import ChangeEntryResponse, change_entry_response
from ..audit.service import ChangeAuditLog, get_audit_log
from .schemas import InventoryItemCreate, InventoryItemResponse, InventoryItemUpdate
from .service import InventoryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventory", tags=["Inventory"])


def get_inventory_service(
    db: Session = Depends(get_db), audit: ChangeAuditLog = Depends(get_audit_log)
) -> InventoryService:
    """Dependency injection for InventoryService"""
    return InventoryService(db, audit)


@router.get("", response_model=list[InventoryItemResponse])
def list_inventory(service: InventoryService = Depends(get_inventory_service)):
    """Get all stock items"""
    return [InventoryItemResponse.model_validate(item) for item in service.list_items()]


@router.get("/{item_id}", response_model=InventoryItemResponse)
def get_inventory_item(item_id: int, service: InventoryService = Depends(get_inventory_service)):
    return InventoryItemResponse.model_validate(service.get_item(item_id))


@router.post("", response_model=InventoryItemResponse, status_code=status.HTTP_201_CREATED)
def create_inventory_item(
    data: InventoryItemCreate,
    actor_id: str = Depends(get_current_actor),
    service: InventoryService = Depends(get_inventory_service),
):
    """Add a stock item"""
    return InventoryItemResponse.model_validate(service.create_item(data, actor_id))


@router.put("/{item_id}", response_model=InventoryItemResponse)
def update_inventory_item(
    item_id: int,
    data: InventoryItemUpdate,
    actor_id: str = Depends(get_current_actor),
    service: InventoryService = Depends(get_inventory_service),
):
    """Edit name, measure or quantity of a stock item"""
    return InventoryItemResponse.model_validate(service.update_item(item_id, data, actor_id))


@router.delete("/{item_id}")
def delete_inventory_item(
    item_id: int,
    actor_id: str = Depends(get_current_actor),
    service: InventoryService = Depends(get_inventory_service),
):
    return service.delete_item(item_id, actor_id)


@router.get("/{item_id}/changes", response_model=list[ChangeEntryResponse])
def get_inventory_changes(item_id: int, service: InventoryService = Depends(get_inventory_service)):
    """Change history of a stock item, newest first"""
    return [change_entry_response(entry, "inventory_id") for entry in service.history(item_id)]
