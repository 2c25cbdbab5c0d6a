"""Inventory service - direct stock management outside of tasks"""

import logging

from sqlalchemy.orm import Session

from ...database import unit_of_work
from ...models import InventoryItem
from ..audit.service import ChangeAuditLog
from .ledger import InventoryLedger
from .schemas import InventoryItemCreate, InventoryItemUpdate

logger = logging.getLogger(__name__)


class InventoryService:
    """Service layer for stock item CRUD; each change is logged to inventory_changes"""

    def __init__(self, db: Session, audit: ChangeAuditLog):
        self.db = db
        self.ledger = InventoryLedger(db)
        self.audit = audit

    def list_items(self) -> list[InventoryItem]:
        return self.ledger.list_items()

    def get_item(self, item_id: int) -> InventoryItem:
        return self.ledger.get_item(item_id)

    def create_item(self, data: InventoryItemCreate, actor_id: str) -> InventoryItem:
        with unit_of_work(self.db):
            item = self.ledger.create_item(data.name, data.measure, data.quantity)
        self.db.refresh(item)
        logger.info(f"📦 Inventory item {item.id} created by {actor_id}")
        self.audit.record_later(
            "inventory", item.id, actor_id, f"Created '{item.name}' with quantity {item.quantity}"
        )
        return item

    def update_item(self, item_id: int, data: InventoryItemUpdate, actor_id: str) -> InventoryItem:
        with unit_of_work(self.db):
            item, changes = self.ledger.adjust(item_id, **data.model_dump(exclude_unset=True))
        self.db.refresh(item)
        if changes:
            summary = ", ".join(f"{field}: {old} → {new}" for field, (old, new) in changes.items())
            self.audit.record_later("inventory", item.id, actor_id, f"Updated {summary}")
        return item

    def delete_item(self, item_id: int, actor_id: str) -> dict:
        with unit_of_work(self.db):
            item = self.ledger.delete_item(item_id)
            name = item.name
        logger.info(f"🗑️ Inventory item {item_id} deleted by {actor_id}")
        self.audit.record_later("inventory", item_id, actor_id, f"Deleted '{name}'")
        return {"message": "Inventory item deleted"}

    def history(self, item_id: int) -> list:
        return self.audit.history(self.db, "inventory", item_id)
