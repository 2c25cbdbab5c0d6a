"""
Inventory ledger

Owns stock quantities. Every decrement taken for a task is mirrored by a
reservation row and every release restores exactly what the reservation
holds, so for each item:

    free stock + sum(reservations) == baseline stock

Ledger methods only flush. They must run inside the caller's unit of work
(see ``database.unit_of_work``) so stock and reservations commit or roll back
together with the task operation that triggered them.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ...exceptions import ConflictError, NotFoundError, ValidationError
from ...models import InventoryItem, TaskInventory
from .repository import InventoryRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "measure", "quantity")


@dataclass(frozen=True)
class StockMovement:
    """Result of one stock change, used for change log entries"""

    item_id: int
    item_name: str
    before: int
    after: int
    task_id: Optional[int] = None

    @property
    def delta(self) -> int:
        return self.after - self.before


class InventoryLedger:
    """Stock bookkeeping with a non-negative quantity guarantee"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InventoryRepository()

    def _locked_item(self, item_id: int) -> InventoryItem:
        item = self.repo.get_item(self.db, item_id, for_update=True)
        if not item:
            raise NotFoundError(f"Inventory item {item_id} not found")
        return item

    def reserve(self, task_id: int, item_id: int, quantity: int) -> StockMovement:
        """
        Take stock for a task: new = max(0, old - quantity).

        The reservation grows by the amount actually taken, which is less than
        ``quantity`` when stock runs out.
        """
        if quantity <= 0:
            raise ValidationError(f"Quantity for inventory item {item_id} must be positive")

        item = self._locked_item(item_id)
        before = item.quantity
        after = max(0, before - quantity)
        taken = before - after
        if taken < quantity:
            logger.warning(
                f"⚠️ Inventory item {item_id} short for task {task_id}: requested {quantity}, available {before}"
            )

        item.quantity = after
        reservation = self.repo.get_reservation(self.db, task_id, item_id)
        if reservation:
            reservation.quantity += taken
            self.db.flush()
        else:
            self.repo.add_reservation(self.db, task_id, item_id, taken)

        return StockMovement(item.id, item.name, before, after, task_id)

    def release(self, item_id: int, quantity: int, task_id: Optional[int] = None) -> StockMovement:
        """Put stock back (undo of a reservation)"""
        if quantity < 0:
            raise ValidationError("Released quantity cannot be negative")

        item = self._locked_item(item_id)
        before = item.quantity
        item.quantity = before + quantity
        self.db.flush()
        return StockMovement(item.id, item.name, before, item.quantity, task_id)

    def release_task(self, task_id: int) -> list[StockMovement]:
        """Restore every reservation of a task, then delete the reservation rows"""
        movements = [
            self.release(reservation.inventory_id, reservation.quantity, task_id)
            for reservation in self.repo.get_task_reservations(self.db, task_id)
        ]
        self.repo.delete_task_reservations(self.db, task_id)
        return movements

    def list_reservations(self, task_id: int) -> list[TaskInventory]:
        return self.repo.get_task_reservations(self.db, task_id)

    # Direct stock management

    def list_items(self) -> list[InventoryItem]:
        return self.repo.get_items(self.db)

    def get_item(self, item_id: int) -> InventoryItem:
        item = self.repo.get_item(self.db, item_id)
        if not item:
            raise NotFoundError(f"Inventory item {item_id} not found")
        return item

    def create_item(self, name: str, measure: Optional[str], quantity: int) -> InventoryItem:
        if quantity < 0:
            raise ValidationError("Quantity cannot be negative", fields=["quantity"])
        return self.repo.add_item(self.db, name=name, measure=measure, quantity=quantity)

    def adjust(self, item_id: int, **fields) -> tuple[InventoryItem, dict]:
        """
        Edit name, measure or quantity of an item.

        Returns the item and a {field: (old, new)} map of what actually changed.
        """
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown inventory fields: {', '.join(sorted(unknown))}")
        if fields.get("quantity") is not None and fields["quantity"] < 0:
            raise ValidationError("Quantity cannot be negative", fields=["quantity"])

        item = self._locked_item(item_id)
        changes = {}
        for key, value in fields.items():
            if value is not None and getattr(item, key) != value:
                changes[key] = (getattr(item, key), value)
                setattr(item, key, value)
        self.db.flush()
        return item, changes

    def delete_item(self, item_id: int) -> InventoryItem:
        item = self._locked_item(item_id)
        if self.repo.count_item_reservations(self.db, item_id):
            raise ConflictError(f"Inventory item {item_id} is reserved by tasks and cannot be deleted")
        self.repo.delete_item(self.db, item)
        return item
