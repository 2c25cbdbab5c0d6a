"""Inventory repository - Database operations for stock items and task reservations"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import InventoryItem, TaskInventory


class InventoryRepository:
    """Repository for inventory database operations. Never commits; callers own the transaction"""

    @staticmethod
    def get_items(db: Session) -> list[InventoryItem]:
        return db.query(InventoryItem).order_by(InventoryItem.name.asc()).all()

    @staticmethod
    def get_item(db: Session, item_id: int, for_update: bool = False) -> Optional[InventoryItem]:
        """Get an item by ID, optionally locking the row until the transaction ends"""
        query = db.query(InventoryItem).filter(InventoryItem.id == item_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def add_item(db: Session, **item_data) -> InventoryItem:
        item = InventoryItem(**item_data)
        db.add(item)
        db.flush()
        return item

    @staticmethod
    def delete_item(db: Session, item: InventoryItem) -> None:
        db.delete(item)
        db.flush()

    @staticmethod
    def get_reservation(db: Session, task_id: int, item_id: int) -> Optional[TaskInventory]:
        return (
            db.query(TaskInventory)
            .filter(TaskInventory.task_id == task_id, TaskInventory.inventory_id == item_id)
            .first()
        )

    @staticmethod
    def get_task_reservations(db: Session, task_id: int) -> list[TaskInventory]:
        return (
            db.query(TaskInventory)
            .filter(TaskInventory.task_id == task_id)
            .order_by(TaskInventory.inventory_id.asc())
            .all()
        )

    @staticmethod
    def add_reservation(db: Session, task_id: int, item_id: int, quantity: int) -> TaskInventory:
        reservation = TaskInventory(task_id=task_id, inventory_id=item_id, quantity=quantity)
        db.add(reservation)
        db.flush()
        return reservation

    @staticmethod
    def delete_task_reservations(db: Session, task_id: int) -> int:
        deleted = (
            db.query(TaskInventory)
            .filter(TaskInventory.task_id == task_id)
            .delete()
        )
        db.flush()
        return deleted

    @staticmethod
    def count_item_reservations(db: Session, item_id: int) -> int:
        return (
            db.query(func.count(TaskInventory.id))
            .filter(TaskInventory.inventory_id == item_id)
            .scalar()
        )
