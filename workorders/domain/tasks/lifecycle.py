"""
Task lifecycle controller

Owns task records and their status workflow:

    draft → new → in_progress → completed        (deletion is a hard delete)

Every mutation runs as one unit of work: the task row, its employee/service
links and the inventory ledger change together or not at all. Side effects
that live outside the database (change log entries, push notifications,
photo object removal) are dispatched only after the commit.
"""

import logging
from datetime import date
from typing import Callable, Optional

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from ...database import unit_of_work
from ...exceptions import ConflictError, NotFoundError, ValidationError
from ...models import Task, TaskInventory, TaskPhoto, TaskStatus
from ...services.photo_storage import ALLOWED_IMAGE_TYPES, MAX_PHOTO_SIZE_BYTES, PhotoStorage
from ...services.push_service import PushNotifier
from ...shared.validators import missing_fields
from ..audit.service import ChangeAuditLog
from ..inventory.ledger import InventoryLedger, StockMovement
from ..inventory.schemas import InventoryUsage
from .associations import TaskAssociationManager
from .repository import TaskRepository
from .schemas import TaskInput

logger = logging.getLogger(__name__)

# Must be filled for every task that is not a draft
REQUIRED_FIELDS = (
    "service",
    "payment",
    "cost",
    "start_date",
    "start_time",
    "responsible",
    "fullname_client",
    "address_client",
    "phone",
    "description",
)
BUSINESS_FIELDS = REQUIRED_FIELDS + ("end_date", "end_time")

# Statuses reachable through a plain status change. Completion goes through complete()
STATUS_TRANSITIONS = {
    TaskStatus.DRAFT: {TaskStatus.NEW, TaskStatus.IN_PROGRESS},
    TaskStatus.NEW: {TaskStatus.IN_PROGRESS},
    TaskStatus.IN_PROGRESS: set(),
    TaskStatus.COMPLETED: set(),
}


def validate_required_fields(status: str, values: dict) -> None:
    """Raise ValidationError naming every missing field of a non-draft task"""
    if status == TaskStatus.DRAFT:
        return
    missing = missing_fields(values, REQUIRED_FIELDS)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)


def check_transition(current: str, new: str) -> None:
    if new == TaskStatus.COMPLETED:
        raise ConflictError("Tasks are completed with their inventory usage via PUT /tasks/{id}/complete")
    if new not in STATUS_TRANSITIONS.get(current, set()):
        raise ConflictError(f"Cannot change task status from '{current}' to '{new}'")


class TaskLifecycleController:
    """Creates, updates, completes and deletes tasks"""

    def __init__(
        self,
        db: Session,
        audit: ChangeAuditLog,
        storage: Optional[PhotoStorage] = None,
        notifier: Optional[PushNotifier] = None,
        background_tasks: Optional[BackgroundTasks] = None,
    ):
        self.db = db
        self.audit = audit
        self.storage = storage
        self.notifier = notifier
        self.background_tasks = background_tasks
        self.repo = TaskRepository()
        self.ledger = InventoryLedger(db)
        self.associations = TaskAssociationManager(db)

    # Helpers

    def _after_commit(self, func: Callable, *args) -> None:
        if self.background_tasks is not None:
            self.background_tasks.add_task(func, *args)
        else:
            func(*args)

    def _locked_task(self, task_id: int) -> Task:
        task = self.repo.get_task_by_id(self.db, task_id, for_update=True)
        if not task:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    @staticmethod
    def _values_from_input(data: TaskInput) -> dict:
        return {field: getattr(data, field) for field in BUSINESS_FIELDS}

    @staticmethod
    def _values_from_task(task: Task) -> dict:
        return {field: getattr(task, field) for field in BUSINESS_FIELDS}

    def _consume(self, task: Task, usage: list[InventoryUsage]) -> list[StockMovement]:
        """Reserve usage merged per item; items are locked in ascending id order"""
        totals: dict[int, int] = {}
        for line in usage:
            totals[line.inventory_id] = totals.get(line.inventory_id, 0) + line.quantity

        movements = []
        for item_id in sorted(totals):
            try:
                movements.append(self.ledger.reserve(task.id, item_id, totals[item_id]))
            except NotFoundError as e:
                # A bad id in the request body is the caller's mistake, not a missing route
                raise ValidationError(e.message) from e
        return movements

    def _log_movements(self, movements: list[StockMovement], actor_id: str) -> None:
        for movement in movements:
            verb = "reserved" if movement.delta < 0 else "released"
            self.audit.record_later(
                "inventory",
                movement.item_id,
                actor_id,
                f"Task {movement.task_id}: {verb} {abs(movement.delta)} of '{movement.item_name}', "
                f"stock {movement.before} → {movement.after}",
            )

    def _notify_assigned(self, task: Task, employee_ids: list[int]) -> None:
        if not self.notifier or not employee_ids:
            return
        when = f"{task.start_date or ''} {task.start_time or ''}".strip()
        body = f"{task.service or 'Задача'} {when}".strip()
        self._after_commit(
            self.notifier.notify_employees,
            employee_ids,
            "Новая задача",
            body,
            {"task_id": task.id},
        )

    # Reads

    def list_tasks(self, start_date: Optional[date] = None) -> list[Task]:
        return self.repo.get_tasks(self.db, start_date)

    def get_task(self, task_id: int) -> Task:
        task = self.repo.get_task_by_id(self.db, task_id)
        if not task:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    def list_task_dates(self) -> list[date]:
        return self.repo.get_task_dates(self.db)

    def list_participants(self, task_id: int):
        self.get_task(task_id)
        return self.associations.list_participants(task_id)

    def list_services(self, task_id: int):
        self.get_task(task_id)
        return self.associations.list_services(task_id)

    def list_reservations(self, task_id: int) -> list[TaskInventory]:
        self.get_task(task_id)
        return self.ledger.list_reservations(task_id)

    def list_photos(self, task_id: int) -> list[TaskPhoto]:
        self.get_task(task_id)
        return self.repo.get_photos(self.db, task_id)

    # Mutations

    def create(self, data: TaskInput, actor_id: str) -> Task:
        """Insert a task with its links. A draft may leave business fields empty"""
        status = data.status.value if data.status else TaskStatus.DRAFT
        if status == TaskStatus.COMPLETED:
            raise ValidationError("A new task cannot be created as completed")
        values = self._values_from_input(data)
        validate_required_fields(status, values)

        employee_ids: list[int] = []
        with unit_of_work(self.db):
            task = self.repo.add_task(self.db, status=status, employee_count=0, **values)
            if data.employees:
                employee_ids = self.associations.replace_employees(task, data.employees)
            if data.services:
                self.associations.replace_services(task, data.services)

        self.db.refresh(task)
        logger.info(f"✅ Task {task.id} created by {actor_id} ({status}, {len(employee_ids)} employees)")
        self._notify_assigned(task, employee_ids)
        return task

    def update_full(self, task_id: int, data: TaskInput, actor_id: str) -> Task:
        """
        Replace every business field of a task.

        ``employees`` and ``services``, when present, replace the task's links;
        when absent the links are left alone.
        """
        added_employees: list[int] = []
        with unit_of_work(self.db):
            task = self._locked_task(task_id)
            status = data.status.value if data.status else task.status
            if status != task.status:
                check_transition(task.status, status)
            values = self._values_from_input(data)
            validate_required_fields(status, values)

            for field, value in values.items():
                setattr(task, field, value)
            task.status = status

            if data.employees is not None:
                before = set(self.repo.get_linked_employee_ids(self.db, task.id))
                linked = self.associations.replace_employees(task, data.employees)
                added_employees = [eid for eid in linked if eid not in before]
            if data.services is not None:
                self.associations.replace_services(task, data.services)
            self.db.flush()

        self.db.refresh(task)
        logger.info(f"✏️ Task {task_id} updated by {actor_id}")
        self._notify_assigned(task, added_employees)
        return task

    def update_status(self, task_id: int, status: str, actor_id: str) -> Task:
        """Change only the status; links and inventory are untouched"""
        with unit_of_work(self.db):
            task = self._locked_task(task_id)
            if status != task.status:
                check_transition(task.status, status)
                validate_required_fields(status, self._values_from_task(task))
                task.status = status
                self.db.flush()

        self.db.refresh(task)
        logger.info(f"🔄 Task {task_id} status set to '{status}' by {actor_id}")
        return task

    def complete(self, task_id: int, usage: list[InventoryUsage], actor_id: str) -> Task:
        """Consume inventory for the task and mark it completed, all or nothing"""
        if not usage:
            raise ValidationError("Inventory usage is required to complete a task")

        with unit_of_work(self.db):
            task = self._locked_task(task_id)
            if task.status == TaskStatus.COMPLETED:
                raise ConflictError(f"Task {task_id} is already completed")
            if task.status == TaskStatus.DRAFT:
                raise ConflictError(f"Task {task_id} is a draft and cannot be completed")

            movements = self._consume(task, usage)
            task.status = TaskStatus.COMPLETED
            self.db.flush()

        self.db.refresh(task)
        logger.info(f"🏁 Task {task_id} completed by {actor_id} ({len(movements)} inventory lines)")
        self._log_movements(movements, actor_id)
        return task

    def replace_inventory(self, task_id: int, usage: list[InventoryUsage], actor_id: str) -> list[TaskInventory]:
        """
        Swap the task's reserved inventory for ``usage``.

        Old reservations are restored to stock before the new ones are taken;
        reversing that order would let the new usage see stock that still
        belongs to the old reservation.
        """
        with unit_of_work(self.db):
            task = self._locked_task(task_id)
            released = self.ledger.release_task(task.id)
            consumed = self._consume(task, usage)

        logger.info(f"📦 Task {task_id} inventory replaced by {actor_id} ({len(consumed)} lines)")
        self._log_movements(released + consumed, actor_id)
        return self.ledger.list_reservations(task_id)

    def delete(self, task_id: int, actor_id: str) -> dict:
        """Restore reserved stock and remove the task with everything it owns"""
        with unit_of_work(self.db):
            task = self._locked_task(task_id)
            released = self.ledger.release_task(task.id)
            self.associations.clear(task)
            photo_keys = [photo.storage_key for photo in self.repo.get_photos(self.db, task.id)]
            self.repo.delete_photos(self.db, task.id)
            self.repo.delete_task(self.db, task)

        logger.info(f"🗑️ Task {task_id} deleted by {actor_id}")
        self._log_movements(released, actor_id)
        if photo_keys and self.storage:
            self._after_commit(self.storage.delete, photo_keys)
        return {"message": "Task deleted", "task_id": task_id}

    def attach_employees(self, task_id: int, employee_ids: list[int], actor_id: str) -> list[int]:
        if not employee_ids:
            raise ValidationError("A list of employee IDs is required", fields=["employees"])

        with unit_of_work(self.db):
            task = self._locked_task(task_id)
            added = self.associations.add_employees(task, employee_ids)

        self.db.refresh(task)
        logger.info(f"👥 {len(added)} employees attached to task {task_id} by {actor_id}")
        self._notify_assigned(task, added)
        return added

    def attach_services(self, task_id: int, service_ids: list[int], actor_id: str) -> list[int]:
        if not service_ids:
            raise ValidationError("A list of service IDs is required", fields=["services"])

        with unit_of_work(self.db):
            task = self._locked_task(task_id)
            added = self.associations.add_services(task, service_ids)

        logger.info(f"🧰 {len(added)} services attached to task {task_id} by {actor_id}")
        return added

    def add_photo(
        self, task_id: int, filename: str, data: bytes, content_type: Optional[str], actor_id: str
    ) -> TaskPhoto:
        """Upload a photo and link it to the task; the object is removed again if linking fails"""
        if self.storage is None:
            raise RuntimeError("Photo storage is not configured")
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError("Unsupported image type", fields=["file"])
        if not data or len(data) > MAX_PHOTO_SIZE_BYTES:
            raise ValidationError(
                f"Photo must be between 1 byte and {MAX_PHOTO_SIZE_BYTES // (1024 * 1024)}MB", fields=["file"]
            )
        self.get_task(task_id)

        key = self.storage.upload(task_id, filename, data, content_type)
        try:
            with unit_of_work(self.db):
                self._locked_task(task_id)
                photo = self.repo.add_photo(self.db, task_id, key)
        except Exception:
            self.storage.delete([key])
            raise

        self.db.refresh(photo)
        logger.info(f"📷 Photo added to task {task_id} by {actor_id}")
        return photo
