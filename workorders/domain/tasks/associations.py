"""
Task association manager

Keeps the task ↔ employee and task ↔ service link tables and the task's
denormalized employee count. Replacement is wholesale (delete all, insert the
new set) so replaying the same set leaves identical rows. Nothing here
commits; the lifecycle controller wraps calls in a unit of work.
"""

import logging

from sqlalchemy.orm import Session

from ...exceptions import ConflictError
from ...models import Employee, Service, Task
from .repository import TaskRepository

logger = logging.getLogger(__name__)


def _unique(ids: list[int]) -> list[int]:
    return list(dict.fromkeys(ids))


class TaskAssociationManager:
    """Many-to-many links between a task and its employees and services"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TaskRepository()

    def _require_employees(self, employee_ids: list[int]) -> None:
        existing = self.repo.get_existing_employee_ids(self.db, employee_ids)
        missing = [eid for eid in employee_ids if eid not in existing]
        if missing:
            raise ConflictError(
                f"Employees do not exist: {', '.join(str(eid) for eid in missing)}",
                missing_ids=missing,
            )

    def _require_services(self, service_ids: list[int]) -> None:
        existing = self.repo.get_existing_service_ids(self.db, service_ids)
        missing = [sid for sid in service_ids if sid not in existing]
        if missing:
            raise ConflictError(
                f"Services do not exist: {', '.join(str(sid) for sid in missing)}",
                missing_ids=missing,
            )

    def recount_employees(self, task: Task) -> int:
        """Write the number of linked employees onto this task only"""
        task.employee_count = self.repo.count_employee_links(self.db, task.id)
        self.db.flush()
        return task.employee_count

    def replace_employees(self, task: Task, employee_ids: list[int]) -> list[int]:
        """Make the task's participants exactly ``employee_ids``"""
        employee_ids = _unique(employee_ids)
        self._require_employees(employee_ids)

        self.repo.delete_employee_links(self.db, task.id)
        if employee_ids:
            self.repo.add_employee_links(self.db, task.id, employee_ids)
        count = self.recount_employees(task)
        logger.info(f"👥 Task {task.id} participants replaced ({count} employees)")
        return employee_ids

    def add_employees(self, task: Task, employee_ids: list[int]) -> list[int]:
        """Link more employees, keeping the current ones. Returns the ids that were new"""
        employee_ids = _unique(employee_ids)
        self._require_employees(employee_ids)

        linked = set(self.repo.get_linked_employee_ids(self.db, task.id))
        new_ids = [eid for eid in employee_ids if eid not in linked]
        if new_ids:
            self.repo.add_employee_links(self.db, task.id, new_ids)
        self.recount_employees(task)
        return new_ids

    def replace_services(self, task: Task, service_ids: list[int]) -> list[int]:
        service_ids = _unique(service_ids)
        self._require_services(service_ids)

        self.repo.delete_service_links(self.db, task.id)
        if service_ids:
            self.repo.add_service_links(self.db, task.id, service_ids)
        self.db.flush()
        return service_ids

    def add_services(self, task: Task, service_ids: list[int]) -> list[int]:
        service_ids = _unique(service_ids)
        self._require_services(service_ids)

        linked = set(self.repo.get_linked_service_ids(self.db, task.id))
        new_ids = [sid for sid in service_ids if sid not in linked]
        if new_ids:
            self.repo.add_service_links(self.db, task.id, new_ids)
        return new_ids

    def clear(self, task: Task) -> None:
        """Drop every link of the task (used before deleting it)"""
        self.repo.delete_employee_links(self.db, task.id)
        self.repo.delete_service_links(self.db, task.id)
        task.employee_count = 0
        self.db.flush()

    def detach_employee_everywhere(self, employee_id: int) -> list[int]:
        """Remove an employee from all tasks; returns the ids of the affected tasks"""
        task_ids = self.repo.get_task_ids_for_employee(self.db, employee_id)
        self.repo.delete_links_of_employee(self.db, employee_id)
        for task_id in task_ids:
            task = self.repo.get_task_by_id(self.db, task_id, for_update=True)
            if task:
                self.recount_employees(task)
        return task_ids

    def detach_service_everywhere(self, service_id: int) -> None:
        self.repo.delete_links_of_service(self.db, service_id)
        self.db.flush()

    def list_participants(self, task_id: int) -> list[Employee]:
        return self.repo.get_participants(self.db, task_id)

    def list_services(self, task_id: int) -> list[Service]:
        return self.repo.get_services(self.db, task_id)
