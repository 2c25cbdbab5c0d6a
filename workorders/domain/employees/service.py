"""Employee service - roster management"""

import logging

from sqlalchemy.orm import Session

from ...database import unit_of_work
from ...exceptions import NotFoundError, ValidationError
from ...models import Employee
from ..audit.service import ChangeAuditLog
from ..tasks.associations import TaskAssociationManager
from .repository import EmployeeRepository
from .schemas import EmployeeCreate, EmployeeUpdate

logger = logging.getLogger(__name__)


class EmployeeService:
    """Service layer for employees; each change is logged to employee_changes"""

    def __init__(self, db: Session, audit: ChangeAuditLog):
        self.db = db
        self.repo = EmployeeRepository()
        self.associations = TaskAssociationManager(db)
        self.audit = audit

    def get_employees(self) -> list[Employee]:
        return self.repo.get_employees(self.db)

    def get_employee(self, employee_id: int) -> Employee:
        employee = self.repo.get_employee_by_id(self.db, employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def create_employee(self, data: EmployeeCreate, actor_id: str) -> Employee:
        with unit_of_work(self.db):
            employee = self.repo.add_employee(self.db, **data.model_dump())
        self.db.refresh(employee)
        logger.info(f"✅ Employee {employee.id} created by {actor_id}")
        self.audit.record_later("employee", employee.id, actor_id, f"Created employee '{employee.full_name}'")
        return employee

    def update_employee(self, employee_id: int, data: EmployeeUpdate, actor_id: str) -> Employee:
        updates = data.model_dump(exclude_unset=True)
        if "full_name" in updates and not updates["full_name"]:
            raise ValidationError("Missing required fields: full_name", fields=["full_name"])

        with unit_of_work(self.db):
            employee = self.get_employee(employee_id)
            changes = {}
            for field, value in updates.items():
                old = getattr(employee, field)
                if old != value:
                    changes[field] = (old, value)
                    setattr(employee, field, value)
        self.db.refresh(employee)

        if changes:
            summary = ", ".join(f"{field}: {old} → {new}" for field, (old, new) in changes.items())
            self.audit.record_later("employee", employee.id, actor_id, f"Updated {summary}")
        return employee

    def delete_employee(self, employee_id: int, actor_id: str) -> dict:
        """Remove an employee and unlink them from every task, recounting those tasks"""
        with unit_of_work(self.db):
            employee = self.get_employee(employee_id)
            name = employee.full_name
            affected = self.associations.detach_employee_everywhere(employee_id)
            self.repo.delete_employee(self.db, employee)

        logger.info(f"🗑️ Employee {employee_id} deleted by {actor_id}, unlinked from {len(affected)} tasks")
        self.audit.record_later("employee", employee_id, actor_id, f"Deleted employee '{name}'")
        return {"message": "Employee deleted", "affected_tasks": affected}

    def history(self, employee_id: int) -> list:
        return self.audit.history(self.db, "employee", employee_id)
