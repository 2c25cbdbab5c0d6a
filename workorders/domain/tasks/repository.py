"""Task repository - Database operations for tasks, their links and photos"""

from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import (
    Employee,
    Service,
    Task,
    TaskEmployee,
    TaskPhoto,
    TaskService,
)


class TaskRepository:
    """Repository for task database operations. Never commits; callers own the transaction"""

    @staticmethod
    def get_tasks(db: Session, start_date: Optional[date] = None) -> list[Task]:
        """Get all tasks, optionally only those starting on a given day"""
        query = db.query(Task)
        if start_date:
            query = query.filter(Task.start_date == start_date)
        return query.order_by(Task.start_date.asc(), Task.start_time.asc(), Task.id.asc()).all()

    @staticmethod
    def get_task_by_id(db: Session, task_id: int, for_update: bool = False) -> Optional[Task]:
        query = db.query(Task).filter(Task.id == task_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def get_task_dates(db: Session) -> list[date]:
        """Distinct start dates across all tasks"""
        rows = (
            db.query(Task.start_date)
            .filter(Task.start_date.isnot(None))
            .distinct()
            .order_by(Task.start_date.asc())
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def add_task(db: Session, **task_data) -> Task:
        task = Task(**task_data)
        db.add(task)
        db.flush()
        return task

    @staticmethod
    def delete_task(db: Session, task: Task) -> None:
        db.delete(task)
        db.flush()

    # Employee links

    @staticmethod
    def get_existing_employee_ids(db: Session, employee_ids: list[int]) -> set[int]:
        if not employee_ids:
            return set()
        rows = db.query(Employee.id).filter(Employee.id.in_(employee_ids)).all()
        return {row[0] for row in rows}

    @staticmethod
    def get_linked_employee_ids(db: Session, task_id: int) -> list[int]:
        rows = (
            db.query(TaskEmployee.employee_id)
            .filter(TaskEmployee.task_id == task_id)
            .order_by(TaskEmployee.employee_id.asc())
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def get_task_ids_for_employee(db: Session, employee_id: int) -> list[int]:
        rows = db.query(TaskEmployee.task_id).filter(TaskEmployee.employee_id == employee_id).all()
        return [row[0] for row in rows]

    @staticmethod
    def get_participants(db: Session, task_id: int) -> list[Employee]:
        return (
            db.query(Employee)
            .join(TaskEmployee, TaskEmployee.employee_id == Employee.id)
            .filter(TaskEmployee.task_id == task_id)
            .order_by(Employee.id.asc())
            .all()
        )

    @staticmethod
    def delete_employee_links(db: Session, task_id: int) -> int:
        return (
            db.query(TaskEmployee)
            .filter(TaskEmployee.task_id == task_id)
            .delete()
        )

    @staticmethod
    def delete_links_of_employee(db: Session, employee_id: int) -> int:
        return (
            db.query(TaskEmployee)
            .filter(TaskEmployee.employee_id == employee_id)
            .delete()
        )

    @staticmethod
    def add_employee_links(db: Session, task_id: int, employee_ids: list[int]) -> None:
        db.add_all([TaskEmployee(task_id=task_id, employee_id=eid) for eid in employee_ids])
        db.flush()

    @staticmethod
    def count_employee_links(db: Session, task_id: int) -> int:
        return (
            db.query(func.count(TaskEmployee.employee_id))
            .filter(TaskEmployee.task_id == task_id)
            .scalar()
        )

    # Service links

    @staticmethod
    def get_existing_service_ids(db: Session, service_ids: list[int]) -> set[int]:
        if not service_ids:
            return set()
        rows = db.query(Service.id).filter(Service.id.in_(service_ids)).all()
        return {row[0] for row in rows}

    @staticmethod
    def get_linked_service_ids(db: Session, task_id: int) -> list[int]:
        rows = (
            db.query(TaskService.service_id)
            .filter(TaskService.task_id == task_id)
            .order_by(TaskService.service_id.asc())
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def get_services(db: Session, task_id: int) -> list[Service]:
        return (
            db.query(Service)
            .join(TaskService, TaskService.service_id == Service.id)
            .filter(TaskService.task_id == task_id)
            .order_by(Service.id.asc())
            .all()
        )

    @staticmethod
    def delete_service_links(db: Session, task_id: int) -> int:
        return (
            db.query(TaskService)
            .filter(TaskService.task_id == task_id)
            .delete()
        )

    @staticmethod
    def delete_links_of_service(db: Session, service_id: int) -> int:
        return (
            db.query(TaskService)
            .filter(TaskService.service_id == service_id)
            .delete()
        )

    @staticmethod
    def add_service_links(db: Session, task_id: int, service_ids: list[int]) -> None:
        db.add_all([TaskService(task_id=task_id, service_id=sid) for sid in service_ids])
        db.flush()

    # Photos

    @staticmethod
    def get_photos(db: Session, task_id: int) -> list[TaskPhoto]:
        return (
            db.query(TaskPhoto)
            .filter(TaskPhoto.task_id == task_id)
            .order_by(TaskPhoto.created_at.asc(), TaskPhoto.id.asc())
            .all()
        )

    @staticmethod
    def add_photo(db: Session, task_id: int, storage_key: str) -> TaskPhoto:
        photo = TaskPhoto(task_id=task_id, storage_key=storage_key)
        db.add(photo)
        db.flush()
        return photo

    @staticmethod
    def delete_photos(db: Session, task_id: int) -> int:
        return (
            db.query(TaskPhoto)
            .filter(TaskPhoto.task_id == task_id)
            .delete()
        )
