"""Employee repository - Database operations for the employee roster"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Employee


class EmployeeRepository:
    """Repository for employee database operations. Callers own the transaction"""

    @staticmethod
    def get_employees(db: Session) -> list[Employee]:
        return db.query(Employee).order_by(Employee.full_name).all()

    @staticmethod
    def get_employee_by_id(db: Session, employee_id: int) -> Optional[Employee]:
        return db.query(Employee).filter(Employee.id == employee_id).first()

    @staticmethod
    def add_employee(db: Session, **employee_data) -> Employee:
        employee = Employee(**employee_data)
        db.add(employee)
        db.flush()
        return employee

    @staticmethod
    def delete_employee(db: Session, employee: Employee) -> None:
        db.delete(employee)
        db.flush()
