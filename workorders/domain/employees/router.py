"""Employee router - FastAPI endpoints for the employee roster"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...auth import get_current_actor
from ...database import get_db
from ..audit.schemas import ChangeEntryResponse, change_entry_response
from ..audit.service import ChangeAuditLog, get_audit_log
from .schemas import EmployeeCreate, EmployeeResponse, EmployeeUpdate
from .service import EmployeeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["Employees"])


def get_employee_service(
    db: Session = Depends(get_db), audit: ChangeAuditLog = Depends(get_audit_log)
) -> EmployeeService:
    """Dependency injection for EmployeeService"""
    return EmployeeService(db, audit)


@router.get("", response_model=list[EmployeeResponse])
def get_employees(service: EmployeeService = Depends(get_employee_service)):
    """Get the employee roster"""
    return [EmployeeResponse.model_validate(e) for e in service.get_employees()]


@router.get("/{employee_id}", response_model=EmployeeResponse)
def get_employee(employee_id: int, service: EmployeeService = Depends(get_employee_service)):
    return EmployeeResponse.model_validate(service.get_employee(employee_id))


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
def create_employee(
    data: EmployeeCreate,
    actor_id: str = Depends(get_current_actor),
    service: EmployeeService = Depends(get_employee_service),
):
    return EmployeeResponse.model_validate(service.create_employee(data, actor_id))


@router.put("/{employee_id}", response_model=EmployeeResponse)
def update_employee(
    employee_id: int,
    data: EmployeeUpdate,
    actor_id: str = Depends(get_current_actor),
    service: EmployeeService = Depends(get_employee_service),
):
    return EmployeeResponse.model_validate(service.update_employee(employee_id, data, actor_id))


@router.delete("/{employee_id}")
def delete_employee(
    employee_id: int,
    actor_id: str = Depends(get_current_actor),
    service: EmployeeService = Depends(get_employee_service),
):
    """Delete an employee; tasks they were assigned to lose the link"""
    return service.delete_employee(employee_id, actor_id)


@router.get("/{employee_id}/changes", response_model=list[ChangeEntryResponse])
def get_employee_changes(employee_id: int, service: EmployeeService = Depends(get_employee_service)):
    return [change_entry_response(entry, "employee_id") for entry in service.history(employee_id)]
