"""Task router - FastAPI endpoints for the task lifecycle"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from ...auth import get_current_actor
from ...database import get_db
from ...exceptions import ValidationError
from ...services.photo_storage import PhotoStorage, get_photo_storage
from ...services.push_service import PushNotifier, get_push_notifier
from ..audit.service import ChangeAuditLog, get_audit_log
from ..inventory.schemas import ReservationResponse
from .lifecycle import TaskLifecycleController
from .schemas import (
    EmployeeIdsRequest,
    InventoryUsageRequest,
    ParticipantResponse,
    ServiceIdsRequest,
    TaskInput,
    TaskPhotoResponse,
    TaskResponse,
    TaskServiceResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tasks"])


def get_task_controller(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    audit: ChangeAuditLog = Depends(get_audit_log),
    storage: PhotoStorage = Depends(get_photo_storage),
    notifier: PushNotifier = Depends(get_push_notifier),
) -> TaskLifecycleController:
    """Dependency injection for TaskLifecycleController"""
    return TaskLifecycleController(db, audit, storage, notifier, background_tasks)


def reservation_response(reservation) -> ReservationResponse:
    return ReservationResponse(
        inventory_id=reservation.inventory_id,
        name=reservation.item.name if reservation.item else None,
        measure=reservation.item.measure if reservation.item else None,
        quantity=reservation.quantity,
    )


def photo_response(photo, storage: PhotoStorage) -> TaskPhotoResponse:
    return TaskPhotoResponse(
        id=photo.id,
        storage_key=photo.storage_key,
        url=storage.presigned_url(photo.storage_key),
        created_at=photo.created_at,
    )


# ============================================================================
# READS
# ============================================================================


@router.get("/tasks", response_model=list[TaskResponse])
def list_tasks(
    start_date: Optional[date] = Query(None, description="Only tasks starting on this day"),
    controller: TaskLifecycleController = Depends(get_task_controller),
):
    """Get all tasks, optionally filtered by start date"""
    return [TaskResponse.model_validate(task) for task in controller.list_tasks(start_date)]


@router.get("/task-dates", response_model=list[date])
def list_task_dates(controller: TaskLifecycleController = Depends(get_task_controller)):
    """Distinct days on which tasks start"""
    return controller.list_task_dates()


@router.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(task_id: int, controller: TaskLifecycleController = Depends(get_task_controller)):
    return TaskResponse.model_validate(controller.get_task(task_id))


@router.get("/tasks/{task_id}/employees", response_model=list[ParticipantResponse])
@router.get("/task-participants/{task_id}", response_model=list[ParticipantResponse])
def list_task_participants(task_id: int, controller: TaskLifecycleController = Depends(get_task_controller)):
    """Employees working on a task"""
    return [ParticipantResponse.model_validate(e) for e in controller.list_participants(task_id)]


@router.get("/tasks/{task_id}/services", response_model=list[TaskServiceResponse])
def list_task_services(task_id: int, controller: TaskLifecycleController = Depends(get_task_controller)):
    return [TaskServiceResponse.model_validate(s) for s in controller.list_services(task_id)]


@router.get("/tasks/{task_id}/inventory", response_model=list[ReservationResponse])
def list_task_inventory(task_id: int, controller: TaskLifecycleController = Depends(get_task_controller)):
    """Inventory currently reserved by a task"""
    return [reservation_response(r) for r in controller.list_reservations(task_id)]


@router.get("/tasks/{task_id}/photos", response_model=list[TaskPhotoResponse])
def list_task_photos(
    task_id: int,
    controller: TaskLifecycleController = Depends(get_task_controller),
    storage: PhotoStorage = Depends(get_photo_storage),
):
    return [photo_response(photo, storage) for photo in controller.list_photos(task_id)]


# ============================================================================
# LIFECYCLE
# ============================================================================


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
def create_task(
    data: TaskInput,
    actor_id: str = Depends(get_current_actor),
    controller: TaskLifecycleController = Depends(get_task_controller),
):
    """Create a task (draft or fully specified), optionally with employees and services"""
    task = controller.create(data, actor_id)
    message = "Task created with participants" if task.employee_count else "Task created without participants"
    return {"message": message, "task_id": task.id}


@router.put("/tasks/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    data: TaskInput,
    actor_id: str = Depends(get_current_actor),
    controller: TaskLifecycleController = Depends(get_task_controller),
):
    """
    Full update of a task.

    A body that carries only ``status`` is a status change and leaves every
    other field as stored. Backward moves and setting the completed status
    here are rejected with 400; completion goes through /tasks/{id}/complete.
    """
    if data.model_fields_set == {"status"}:
        if data.status is None:
            raise ValidationError("Missing required fields: status", fields=["status"])
        task = controller.update_status(task_id, data.status.value, actor_id)
    else:
        task = controller.update_full(task_id, data, actor_id)
    return TaskResponse.model_validate(task)


@router.put("/tasks/{task_id}/complete", response_model=TaskResponse)
def complete_task(
    task_id: int,
    data: InventoryUsageRequest,
    actor_id: str = Depends(get_current_actor),
    controller: TaskLifecycleController = Depends(get_task_controller),
):
    """Mark a task completed and write off the inventory it used"""
    return TaskResponse.model_validate(controller.complete(task_id, data.inventory, actor_id))


@router.put("/tasks/{task_id}/inventory", response_model=list[ReservationResponse])
def replace_task_inventory(
    task_id: int,
    data: InventoryUsageRequest,
    actor_id: str = Depends(get_current_actor),
    controller: TaskLifecycleController = Depends(get_task_controller),
):
    """Replace the inventory reserved by a task"""
    reservations = controller.replace_inventory(task_id, data.inventory, actor_id)
    return [reservation_response(r) for r in reservations]


@router.delete("/tasks/{task_id}")
def delete_task(
    task_id: int,
    actor_id: str = Depends(get_current_actor),
    controller: TaskLifecycleController = Depends(get_task_controller),
):
    """Delete a task, returning its reserved inventory to stock"""
    return controller.delete(task_id, actor_id)


@router.post("/tasks/{task_id}/employees", status_code=status.HTTP_201_CREATED)
def attach_task_employees(
    task_id: int,
    data: EmployeeIdsRequest,
    actor_id: str = Depends(get_current_actor),
    controller: TaskLifecycleController = Depends(get_task_controller),
):
    added = controller.attach_employees(task_id, data.employees, actor_id)
    return {"message": "Employees attached to task", "added": added}


@router.post("/tasks/{task_id}/services", status_code=status.HTTP_201_CREATED)
def attach_task_services(
    task_id: int,
    data: ServiceIdsRequest,
    actor_id: str = Depends(get_current_actor),
    controller: TaskLifecycleController = Depends(get_task_controller),
):
    added = controller.attach_services(task_id, data.services, actor_id)
    return {"message": "Services attached to task", "added": added}


@router.post("/tasks/{task_id}/photos", response_model=TaskPhotoResponse, status_code=status.HTTP_201_CREATED)
def upload_task_photo(
    task_id: int,
    file: UploadFile = File(...),
    actor_id: str = Depends(get_current_actor),
    controller: TaskLifecycleController = Depends(get_task_controller),
    storage: PhotoStorage = Depends(get_photo_storage),
):
    """Upload a photo of the work done"""
    data = file.file.read()
    photo = controller.add_photo(task_id, file.filename or "photo.jpg", data, file.content_type, actor_id)
    return photo_response(photo, storage)
