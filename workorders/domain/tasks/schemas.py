"""Task domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import TaskStatus
from ...shared.validators import validate_time
from ..inventory.schemas import InventoryUsage


class TaskStatusValue(str, Enum):
    draft = TaskStatus.DRAFT
    new = TaskStatus.NEW
    in_progress = TaskStatus.IN_PROGRESS
    completed = TaskStatus.COMPLETED


class TaskInput(BaseModel):
    """
    Body of POST /tasks and PUT /tasks/{id}.

    Everything is optional at the schema level; which fields are required
    depends on the status and is checked by the lifecycle controller.
    """

    status: Optional[TaskStatusValue] = None
    service: Optional[str] = None
    payment: Optional[str] = None
    cost: Optional[float] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    responsible: Optional[str] = None
    fullname_client: Optional[str] = None
    address_client: Optional[str] = None
    phone: Optional[str] = None
    description: Optional[str] = None
    employees: Optional[list[int]] = None
    services: Optional[list[int]] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, v):
        if v:
            return validate_time(v)
        return v


class EmployeeIdsRequest(BaseModel):
    employees: list[int] = Field(default_factory=list)


class ServiceIdsRequest(BaseModel):
    services: list[int] = Field(default_factory=list)


class InventoryUsageRequest(BaseModel):
    """Body of PUT /tasks/{id}/complete and PUT /tasks/{id}/inventory"""

    inventory: list[InventoryUsage] = Field(default_factory=list)


class TaskResponse(BaseModel):
    id: int
    status: str
    service: Optional[str]
    payment: Optional[str]
    cost: Optional[float]
    start_date: Optional[date]
    end_date: Optional[date]
    start_time: Optional[str]
    end_time: Optional[str]
    responsible: Optional[str]
    fullname_client: Optional[str]
    address_client: Optional[str]
    phone: Optional[str]
    description: Optional[str]
    employees: int = Field(0, validation_alias="employee_count")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ParticipantResponse(BaseModel):
    id: int
    full_name: str
    phone_number: Optional[str] = None

    class Config:
        from_attributes = True


class TaskServiceResponse(BaseModel):
    id: int
    service_name: str

    class Config:
        from_attributes = True


class TaskPhotoResponse(BaseModel):
    id: int
    storage_key: str
    url: Optional[str] = None
    created_at: Optional[datetime] = None
