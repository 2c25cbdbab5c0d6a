"""Employee domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_phone


class EmployeeCreate(BaseModel):
    full_name: str = Field(..., min_length=1)
    phone_number: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, v):
        if v:
            return validate_phone(v)
        return v


class EmployeeUpdate(BaseModel):
    """Schema for editing an employee; omitted fields stay unchanged"""

    full_name: Optional[str] = Field(None, min_length=1)
    phone_number: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, v):
        if v:
            return validate_phone(v)
        return v


class EmployeeResponse(BaseModel):
    id: int
    full_name: str
    phone_number: Optional[str]
    user_id: Optional[str]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
