"""Client domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_phone


class ClientCreate(BaseModel):
    """
    Schema for creating a client.

    Every field is optional at parse time; which ones are required depends on
    the endpoint and is checked by the service.
    """

    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    source: Optional[str] = None
    comment: Optional[str] = None

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, v):
        if v:
            return validate_phone(v)
        return v


class ClientUpdate(ClientCreate):
    """Schema for updating a client; omitted fields stay unchanged"""

    pass


class ClientResponse(BaseModel):
    """Schema for client response"""

    id: int
    full_name: str
    phone_number: str
    email: Optional[str]
    address: Optional[str]
    source: Optional[str]
    comment: Optional[str]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
