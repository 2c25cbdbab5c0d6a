"""Catalog schemas"""

from typing import Optional

from pydantic import BaseModel, Field


class ServiceCreate(BaseModel):
    service_name: str = Field(..., min_length=1)
    description: Optional[str] = None


class ServiceUpdate(BaseModel):
    service_name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class ServiceResponse(BaseModel):
    id: int
    service_name: str
    description: Optional[str]

    class Config:
        from_attributes = True


class PaymentMethodResponse(BaseModel):
    id: int
    payment: str

    class Config:
        from_attributes = True


class ResponsibleResponse(BaseModel):
    id: int
    full_name: str

    class Config:
        from_attributes = True
