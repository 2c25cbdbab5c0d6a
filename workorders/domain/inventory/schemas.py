"""Inventory domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, Field


class InventoryItemCreate(BaseModel):
    """Schema for adding a stock item"""

    name: str = Field(..., min_length=1)
    measure: Optional[str] = None
    quantity: int = Field(0, ge=0)


class InventoryItemUpdate(BaseModel):
    """Schema for editing a stock item; omitted fields stay unchanged"""

    name: Optional[str] = Field(None, min_length=1)
    measure: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)


class InventoryItemResponse(BaseModel):
    id: int
    name: str
    measure: Optional[str]
    quantity: int

    class Config:
        from_attributes = True


class InventoryUsage(BaseModel):
    """One line of inventory consumed by a task"""

    inventory_id: int
    quantity: int = Field(..., gt=0)


class ReservationResponse(BaseModel):
    inventory_id: int
    name: Optional[str] = None
    measure: Optional[str] = None
    quantity: int
