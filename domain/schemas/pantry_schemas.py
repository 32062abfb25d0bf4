"""Schemas for pantries, memberships, items and users"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class PantryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class PantryResponse(BaseModel):
    id: UUID
    owner_id: UUID
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PantryMemberRequest(BaseModel):
    email: EmailStr


class PantryMemberResponse(BaseModel):
    id: UUID
    pantry_id: UUID
    user_id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str


class ItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(..., ge=0)
    unit: str = Field(..., min_length=1, max_length=32)
    price_per_unit: float = Field(default=0, ge=0)
    price_quantity: float = Field(default=1, gt=0)
    category_id: Optional[UUID] = None
    expires_at: Optional[datetime] = None


class ItemResponse(BaseModel):
    id: UUID
    pantry_id: UUID
    added_by: UUID
    category_id: Optional[UUID] = None
    name: str
    quantity: float
    unit: str
    price_per_unit: float
    price_quantity: float
    total_price: float
    expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    created_at: datetime

    model_config = {"from_attributes": True}
