"""Schemas for shopping lists and AI shopping-list generation"""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from domain.enums import ShoppingType


class ShoppingListPreferencesOverride(BaseModel):
    household_size: Optional[int] = Field(default=None, ge=1)
    monthly_income: Optional[float] = Field(default=None, ge=0)
    dietary_restrictions: Optional[List[str]] = None


class GenerateAIShoppingListRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    pantry_id: Optional[UUID] = None
    prompt: str = Field(default="", max_length=2000)
    max_budget: Optional[float] = Field(default=None, ge=0)
    people_count: Optional[int] = Field(default=None, ge=1)
    shopping_type: Optional[ShoppingType] = None
    include_basics: Optional[bool] = None
    exclude_items: List[str] = Field(default_factory=list)
    preferred_brands: List[str] = Field(default_factory=list)
    notes: str = Field(default="", max_length=1000)
    preferences: Optional[ShoppingListPreferencesOverride] = None


class AIShoppingListItem(BaseModel):
    """Item as proposed by the model"""

    name: str
    quantity: float = 0
    unit: str = ""
    estimated_price: float = 0
    category: str = ""
    priority: int = 2
    reason: str = ""


class AIShoppingListPayload(BaseModel):
    items: List[AIShoppingListItem] = Field(default_factory=list)
    reasoning: str = ""
    estimated_total: float = 0


class ShoppingListItemResponse(BaseModel):
    id: UUID
    shopping_list_id: UUID
    name: str
    quantity: float
    unit: str
    price_quantity: float
    estimated_price: float
    actual_price: float
    category: str
    priority: int
    purchased: bool
    source: str
    pantry_item_id: Optional[UUID] = None
    notes: str

    model_config = {"from_attributes": True}


class ShoppingListResponse(BaseModel):
    id: UUID
    user_id: UUID
    pantry_id: Optional[UUID] = None
    name: str
    status: str
    total_budget: float
    estimated_cost: float
    actual_cost: float
    generated_by: str
    household_size: Optional[int] = None
    monthly_income: Optional[float] = None
    dietary_restrictions: List[str] = Field(default_factory=list)
    items: List[ShoppingListItemResponse] = Field(default_factory=list)
    created_at: str
    updated_at: str


class ShoppingListSummary(BaseModel):
    id: UUID
    name: str
    status: str
    pantry_id: Optional[UUID] = None
    total_budget: float
    estimated_cost: float
    generated_by: str
    item_count: int
    created_at: str
