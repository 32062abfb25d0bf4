"""Schemas for recipe generation, persistence and pantry ingredients"""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from domain.enums import ProviderName


class RecipeRequest(BaseModel):
    """
    Recipe generation request.

    Range and enum checks live in RecipeService so violations surface as
    INVALID_REQUEST (400) instead of a schema error.
    """

    pantry_id: str = Field(default="", description="Pantry providing the ingredients")
    provider: Optional[ProviderName] = None
    cooking_time: int = Field(default=0, description="Minutes; 0 or 5-480")
    meal_type: str = ""
    difficulty: str = ""
    cuisine: str = ""
    dietary_restrictions: List[str] = Field(default_factory=list)
    serving_size: int = Field(default=0, description="0-20; 0 means unspecified")
    purpose: str = ""
    additional_notes: str = ""


class AvailableIngredient(BaseModel):
    """Non-zero-quantity pantry item exposed to the AI pipeline"""

    id: UUID
    name: str
    quantity: float
    unit: str

    model_config = {"from_attributes": True}


class RecipeIngredient(BaseModel):
    name: str
    amount: Optional[float] = None
    unit: str = ""
    available: bool = False
    alternative: Optional[str] = None


class RecipeInstruction(BaseModel):
    step: int
    description: str
    time: Optional[int] = None
    temperature: Optional[str] = None


class NutritionInfo(BaseModel):
    calories: Optional[float] = None
    protein: Optional[float] = None
    carbohydrates: Optional[float] = None
    fat: Optional[float] = None
    fiber: Optional[float] = None
    sugar: Optional[float] = None
    sodium: Optional[float] = None


class RecipeBody(BaseModel):
    """Recipe document as produced by the model (after repair) or sent by a client"""

    title: str = Field(..., min_length=1)
    description: str = ""
    ingredients: List[RecipeIngredient] = Field(default_factory=list)
    instructions: List[RecipeInstruction] = Field(default_factory=list)
    cooking_time: Optional[int] = None
    preparation_time: Optional[int] = None
    total_time: Optional[int] = None
    serving_size: Optional[int] = None
    difficulty: Optional[str] = None
    meal_type: Optional[str] = None
    cuisine: Optional[str] = None
    dietary_restrictions: List[str] = Field(default_factory=list)
    nutrition_info: Optional[NutritionInfo] = None
    tips: List[str] = Field(default_factory=list)


class GeneratedRecipe(RecipeBody):
    """Recipe enriched with server-assigned identity"""

    id: UUID
    generated_at: str
    source_url: Optional[str] = None


class SaveRecipeRequest(RecipeBody):
    generated_at: Optional[str] = None


class RecipeResponse(RecipeBody):
    """Persisted recipe"""

    id: UUID
    user_id: UUID
    generated_at: str
    created_at: str
    updated_at: str


class GenerateRecipesResponse(BaseModel):
    message: str
    recipes: List[GeneratedRecipe]
    count: int
