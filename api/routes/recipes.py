"""Recipe routes: metered generation and chat, plus the saved-recipe book"""

import threading
from typing import List, Union

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session
import logging
from uuid import UUID

from api.dependencies import (
    AuthContext,
    get_cancel_event,
    get_current_user,
    get_llm_service,
    require_credits,
)
from api.responses import success_response
from domain.mappers import RecipeMapper
from domain.models import get_db_session
from domain.schemas.llm_schemas import ChatRequest, ChatResponse
from domain.schemas.recipe_schemas import (
    GenerateRecipesResponse,
    RecipeRequest,
    RecipeResponse,
    SaveRecipeRequest,
)
from services.chat_service import ChatService
from services.llm_service import LLMService
from services.recipe_service import DEFAULT_RECIPE_COUNT, RecipeService

router = APIRouter(prefix="/recipes", tags=["Recipes"])
logger = logging.getLogger("pantrymind.api.recipes")


@router.post("/generate", response_model=GenerateRecipesResponse)
def generate_recipes(
    payload: RecipeRequest,
    auth: AuthContext = Depends(require_credits),
    db: Session = Depends(get_db_session),
    llm: LLMService = Depends(get_llm_service),
    cancel_event: threading.Event = Depends(get_cancel_event),
):
    """
    Generate three recipes from the pantry's in-stock ingredients.

    Costs one credit, charged after the recipes are stored.
    """
    recipes = RecipeService.generate_multiple_recipes(
        db, llm, payload, auth.user_id, DEFAULT_RECIPE_COUNT, cancel_event
    )
    return GenerateRecipesResponse(
        message="Recipes generated successfully", recipes=recipes, count=len(recipes)
    )


@router.post("/chat", response_model=ChatResponse)
def chat(
    payload: ChatRequest,
    auth: AuthContext = Depends(require_credits),
    db: Session = Depends(get_db_session),
    llm: LLMService = Depends(get_llm_service),
    cancel_event: threading.Event = Depends(get_cancel_event),
):
    """Free-form cooking chat. Costs one credit on success."""
    return ChatService.chat(db, llm, payload, auth.user_id, cancel_event)


@router.post("/save", status_code=status.HTTP_201_CREATED)
def save_recipes(
    payload: Union[List[SaveRecipeRequest], SaveRecipeRequest] = Body(...),
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """Save one recipe or an array of recipes (all or nothing)."""
    bodies = payload if isinstance(payload, list) else [payload]
    saved = RecipeService.save_recipes(db, auth.user_id, bodies)
    return {
        "message": "Recipes saved successfully",
        "count": len(saved),
        "recipes": [RecipeMapper.to_response(r) for r in saved],
    }


@router.get("", response_model=List[RecipeResponse])
def list_recipes(
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """Caller's saved recipes, newest first."""
    return [RecipeMapper.to_response(r) for r in RecipeService.list_recipes(db, auth.user_id)]


@router.get("/{recipe_id}", response_model=RecipeResponse)
def get_recipe(
    recipe_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    recipe = RecipeService.get_recipe(db, recipe_id, auth.user_id)
    return RecipeMapper.to_response(recipe)


@router.delete("/{recipe_id}")
def delete_recipe(
    recipe_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    RecipeService.delete_recipe(db, recipe_id, auth.user_id)
    return success_response({"id": str(recipe_id)}, "Recipe deleted")
