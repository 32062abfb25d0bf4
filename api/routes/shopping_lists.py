"""Shopping list routes"""

import threading
from typing import List

from fastapi import APIRouter, Depends, Query, status
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
from domain.mappers import ShoppingMapper
from domain.models import get_db_session
from domain.schemas.shopping_list_schemas import (
    GenerateAIShoppingListRequest,
    ShoppingListResponse,
    ShoppingListSummary,
)
from services.llm_service import LLMService
from services.shopping_list_service import ShoppingListService

router = APIRouter(prefix="/shopping-lists", tags=["Shopping Lists"])
logger = logging.getLogger("pantrymind.api.shopping_lists")


@router.post(
    "/generate",
    response_model=ShoppingListResponse,
    status_code=status.HTTP_201_CREATED,
)
def generate_shopping_list(
    payload: GenerateAIShoppingListRequest,
    auth: AuthContext = Depends(require_credits),
    db: Session = Depends(get_db_session),
    llm: LLMService = Depends(get_llm_service),
    cancel_event: threading.Event = Depends(get_cancel_event),
):
    """Build a shopping list with the LLM. Costs one credit."""
    shopping_list = ShoppingListService.generate_ai_shopping_list(
        db, llm, payload, auth.user_id, cancel_event
    )
    return ShoppingMapper.to_response(shopping_list)


@router.get("", response_model=List[ShoppingListSummary])
def list_shopping_lists(
    limit: int = Query(20, description="Max lists to return (1-100)"),
    offset: int = Query(0, ge=0),
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    lists = ShoppingListService.list_shopping_lists(db, auth.user_id, limit, offset)
    return [ShoppingMapper.to_summary(sl) for sl in lists]


@router.get("/{list_id}", response_model=ShoppingListResponse)
def get_shopping_list(
    list_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    shopping_list = ShoppingListService.get_shopping_list(db, list_id, auth.user_id)
    return ShoppingMapper.to_response(shopping_list)
