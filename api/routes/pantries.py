"""Shared pantry routes: pantries, members and items"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging
from uuid import UUID
from typing import List

from api.dependencies import AuthContext, get_current_user
from api.responses import success_response
from domain.models import get_db_session
from domain.schemas.pantry_schemas import (
    ItemCreate,
    ItemResponse,
    PantryCreate,
    PantryMemberRequest,
    PantryMemberResponse,
    PantryResponse,
)
from domain.schemas.recipe_schemas import AvailableIngredient
from services.pantry_service import PantryService

router = APIRouter(prefix="/pantries", tags=["Pantries"])
logger = logging.getLogger("pantrymind.api.pantries")


@router.post("", response_model=PantryResponse, status_code=status.HTTP_201_CREATED)
def create_pantry(
    payload: PantryCreate,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """Create a pantry; the caller becomes its owner."""
    pantry = PantryService.create_pantry(db, payload.name, auth.user_id)
    return PantryResponse.model_validate(pantry)


@router.get("", response_model=List[PantryResponse])
def list_pantries(
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    pantries = PantryService.list_pantries(db, auth.user_id)
    return [PantryResponse.model_validate(p) for p in pantries]


@router.get("/{pantry_id}", response_model=PantryResponse)
def get_pantry(
    pantry_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    pantry = PantryService.get_pantry(db, pantry_id, auth.user_id)
    return PantryResponse.model_validate(pantry)


@router.delete("/{pantry_id}")
def delete_pantry(
    pantry_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """Soft-delete a pantry (owner only)."""
    PantryService.delete_pantry(db, pantry_id, auth.user_id)
    return success_response({"id": str(pantry_id)}, "Pantry deleted")


# ============================================================================
# Members
# ============================================================================


@router.get("/{pantry_id}/users", response_model=List[PantryMemberResponse])
def list_pantry_users(
    pantry_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    rows = PantryService.list_users(db, pantry_id, auth.user_id)
    return [
        PantryMemberResponse(
            id=membership.id,
            pantry_id=membership.pantry_id,
            user_id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=membership.role,
        )
        for membership, user in rows
    ]


@router.post("/{pantry_id}/users", status_code=status.HTTP_201_CREATED)
def add_pantry_user(
    pantry_id: UUID,
    payload: PantryMemberRequest,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """Add a member by email (owner only)."""
    membership = PantryService.add_user_to_pantry(
        db, pantry_id, auth.user_id, payload.email
    )
    return success_response(
        {"user_id": str(membership.user_id), "role": membership.role},
        "User added to pantry",
    )


@router.delete("/{pantry_id}/users")
def remove_pantry_user(
    pantry_id: UUID,
    payload: PantryMemberRequest,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """Remove a member by email (owner only; the owner cannot remove themself)."""
    PantryService.remove_user_from_pantry(db, pantry_id, auth.user_id, payload.email)
    return success_response(message="User removed from pantry")


# ============================================================================
# Items
# ============================================================================


@router.post(
    "/{pantry_id}/items",
    response_model=ItemResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_item(
    pantry_id: UUID,
    payload: ItemCreate,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    item = PantryService.add_item(db, pantry_id, auth.user_id, payload)
    return ItemResponse.model_validate(item)


@router.get("/{pantry_id}/items", response_model=List[ItemResponse])
def list_items(
    pantry_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    items = PantryService.list_items(db, pantry_id, auth.user_id)
    return [ItemResponse.model_validate(i) for i in items]


@router.get("/{pantry_id}/ingredients", response_model=List[AvailableIngredient])
def list_ingredients(
    pantry_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """In-stock items of the pantry, as the AI pipeline sees them."""
    return PantryService.get_available_ingredients(db, pantry_id, auth.user_id)
