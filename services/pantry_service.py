"""
Pantry service: shared pantries, membership checks and the ingredient reader
used by the AI pipeline.
"""

import logging
from typing import List, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    PantryNotFoundError,
    UserNotFoundError,
)
from domain.models import Item, Pantry, PantryUser, User
from domain.schemas.pantry_schemas import ItemCreate
from domain.schemas.recipe_schemas import AvailableIngredient
from repositories import ItemRepository, PantryRepository, UserRepository

logger = logging.getLogger("pantrymind.pantry")


class PantryService:
    """Business logic for pantries and pantry authorization."""

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    @staticmethod
    def is_member(db: Session, pantry_id: UUID, user_id: UUID) -> bool:
        return PantryRepository(db).is_user_in_pantry(pantry_id, user_id)

    @staticmethod
    def is_owner(db: Session, pantry_id: UUID, user_id: UUID) -> bool:
        return PantryRepository(db).is_user_owner(pantry_id, user_id)

    @staticmethod
    def _require_owner(db: Session, pantry_id: UUID, user_id: UUID, action: str):
        if not PantryService.is_owner(db, pantry_id, user_id):
            raise ForbiddenError(f"Only the pantry owner can {action}")

    # ------------------------------------------------------------------
    # Pantries
    # ------------------------------------------------------------------

    @staticmethod
    def create_pantry(db: Session, name: str, owner_id: UUID) -> Pantry:
        pantry = PantryRepository(db).create_with_owner(
            Pantry(name=name.strip(), owner_id=owner_id)
        )
        logger.info("User %s created pantry %s", owner_id, pantry.id)
        return pantry

    @staticmethod
    def get_pantry(db: Session, pantry_id: UUID, user_id: UUID) -> Pantry:
        """
        Load a pantry the user belongs to.

        Membership is checked first, so a caller outside the pantry learns
        nothing about whether it exists.

        Raises:
            ForbiddenError: user is not a member
            PantryNotFoundError: pantry vanished after the membership check
        """
        repo = PantryRepository(db)
        if not repo.is_user_in_pantry(pantry_id, user_id):
            raise ForbiddenError()
        pantry = repo.get_by_id(pantry_id)
        if pantry is None:
            raise PantryNotFoundError()
        return pantry

    @staticmethod
    def list_pantries(db: Session, user_id: UUID) -> List[Pantry]:
        return PantryRepository(db).get_by_user(user_id)

    @staticmethod
    def delete_pantry(db: Session, pantry_id: UUID, user_id: UUID) -> None:
        PantryService._require_owner(db, pantry_id, user_id, "delete it")
        PantryRepository(db).delete(pantry_id)
        logger.info("User %s deleted pantry %s", user_id, pantry_id)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    @staticmethod
    def add_user_to_pantry(
        db: Session, pantry_id: UUID, owner_id: UUID, email: str
    ) -> PantryUser:
        PantryService._require_owner(db, pantry_id, owner_id, "add users")

        user = UserRepository(db).get_by_email(email)
        if user is None:
            raise UserNotFoundError()

        repo = PantryRepository(db)
        if repo.is_user_in_pantry(pantry_id, user.id):
            raise ConflictError("User already in pantry")
        try:
            membership = repo.add_user_to_pantry(pantry_id, user.id)
        except IntegrityError:
            db.rollback()
            raise ConflictError("User already in pantry")
        logger.info("User %s joined pantry %s", user.id, pantry_id)
        return membership

    @staticmethod
    def remove_user_from_pantry(
        db: Session, pantry_id: UUID, owner_id: UUID, email: str
    ) -> None:
        PantryService._require_owner(db, pantry_id, owner_id, "remove users")

        user = UserRepository(db).get_by_email(email)
        if user is None:
            raise UserNotFoundError()
        if user.id == owner_id:
            raise InvalidRequestError("Owner cannot remove themselves")

        if not PantryRepository(db).remove_user_from_pantry(pantry_id, user.id):
            raise UserNotFoundError("User is not a member of this pantry")
        logger.info("User %s removed from pantry %s", user.id, pantry_id)

    @staticmethod
    def list_users(
        db: Session, pantry_id: UUID, user_id: UUID
    ) -> List[Tuple[PantryUser, User]]:
        repo = PantryRepository(db)
        if not repo.is_user_in_pantry(pantry_id, user_id):
            raise ForbiddenError()
        return repo.list_users_in_pantry(pantry_id)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    @staticmethod
    def add_item(
        db: Session, pantry_id: UUID, user_id: UUID, payload: ItemCreate
    ) -> Item:
        PantryService.get_pantry(db, pantry_id, user_id)
        item = Item(
            pantry_id=pantry_id,
            added_by=user_id,
            category_id=payload.category_id,
            name=payload.name.strip(),
            quantity=payload.quantity,
            unit=payload.unit.strip(),
            price_per_unit=payload.price_per_unit,
            price_quantity=payload.price_quantity,
            expires_at=payload.expires_at,
        )
        return ItemRepository(db).create(item)

    @staticmethod
    def list_items(db: Session, pantry_id: UUID, user_id: UUID) -> List[Item]:
        PantryService.get_pantry(db, pantry_id, user_id)
        return ItemRepository(db).list_by_pantry(pantry_id)

    @staticmethod
    def get_available_ingredients(
        db: Session, pantry_id: UUID, user_id: UUID
    ) -> List[AvailableIngredient]:
        """
        Ingredients the AI pipeline may use: in-stock items of a pantry the
        user belongs to, with trimmed name and unit.
        """
        PantryService.get_pantry(db, pantry_id, user_id)
        return [
            AvailableIngredient(
                id=item.id,
                name=item.name.strip(),
                quantity=item.quantity,
                unit=(item.unit or "").strip(),
            )
            for item in ItemRepository(db).list_in_stock(pantry_id)
        ]
