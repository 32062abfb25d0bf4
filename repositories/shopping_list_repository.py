"""
Shopping List Repository - Data access layer for shopping lists and their items
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session, selectinload

from repositories.base import BaseRepository
from domain.models import ShoppingList


class ShoppingListRepository(BaseRepository[ShoppingList]):
    """Repository for shopping lists owned by a user"""

    def __init__(self, db: Session):
        super().__init__(db, ShoppingList)

    def create_with_items(self, shopping_list: ShoppingList) -> ShoppingList:
        """Persist the list and its items (cascaded) in one transaction"""
        try:
            self.db.add(shopping_list)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self.get_by_id_for_user(shopping_list.id, shopping_list.user_id)

    def get_by_id_for_user(
        self, list_id: UUID, user_id: UUID
    ) -> Optional[ShoppingList]:
        return (
            self._live()
            .options(selectinload(ShoppingList.items))
            .filter(ShoppingList.id == list_id, ShoppingList.user_id == user_id)
            .populate_existing()
            .first()
        )

    def list_by_user(
        self, user_id: UUID, limit: int = 20, offset: int = 0
    ) -> List[ShoppingList]:
        return (
            self._live()
            .options(selectinload(ShoppingList.items))
            .filter(ShoppingList.user_id == user_id)
            .order_by(ShoppingList.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
