"""
Item Repository - Data access layer for pantry inventory
"""

from typing import List
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Item


class ItemRepository(BaseRepository[Item]):
    """Repository for pantry item data access"""

    def __init__(self, db: Session):
        super().__init__(db, Item)

    def list_by_pantry(self, pantry_id: UUID) -> List[Item]:
        """All live items of a pantry, oldest first"""
        return (
            self._live()
            .filter(Item.pantry_id == pantry_id)
            .order_by(Item.created_at, Item.name)
            .all()
        )

    def list_in_stock(self, pantry_id: UUID) -> List[Item]:
        """Live items of a pantry with a quantity above zero"""
        return (
            self._live()
            .filter(Item.pantry_id == pantry_id, Item.quantity > 0)
            .order_by(Item.created_at, Item.name)
            .all()
        )
