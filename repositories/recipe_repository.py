"""
Recipe Repository - Data access layer for saved recipes
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Recipe


class RecipeRepository(BaseRepository[Recipe]):
    """Repository for recipes; every read is scoped to the owning user"""

    def __init__(self, db: Session):
        super().__init__(db, Recipe)

    def create_many(self, recipes: List[Recipe]) -> List[Recipe]:
        """Insert all recipes atomically: either every row lands or none does"""
        try:
            self.db.add_all(recipes)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        for recipe in recipes:
            self.db.refresh(recipe)
        return recipes

    def find_by_id(self, recipe_id: UUID, user_id: UUID) -> Optional[Recipe]:
        return (
            self._live()
            .filter(Recipe.id == recipe_id, Recipe.user_id == user_id)
            .first()
        )

    def find_by_user(self, user_id: UUID) -> List[Recipe]:
        return (
            self._live()
            .filter(Recipe.user_id == user_id)
            .order_by(Recipe.created_at.desc())
            .all()
        )
