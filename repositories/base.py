"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from typing import Generic, TypeVar, Optional, Type
from uuid import UUID
from sqlalchemy.orm import Session
from abc import ABC

from domain.models import utcnow

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing common CRUD operations.
    All repositories should inherit from this class.

    Models with a ``deleted_at`` column are soft-deletable: every read through
    this class filters them out and ``delete`` only stamps the column.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    @property
    def soft_deletes(self) -> bool:
        return hasattr(self.model, "deleted_at")

    def _live(self):
        """Query over non-deleted rows of the model"""
        query = self.db.query(self.model)
        if self.soft_deletes:
            query = query.filter(self.model.deleted_at.is_(None))
        return query

    def get_by_id(self, entity_id: UUID) -> Optional[ModelType]:
        """Get entity by ID, None if absent or soft-deleted"""
        return self._live().filter(self.model.id == entity_id).first()

    def create(self, entity: ModelType, commit: bool = True) -> ModelType:
        """Create new entity"""
        self.db.add(entity)
        if commit:
            self.db.commit()
            self.db.refresh(entity)
        else:
            self.db.flush()
        return entity

    def update(self, entity: ModelType) -> ModelType:
        """Update existing entity"""
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity_id: UUID) -> bool:
        """Delete entity by ID (soft delete when the model supports it)"""
        entity = self.get_by_id(entity_id)
        if not entity:
            return False
        if self.soft_deletes:
            entity.deleted_at = utcnow()
        else:
            self.db.delete(entity)
        self.db.commit()
        return True
