"""
Pantry Repository - Data access layer for pantries and memberships
"""

from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import and_

from repositories.base import BaseRepository
from domain.models import Pantry, PantryUser, User, utcnow
from domain.enums import PantryRole


class PantryRepository(BaseRepository[Pantry]):
    """Repository for pantry and membership data access"""

    def __init__(self, db: Session):
        super().__init__(db, Pantry)

    def _membership(self, pantry_id: UUID, user_id: UUID):
        return self.db.query(PantryUser).filter(
            and_(
                PantryUser.pantry_id == pantry_id,
                PantryUser.user_id == user_id,
                PantryUser.deleted_at.is_(None),
            )
        )

    def get_by_user(self, user_id: UUID) -> List[Pantry]:
        """Pantries the user belongs to, in any role"""
        return (
            self._live()
            .join(PantryUser, PantryUser.pantry_id == Pantry.id)
            .filter(PantryUser.user_id == user_id, PantryUser.deleted_at.is_(None))
            .order_by(Pantry.created_at.desc())
            .all()
        )

    def create_with_owner(self, pantry: Pantry) -> Pantry:
        """Insert the pantry and its owner membership row in one transaction"""
        try:
            self.db.add(pantry)
            self.db.flush()
            self.db.add(
                PantryUser(
                    pantry_id=pantry.id,
                    user_id=pantry.owner_id,
                    role=PantryRole.OWNER.value,
                )
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(pantry)
        return pantry

    def is_user_in_pantry(self, pantry_id: UUID, user_id: UUID) -> bool:
        return (
            self._membership(pantry_id, user_id)
            .join(Pantry, Pantry.id == PantryUser.pantry_id)
            .filter(Pantry.deleted_at.is_(None))
            .first()
            is not None
        )

    def is_user_owner(self, pantry_id: UUID, user_id: UUID) -> bool:
        return (
            self._membership(pantry_id, user_id)
            .join(Pantry, Pantry.id == PantryUser.pantry_id)
            .filter(
                Pantry.deleted_at.is_(None),
                PantryUser.role == PantryRole.OWNER.value,
            )
            .first()
            is not None
        )

    def add_user_to_pantry(
        self, pantry_id: UUID, user_id: UUID, role: PantryRole = PantryRole.MEMBER
    ) -> PantryUser:
        membership = PantryUser(pantry_id=pantry_id, user_id=user_id, role=role.value)
        self.db.add(membership)
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def remove_user_from_pantry(self, pantry_id: UUID, user_id: UUID) -> bool:
        membership = self._membership(pantry_id, user_id).first()
        if membership is None:
            return False
        membership.deleted_at = utcnow()
        self.db.commit()
        return True

    def list_users_in_pantry(self, pantry_id: UUID) -> List[Tuple[PantryUser, User]]:
        return (
            self.db.query(PantryUser, User)
            .join(User, User.id == PantryUser.user_id)
            .filter(PantryUser.pantry_id == pantry_id, PantryUser.deleted_at.is_(None))
            .order_by(PantryUser.created_at)
            .all()
        )

    def get_owner_membership(self, pantry_id: UUID) -> Optional[PantryUser]:
        return (
            self.db.query(PantryUser)
            .filter(
                PantryUser.pantry_id == pantry_id,
                PantryUser.role == PantryRole.OWNER.value,
                PantryUser.deleted_at.is_(None),
            )
            .first()
        )
