"""
User Repository - Data access layer for users and their profiles
"""

from typing import Optional
from uuid import UUID
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from repositories.base import BaseRepository
from domain.models import User, Profile
from app.exceptions import ConflictError


class UserRepository(BaseRepository[User]):
    """Repository for user data access"""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup of a live user by email"""
        return (
            self._live()
            .filter(func.lower(User.email) == email.strip().lower())
            .first()
        )

    def create_user(
        self,
        email: str,
        first_name: str = None,
        last_name: str = None,
        role: str = "user",
    ) -> User:
        user = User(
            email=email.strip().lower(),
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        try:
            return self.create(user)
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"User with email {email} already exists")


class ProfileRepository(BaseRepository[Profile]):
    """Repository for household/budget profiles"""

    def __init__(self, db: Session):
        super().__init__(db, Profile)

    def get_by_user_id(self, user_id: UUID) -> Optional[Profile]:
        return self.db.query(Profile).filter(Profile.user_id == user_id).first()

    def upsert(self, user_id: UUID, **fields) -> Profile:
        profile = self.get_by_user_id(user_id)
        if profile is None:
            profile = Profile(user_id=user_id, **fields)
            return self.create(profile)
        for key, value in fields.items():
            setattr(profile, key, value)
        return self.update(profile)
