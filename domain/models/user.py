"""
User and profile models.
"""

from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    Float,
    DateTime,
    ForeignKey,
    Uuid,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
import uuid

from domain.models.database import Base, JSONType, utcnow


class User(Base):
    """Application account; identity behind every bearer token"""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(Text)
    last_name = Column(Text)
    role = Column(String(16), nullable=False, default="user")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    deleted_at = Column(DateTime(timezone=True), index=True)

    profile = relationship(
        "Profile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


class Profile(Base):
    """Household and budget preferences used by AI shopping-list generation"""

    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    monthly_income = Column(Float, nullable=False, default=0)
    preferred_budget = Column(Float, nullable=False, default=0)
    household_size = Column(Integer, nullable=False, default=1)
    dietary_restrictions = Column(JSONType, nullable=False, default=list)
    shopping_frequency = Column(String(32), nullable=False, default="monthly")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    user = relationship("User", back_populates="profile")

    __table_args__ = (
        CheckConstraint("household_size >= 1", name="ck_profile_household_positive"),
    )
