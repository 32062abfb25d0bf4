"""
Pantry, membership and inventory models.
"""

from sqlalchemy import (
    Column,
    String,
    Text,
    Float,
    DateTime,
    ForeignKey,
    Uuid,
    Index,
    CheckConstraint,
)
import uuid

from domain.models.database import Base, utcnow


class Pantry(Base):
    """Shared collection of items with one owner and zero or more members"""

    __tablename__ = "pantries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    deleted_at = Column(DateTime(timezone=True), index=True)


class PantryUser(Base):
    """Membership row linking a user to a pantry with a role"""

    __tablename__ = "pantry_users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    pantry_id = Column(
        Uuid, ForeignKey("pantries.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(16), nullable=False, default="member")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    deleted_at = Column(DateTime(timezone=True))

    __table_args__ = (
        # (pantry_id, user_id) is unique among live rows only
        Index(
            "uq_pantry_users_live",
            "pantry_id",
            "user_id",
            unique=True,
            postgresql_where=deleted_at.is_(None),
            sqlite_where=deleted_at.is_(None),
        ),
        CheckConstraint("role IN ('owner', 'member')", name="ck_pantry_user_role"),
    )


class Item(Base):
    """Pantry inventory entry"""

    __tablename__ = "items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    pantry_id = Column(
        Uuid, ForeignKey("pantries.id", ondelete="CASCADE"), nullable=False
    )
    added_by = Column(Uuid, ForeignKey("users.id"), nullable=False)
    category_id = Column(Uuid, index=True)
    name = Column(Text, nullable=False, index=True)
    quantity = Column(Float, nullable=False, default=0)
    price_per_unit = Column(Float, nullable=False, default=0)
    price_quantity = Column(Float, nullable=False, default=1)
    unit = Column(String(32), nullable=False)
    expires_at = Column(DateTime(timezone=True), index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    deleted_at = Column(DateTime(timezone=True), index=True)

    __table_args__ = (
        Index("idx_item_pantry", "pantry_id", "created_at"),
        CheckConstraint("quantity >= 0", name="ck_item_quantity_nonneg"),
    )

    @property
    def total_price(self) -> float:
        return (self.quantity or 0) * (self.price_per_unit or 0)
