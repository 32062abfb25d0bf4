"""
Shopping list models.
"""

from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    Float,
    Boolean,
    DateTime,
    ForeignKey,
    Uuid,
)
from sqlalchemy.orm import relationship
import uuid

from domain.models.database import Base, JSONType, utcnow


class ShoppingList(Base):
    """Shopping list owned by the user that created it"""

    __tablename__ = "shopping_lists"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    pantry_id = Column(Uuid, ForeignKey("pantries.id"), index=True)
    name = Column(Text, nullable=False)
    status = Column(String(32), nullable=False, default="pending")
    total_budget = Column(Float, nullable=False, default=0)
    estimated_cost = Column(Float, nullable=False, default=0)
    actual_cost = Column(Float, nullable=False, default=0)
    generated_by = Column(String(16), nullable=False, default="manual")
    household_size = Column(Integer)
    monthly_income = Column(Float)
    dietary_restrictions = Column(JSONType, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    deleted_at = Column(DateTime(timezone=True), index=True)

    items = relationship(
        "ShoppingListItem",
        back_populates="shopping_list",
        cascade="all, delete-orphan",
        order_by="ShoppingListItem.priority",
    )


class ShoppingListItem(Base):
    """Single entry of a shopping list"""

    __tablename__ = "shopping_list_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    shopping_list_id = Column(
        Uuid, ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False
    )
    name = Column(Text, nullable=False)
    quantity = Column(Float, nullable=False, default=0)
    unit = Column(String(32), nullable=False, default="")
    price_quantity = Column(Float, nullable=False, default=1)
    estimated_price = Column(Float, nullable=False, default=0)
    actual_price = Column(Float, nullable=False, default=0)
    category = Column(String(64), nullable=False, default="")
    priority = Column(Integer, nullable=False, default=3)
    purchased = Column(Boolean, nullable=False, default=False)
    source = Column(String(32), nullable=False, default="manual")
    pantry_item_id = Column(Uuid)
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    shopping_list = relationship("ShoppingList", back_populates="items")
