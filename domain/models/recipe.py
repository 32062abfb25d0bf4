"""
Saved recipe model (artifact produced by AI generation or saved by the user).
"""

from sqlalchemy import Column, String, Text, Integer, DateTime, Uuid
import uuid

from domain.models.database import Base, JSONType, utcnow


class Recipe(Base):
    """Recipe owned by the user that generated or saved it"""

    __tablename__ = "recipes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    ingredients = Column(JSONType, nullable=False, default=list)
    instructions = Column(JSONType, nullable=False, default=list)
    cooking_time = Column(Integer)
    preparation_time = Column(Integer)
    total_time = Column(Integer)
    serving_size = Column(Integer)
    difficulty = Column(String(50))
    meal_type = Column(String(50))
    cuisine = Column(String(100))
    dietary_restrictions = Column(JSONType, nullable=False, default=list)
    nutrition_info = Column(JSONType)
    tips = Column(JSONType, nullable=False, default=list)
    generated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    deleted_at = Column(DateTime(timezone=True), index=True)
