"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
    utcnow,
)
from domain.models.user import User, Profile
from domain.models.pantry import Pantry, PantryUser, Item
from domain.models.credits import CreditWallet, CreditTransaction
from domain.models.recipe import Recipe
from domain.models.shopping_list import ShoppingList, ShoppingListItem

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    "utcnow",
    # User models
    "User",
    "Profile",
    # Pantry models
    "Pantry",
    "PantryUser",
    "Item",
    # Credit ledger
    "CreditWallet",
    "CreditTransaction",
    # Artifacts
    "Recipe",
    "ShoppingList",
    "ShoppingListItem",
]
