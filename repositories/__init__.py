"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.user_repository import UserRepository, ProfileRepository
from repositories.pantry_repository import PantryRepository
from repositories.item_repository import ItemRepository
from repositories.credit_repository import CreditRepository
from repositories.recipe_repository import RecipeRepository
from repositories.shopping_list_repository import ShoppingListRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ProfileRepository",
    "PantryRepository",
    "ItemRepository",
    "CreditRepository",
    "RecipeRepository",
    "ShoppingListRepository",
]
