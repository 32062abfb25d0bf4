"""
Domain mappers package.
Handles transformation between ORM models and DTOs (Data Transfer Objects).
"""

from domain.mappers.credit_mapper import CreditMapper, to_rfc3339
from domain.mappers.recipe_mapper import RecipeMapper
from domain.mappers.shopping_mapper import ShoppingMapper

__all__ = ["CreditMapper", "RecipeMapper", "ShoppingMapper", "to_rfc3339"]
