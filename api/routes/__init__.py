"""API routes package"""

from . import credits, health, llm, pantries, recipes, shopping_lists, users

__all__ = [
    "credits",
    "health",
    "llm",
    "pantries",
    "recipes",
    "shopping_lists",
    "users",
]
