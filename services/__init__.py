"""Services package - Business logic layer"""

from services.credit_service import CreditService
from services.pantry_service import PantryService
from services.llm_service import LLMService
from services.recipe_service import RecipeService
from services.chat_service import ChatService
from services.shopping_list_service import ShoppingListService

# Note: prompt_builder, response_parser and token_service hold module-level helpers

__all__ = [
    "CreditService",
    "PantryService",
    "LLMService",
    "RecipeService",
    "ChatService",
    "ShoppingListService",
]
