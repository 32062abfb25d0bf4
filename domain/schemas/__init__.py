"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.credit_schemas import (
    WalletResponse,
    TransactionResponse,
    TransactionListResponse,
    TransactionFilter,
    AddCreditsRequest,
)
from domain.schemas.llm_schemas import (
    Message,
    LLMRequest,
    LLMResponse,
    LLMConfig,
    GenerationOptions,
    ChatRequest,
    ChatResponse,
)
from domain.schemas.recipe_schemas import (
    RecipeRequest,
    AvailableIngredient,
    RecipeBody,
    GeneratedRecipe,
    SaveRecipeRequest,
    RecipeResponse,
)
from domain.schemas.shopping_list_schemas import (
    GenerateAIShoppingListRequest,
    ShoppingListResponse,
    ShoppingListSummary,
)
from domain.schemas.pantry_schemas import (
    PantryCreate,
    PantryResponse,
    PantryMemberRequest,
    ItemCreate,
    ItemResponse,
    UserResponse,
)

__all__ = [
    # Credits
    "WalletResponse",
    "TransactionResponse",
    "TransactionListResponse",
    "TransactionFilter",
    "AddCreditsRequest",
    # LLM
    "Message",
    "LLMRequest",
    "LLMResponse",
    "LLMConfig",
    "GenerationOptions",
    "ChatRequest",
    "ChatResponse",
    # Recipes
    "RecipeRequest",
    "AvailableIngredient",
    "RecipeBody",
    "GeneratedRecipe",
    "SaveRecipeRequest",
    "RecipeResponse",
    # Shopping lists
    "GenerateAIShoppingListRequest",
    "ShoppingListResponse",
    "ShoppingListSummary",
    # Pantries
    "PantryCreate",
    "PantryResponse",
    "PantryMemberRequest",
    "ItemCreate",
    "ItemResponse",
    "UserResponse",
]
