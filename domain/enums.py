"""
Domain enums for the PantryMind application.
Contains all enumeration types used across the domain models and schemas.
"""

import enum


class UserRole(str, enum.Enum):
    """Account roles"""

    USER = "user"
    ADMIN = "admin"


class PantryRole(str, enum.Enum):
    """Role of a user inside a shared pantry"""

    OWNER = "owner"
    MEMBER = "member"


class CreditTransactionType(str, enum.Enum):
    """Ledger entry kinds; the sign of the amount follows the kind"""

    ADD = "add"
    CONSUME = "consume"


class MessageRole(str, enum.Enum):
    """Chat message author"""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ProviderName(str, enum.Enum):
    """Known LLM vendors"""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"
    GEMINI = "gemini"


class FinishReason(str, enum.Enum):
    """Normalized completion finish reasons"""

    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"


class MealType(str, enum.Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    DESSERT = "dessert"


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ShoppingListStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ShoppingType(str, enum.Enum):
    """Kind of shopping trip requested for AI list generation"""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    STOCK_UP = "stock_up"
    EMERGENCY = "emergency"
