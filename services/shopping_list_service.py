"""
Shopping list service: AI-assisted list generation and read access to the
caller's lists.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.exceptions import ShoppingListNotFoundError
from domain.enums import ShoppingListStatus
from domain.models import Profile, ShoppingList, ShoppingListItem
from domain.schemas.llm_schemas import GenerationOptions
from domain.schemas.recipe_schemas import AvailableIngredient
from domain.schemas.shopping_list_schemas import (
    AIShoppingListPayload,
    GenerateAIShoppingListRequest,
    ShoppingListPreferencesOverride,
)
from repositories import ProfileRepository, ShoppingListRepository
from services.credit_service import CreditService
from services.llm_service import LLMService
from services.pantry_service import PantryService
from services.prompt_builder import PromptBuilder, template_registry
from services.response_parser import parse_shopping_list

logger = logging.getLogger("pantrymind.shopping")

SHOPPING_LIST_DESCRIPTION = "AI request - shopping list generation"
DEFAULT_BUDGET = 300.0
INCOME_BUDGET_SHARE = 0.15
DEFAULT_PRIORITY = 2
AI_ITEM_SOURCE = "ai_suggestion"

GENERATION_OPTIONS = GenerationOptions(
    max_tokens=2000, temperature=0.7, response_format="json"
)

# Units priced per package/weight/volume rather than per piece.
BULK_UNITS = frozenset(
    {
        "kg",
        "g",
        "grama",
        "gramas",
        "l",
        "litro",
        "ml",
        "mililitro",
        "pacote",
        "pct",
        "pac",
        "cx",
        "caixa",
        "garrafa",
        "lata",
        "sache",
        "sachê",
    }
)


@dataclass
class ShoppingPreferences:
    household_size: int = 1
    monthly_income: float = 0.0
    dietary_restrictions: List[str] = field(default_factory=list)


# ============================================================================
# Pricing helpers
# ============================================================================


def clamp_non_negative(value: float) -> float:
    return value if value > 0 else 0.0


def normalize_price_quantity(value: float) -> float:
    return value if value > 0 else 1.0


def resolve_unit_price(actual_price: float, estimated_price: float) -> float:
    price = actual_price if actual_price > 0 else estimated_price
    return clamp_non_negative(price)


def requires_price_quantity(unit: str) -> bool:
    return (unit or "").strip().lower() in BULK_UNITS


def derive_ai_price_quantity(quantity: float, unit: str) -> float:
    """
    Quantity the AI price refers to: the whole line for bulk units
    (``2 kg`` priced as one lot), a single piece otherwise.
    """
    quantity = clamp_non_negative(quantity)
    if not requires_price_quantity(unit) or quantity <= 0:
        return 1.0
    return quantity


def calculate_list_totals(items: Iterable[ShoppingListItem]) -> Tuple[float, float]:
    """Return ``(estimated, actual)``; actual only counts purchased items"""
    estimated = 0.0
    actual = 0.0
    for item in items:
        factor = max(item.quantity / normalize_price_quantity(item.price_quantity), 0.0)
        estimated += item.estimated_price * factor
        if item.purchased:
            actual += resolve_unit_price(item.actual_price, item.estimated_price) * factor
    return estimated, actual


def normalize_strings(values: Optional[Iterable[str]]) -> List[str]:
    """Trim, drop blanks and case-insensitive duplicates, keep first spelling"""
    seen = set()
    result = []
    for value in values or []:
        trimmed = (value or "").strip()
        if not trimmed or trimmed.lower() in seen:
            continue
        seen.add(trimmed.lower())
        result.append(trimmed)
    return result


class ShoppingListService:
    """Business logic for shopping lists."""

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @staticmethod
    def determine_budget(
        request: GenerateAIShoppingListRequest, profile: Optional[Profile]
    ) -> float:
        if request.max_budget is not None and request.max_budget > 0:
            return request.max_budget
        if profile is not None:
            if profile.preferred_budget > 0:
                return profile.preferred_budget
            if profile.monthly_income > 0:
                return profile.monthly_income * INCOME_BUDGET_SHARE
        return DEFAULT_BUDGET

    @staticmethod
    def resolve_preferences(
        profile: Optional[Profile],
        overrides: Optional[ShoppingListPreferencesOverride],
    ) -> ShoppingPreferences:
        prefs = ShoppingPreferences()
        if profile is not None:
            prefs.household_size = profile.household_size
            prefs.monthly_income = profile.monthly_income
            prefs.dietary_restrictions = list(profile.dietary_restrictions or [])

        if overrides is not None:
            if overrides.household_size is not None:
                prefs.household_size = overrides.household_size
            if overrides.monthly_income is not None:
                prefs.monthly_income = overrides.monthly_income
            if overrides.dietary_restrictions is not None:
                prefs.dietary_restrictions = overrides.dietary_restrictions
        prefs.dietary_restrictions = normalize_strings(prefs.dietary_restrictions)
        return prefs

    @staticmethod
    def build_prompt_variables(
        request: GenerateAIShoppingListRequest,
        preferences: ShoppingPreferences,
        profile: Optional[Profile],
        budget: float,
        pantry_items: List[AvailableIngredient],
    ) -> Dict[str, str]:
        include_basics = True if request.include_basics is None else request.include_basics
        people = request.people_count or preferences.household_size

        variables = {
            "budget": f"{budget:.2f}",
            "shopping_type": request.shopping_type.value if request.shopping_type else "general",
            "include_basics": "yes" if include_basics else "no",
            "people_count": str(people),
            "household_size": str(preferences.household_size),
            "monthly_income": f"{preferences.monthly_income:.2f}",
            "dietary_restrictions": ", ".join(preferences.dietary_restrictions),
            "pantry_items": ", ".join(
                f"{i.name} ({i.quantity:.1f} {i.unit})" for i in pantry_items
            ),
            "exclude_items": ", ".join(normalize_strings(request.exclude_items)),
            "preferred_brands": ", ".join(normalize_strings(request.preferred_brands)),
            "notes": request.notes.strip(),
            "custom_prompt": request.prompt.strip(),
        }
        if profile is not None:
            variables["preferred_budget"] = f"{profile.preferred_budget:.2f}"
            variables["shopping_frequency"] = profile.shopping_frequency or ""
        return variables

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    @staticmethod
    def build_items(payload: AIShoppingListPayload) -> List[ShoppingListItem]:
        """
        Turn AI suggestions into list rows.

        The model prices whole lines; stored prices refer to ``price_quantity``
        units, so the line price is divided by ``quantity / price_quantity``.
        """
        items = []
        for suggestion in payload.items:
            quantity = clamp_non_negative(suggestion.quantity)
            price_quantity = derive_ai_price_quantity(quantity, suggestion.unit)
            factor = quantity / price_quantity if price_quantity > 0 else 1.0
            if factor <= 0:
                factor = 1.0
            estimated_price = clamp_non_negative(suggestion.estimated_price)
            if estimated_price > 0:
                estimated_price = estimated_price / factor

            priority = suggestion.priority
            if priority < 1 or priority > 3:
                priority = DEFAULT_PRIORITY

            items.append(
                ShoppingListItem(
                    name=suggestion.name.strip(),
                    quantity=quantity,
                    unit=suggestion.unit.strip(),
                    price_quantity=price_quantity,
                    estimated_price=estimated_price,
                    actual_price=0.0,
                    category=suggestion.category.strip(),
                    priority=priority,
                    purchased=False,
                    source=AI_ITEM_SOURCE,
                    notes=suggestion.reason,
                )
            )
        return items

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @staticmethod
    def generate_ai_shopping_list(
        db: Session,
        llm: LLMService,
        request: GenerateAIShoppingListRequest,
        user_id: UUID,
        cancel_event: Optional[threading.Event] = None,
    ) -> ShoppingList:
        """
        Ask the LLM for a shopping list, store it and charge one credit.

        The list and its items are written in one transaction before the
        debit. InsufficientCreditsError from the debit propagates and leaves
        the stored list in place.

        Raises:
            ForbiddenError: pantry given and caller is not a member
            InvalidLLMResponseError: reply held no decodable list
            LLMRequestFailedError: vendor failed after retries
            InsufficientCreditsError: debit after generation failed
        """
        pantry_items: List[AvailableIngredient] = []
        if request.pantry_id is not None:
            pantry_items = PantryService.get_available_ingredients(
                db, request.pantry_id, user_id
            )

        profile = ProfileRepository(db).get_by_user_id(user_id)
        budget = ShoppingListService.determine_budget(request, profile)
        preferences = ShoppingListService.resolve_preferences(profile, request.preferences)

        template = template_registry.get("shopping_list_generation")
        prompt = PromptBuilder().build_user_prompt(
            template.user_prompt,
            ShoppingListService.build_prompt_variables(
                request, preferences, profile, budget, pantry_items
            ),
        )

        response = llm.generate_text(prompt, GENERATION_OPTIONS, cancel_event)
        payload = parse_shopping_list(response.first_content())

        items = ShoppingListService.build_items(payload)
        estimated, actual = calculate_list_totals(items)
        shopping_list = ShoppingList(
            user_id=user_id,
            pantry_id=request.pantry_id,
            name=request.name.strip(),
            status=ShoppingListStatus.PENDING.value,
            total_budget=budget,
            estimated_cost=estimated if estimated > 0 else payload.estimated_total,
            actual_cost=actual,
            generated_by="ai",
            household_size=preferences.household_size,
            monthly_income=preferences.monthly_income,
            dietary_restrictions=preferences.dietary_restrictions,
            items=items,
        )
        created = ShoppingListRepository(db).create_with_items(shopping_list)

        CreditService.consume_credit(db, user_id, SHOPPING_LIST_DESCRIPTION)
        logger.info(
            "Generated AI shopping list %s with %d items for user %s",
            created.id,
            len(items),
            user_id,
        )
        return created

    @staticmethod
    def list_shopping_lists(
        db: Session, user_id: UUID, limit: int = 20, offset: int = 0
    ) -> List[ShoppingList]:
        limit = 20 if limit <= 0 else min(limit, 100)
        return ShoppingListRepository(db).list_by_user(user_id, limit, max(offset, 0))

    @staticmethod
    def get_shopping_list(db: Session, list_id: UUID, user_id: UUID) -> ShoppingList:
        shopping_list = ShoppingListRepository(db).get_by_id_for_user(list_id, user_id)
        if shopping_list is None:
            raise ShoppingListNotFoundError()
        return shopping_list
