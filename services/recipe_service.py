"""
Recipe service: metered recipe generation plus the saved-recipe book.

Generation flow for one call:
validate -> authorize pantry and read ingredients -> build prompts ->
dispatch through the LLM registry -> parse/repair -> enrich -> persist ->
debit one credit.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.exceptions import (
    InvalidRequestError,
    NoIngredientsError,
    RecipeNotFoundError,
)
from domain.enums import Difficulty, MealType
from domain.mappers import RecipeMapper
from domain.models import Recipe
from domain.schemas.llm_schemas import GenerationOptions
from domain.schemas.recipe_schemas import (
    AvailableIngredient,
    GeneratedRecipe,
    RecipeBody,
    RecipeRequest,
    SaveRecipeRequest,
)
from repositories import RecipeRepository
from services.credit_service import CreditService
from services.llm_service import LLMService
from services.pantry_service import PantryService
from services.prompt_builder import PromptBuilder, template_registry
from services.response_parser import parse_recipe

logger = logging.getLogger("pantrymind.recipes")

RECIPE_GENERATION_DESCRIPTION = "AI request - recipe generation"
DEFAULT_RECIPE_COUNT = 3
MAX_RECIPE_COUNT = 5

GENERATION_OPTIONS = GenerationOptions(
    max_tokens=2000, temperature=0.7, top_p=0.9, response_format="json"
)

_MEAL_TYPES = {m.value for m in MealType}
_DIFFICULTIES = {d.value for d in Difficulty}


def _clean_strings(values: List[str]) -> List[str]:
    return [v.strip() for v in values if v and v.strip()]


class RecipeService:
    """Business logic for recipe generation and saved recipes."""

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    @staticmethod
    def validate_request(request: RecipeRequest) -> UUID:
        """
        Check ranges and enums, returning the parsed pantry id.

        Raises:
            InvalidRequestError: on the first violation found
        """
        if not request.pantry_id.strip():
            raise InvalidRequestError("pantry_id is required")
        try:
            pantry_id = UUID(request.pantry_id.strip())
        except ValueError:
            raise InvalidRequestError("pantry_id must be a valid UUID")

        if request.cooking_time != 0 and not 5 <= request.cooking_time <= 480:
            raise InvalidRequestError("cooking_time must be between 5 and 480 minutes")
        if not 0 <= request.serving_size <= 20:
            raise InvalidRequestError("serving_size must be between 1 and 20")

        meal_type = request.meal_type.strip().lower()
        if meal_type and meal_type not in _MEAL_TYPES:
            raise InvalidRequestError(
                "meal_type is invalid", details={"allowed": sorted(_MEAL_TYPES)}
            )
        difficulty = request.difficulty.strip().lower()
        if difficulty and difficulty not in _DIFFICULTIES:
            raise InvalidRequestError(
                "difficulty is invalid", details={"allowed": sorted(_DIFFICULTIES)}
            )
        return pantry_id

    @staticmethod
    def build_prompt_variables(
        request: RecipeRequest, ingredients: List[AvailableIngredient]
    ) -> Dict[str, str]:
        variables = {
            "available_ingredients": ", ".join(
                f"{i.name} ({i.quantity:.1f} {i.unit})" for i in ingredients
            ),
            "cooking_time": (
                str(request.cooking_time) if request.cooking_time > 0 else "not specified"
            ),
            "meal_type": request.meal_type.strip().lower() or "any",
            "difficulty": request.difficulty.strip().lower() or "any",
            "serving_size": (
                str(request.serving_size) if request.serving_size > 0 else "4"
            ),
        }
        if request.cuisine.strip():
            variables["cuisine"] = request.cuisine.strip()
        restrictions = _clean_strings(request.dietary_restrictions)
        if restrictions:
            variables["dietary_restrictions"] = ", ".join(restrictions)
        if request.purpose.strip():
            variables["purpose"] = request.purpose.strip()
        if request.additional_notes.strip():
            variables["additional_notes"] = request.additional_notes.strip()
        return variables

    @staticmethod
    def mark_ingredient_availability(
        recipe: RecipeBody, ingredients: List[AvailableIngredient]
    ) -> None:
        """Flag recipe ingredients whose name matches a pantry item, ignoring case"""
        in_pantry = {i.name.strip().lower() for i in ingredients}
        for ingredient in recipe.ingredients:
            ingredient.available = ingredient.name.strip().lower() in in_pantry

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    @staticmethod
    def _generate_batch(
        db: Session,
        llm: LLMService,
        request: RecipeRequest,
        user_id: UUID,
        count: int,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[GeneratedRecipe]:
        if not 1 <= count <= MAX_RECIPE_COUNT:
            raise InvalidRequestError(
                f"Recipe count must be between 1 and {MAX_RECIPE_COUNT}"
            )
        pantry_id = RecipeService.validate_request(request)

        ingredients = PantryService.get_available_ingredients(db, pantry_id, user_id)
        if not ingredients:
            raise NoIngredientsError()

        template = template_registry.get("recipe_generation")
        variables = RecipeService.build_prompt_variables(request, ingredients)
        builder = PromptBuilder()
        system_prompt = builder.build_system_prompt(template.system_prompt, variables)
        user_prompt = builder.build_user_prompt(template.user_prompt, variables)

        options = GENERATION_OPTIONS.model_copy(update={"provider": request.provider})
        llm_request = llm.create_chat_request(system_prompt, user_prompt, options)

        recipes = []
        for index in range(count):
            response = llm.process_request(llm_request, cancel_event)
            body = parse_recipe(response.first_content())
            recipe = GeneratedRecipe(
                **body.model_dump(),
                id=uuid.uuid4(),
                generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            )
            RecipeService.mark_ingredient_availability(recipe, ingredients)
            recipes.append(recipe)
            logger.debug("Recipe %d/%d generated for user %s", index + 1, count, user_id)
        return recipes

    @staticmethod
    def generate_multiple_recipes(
        db: Session,
        llm: LLMService,
        request: RecipeRequest,
        user_id: UUID,
        count: int = DEFAULT_RECIPE_COUNT,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[GeneratedRecipe]:
        """
        Generate ``count`` recipes with sequential LLM calls and charge one credit.

        Any reply that cannot be parsed fails the whole batch before anything
        is stored. The batch is persisted atomically, then the debit runs.
        If the debit finds no credits the saved recipes stay in place and
        InsufficientCreditsError propagates.

        Raises:
            InvalidRequestError: request violates a range or enum rule
            ForbiddenError: caller is not a member of the pantry
            PantryNotFoundError: pantry does not exist
            NoIngredientsError: pantry has nothing in stock
            InvalidLLMResponseError: a reply held no decodable recipe
            LLMRequestFailedError: vendor failed after retries
            InsufficientCreditsError: debit after generation failed
        """
        recipes = RecipeService._generate_batch(
            db, llm, request, user_id, count, cancel_event
        )
        RecipeRepository(db).create_many(
            [RecipeMapper.to_model(r, user_id, recipe_id=r.id) for r in recipes]
        )
        CreditService.consume_credit(db, user_id, RECIPE_GENERATION_DESCRIPTION)
        logger.info("Generated %d recipes for user %s", len(recipes), user_id)
        return recipes

    @staticmethod
    def generate_recipe(
        db: Session,
        llm: LLMService,
        request: RecipeRequest,
        user_id: UUID,
        cancel_event: Optional[threading.Event] = None,
    ) -> GeneratedRecipe:
        return RecipeService.generate_multiple_recipes(
            db, llm, request, user_id, count=1, cancel_event=cancel_event
        )[0]

    # ------------------------------------------------------------------
    # Saved recipes
    # ------------------------------------------------------------------

    @staticmethod
    def save_recipes(
        db: Session, user_id: UUID, bodies: List[SaveRecipeRequest]
    ) -> List[Recipe]:
        """Store one or more recipes for the user in a single transaction"""
        if not bodies:
            raise InvalidRequestError("At least one recipe is required")
        return RecipeRepository(db).create_many(
            [RecipeMapper.to_model(body, user_id) for body in bodies]
        )

    @staticmethod
    def list_recipes(db: Session, user_id: UUID) -> List[Recipe]:
        return RecipeRepository(db).find_by_user(user_id)

    @staticmethod
    def get_recipe(db: Session, recipe_id: UUID, user_id: UUID) -> Recipe:
        recipe = RecipeRepository(db).find_by_id(recipe_id, user_id)
        if recipe is None:
            raise RecipeNotFoundError()
        return recipe

    @staticmethod
    def delete_recipe(db: Session, recipe_id: UUID, user_id: UUID) -> None:
        RecipeService.get_recipe(db, recipe_id, user_id)
        RecipeRepository(db).delete(recipe_id)
        logger.info("User %s deleted recipe %s", user_id, recipe_id)
