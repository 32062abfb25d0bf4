"""
Recipe domain mappers.
Converts between recipe DTOs and the persisted Recipe rows (JSON columns).
"""

from datetime import datetime, timezone
from uuid import UUID

from domain.models import Recipe
from domain.mappers.credit_mapper import to_rfc3339
from domain.schemas.recipe_schemas import RecipeBody, RecipeResponse


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if value:
        try:
            return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now(timezone.utc)


class RecipeMapper:
    """Mapper for recipe transformations."""

    @staticmethod
    def to_model(body: RecipeBody, user_id: UUID, recipe_id: UUID = None) -> Recipe:
        """
        Build an unsaved Recipe row from a recipe document.

        Args:
            body: generated or client-supplied recipe
            user_id: owner of the new row
            recipe_id: identity to keep (generated recipes already carry one)
        """
        recipe = Recipe(
            user_id=user_id,
            title=body.title.strip(),
            description=body.description,
            ingredients=[i.model_dump() for i in body.ingredients],
            instructions=[i.model_dump() for i in body.instructions],
            cooking_time=body.cooking_time,
            preparation_time=body.preparation_time,
            total_time=body.total_time,
            serving_size=body.serving_size,
            difficulty=body.difficulty,
            meal_type=body.meal_type,
            cuisine=body.cuisine,
            dietary_restrictions=list(body.dietary_restrictions),
            nutrition_info=(
                body.nutrition_info.model_dump() if body.nutrition_info else None
            ),
            tips=list(body.tips),
            generated_at=_parse_timestamp(getattr(body, "generated_at", None)),
        )
        if recipe_id is not None:
            recipe.id = recipe_id
        return recipe

    @staticmethod
    def to_response(recipe: Recipe) -> RecipeResponse:
        return RecipeResponse(
            id=recipe.id,
            user_id=recipe.user_id,
            title=recipe.title,
            description=recipe.description or "",
            ingredients=recipe.ingredients or [],
            instructions=recipe.instructions or [],
            cooking_time=recipe.cooking_time,
            preparation_time=recipe.preparation_time,
            total_time=recipe.total_time,
            serving_size=recipe.serving_size,
            difficulty=recipe.difficulty,
            meal_type=recipe.meal_type,
            cuisine=recipe.cuisine,
            dietary_restrictions=recipe.dietary_restrictions or [],
            nutrition_info=recipe.nutrition_info,
            tips=recipe.tips or [],
            generated_at=to_rfc3339(recipe.generated_at),
            created_at=to_rfc3339(recipe.created_at),
            updated_at=to_rfc3339(recipe.updated_at),
        )
