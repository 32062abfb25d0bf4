"""
Shopping list domain mappers.
Handles transformation between ORM models and DTOs for shopping-related entities.
"""

from domain.models import ShoppingList
from domain.mappers.credit_mapper import to_rfc3339
from domain.schemas.shopping_list_schemas import (
    ShoppingListResponse,
    ShoppingListItemResponse,
    ShoppingListSummary,
)


class ShoppingMapper:
    """Mapper for shopping list transformations."""

    @staticmethod
    def to_response(shopping_list: ShoppingList) -> ShoppingListResponse:
        """
        Convert ORM ShoppingList to ShoppingListResponse DTO.

        Args:
            shopping_list: ShoppingList ORM instance with items loaded

        Returns:
            ShoppingListResponse DTO with all list data
        """
        items = [
            ShoppingListItemResponse.model_validate(item)
            for item in shopping_list.items
        ]

        return ShoppingListResponse(
            id=shopping_list.id,
            user_id=shopping_list.user_id,
            pantry_id=shopping_list.pantry_id,
            name=shopping_list.name,
            status=shopping_list.status,
            total_budget=shopping_list.total_budget,
            estimated_cost=shopping_list.estimated_cost,
            actual_cost=shopping_list.actual_cost,
            generated_by=shopping_list.generated_by,
            household_size=shopping_list.household_size,
            monthly_income=shopping_list.monthly_income,
            dietary_restrictions=shopping_list.dietary_restrictions or [],
            items=items,
            created_at=to_rfc3339(shopping_list.created_at),
            updated_at=to_rfc3339(shopping_list.updated_at),
        )

    @staticmethod
    def to_summary(shopping_list: ShoppingList) -> ShoppingListSummary:
        return ShoppingListSummary(
            id=shopping_list.id,
            name=shopping_list.name,
            status=shopping_list.status,
            pantry_id=shopping_list.pantry_id,
            total_budget=shopping_list.total_budget,
            estimated_cost=shopping_list.estimated_cost,
            generated_by=shopping_list.generated_by,
            item_count=len(shopping_list.items),
            created_at=to_rfc3339(shopping_list.created_at),
        )
