"""
Prompt templating for the AI pipeline.

Templates use ``{{name}}`` variables and line-scoped optional sections
``{{#name}}...{{/name}}``. A line holding an optional section is dropped
entirely when its variable is missing or empty.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from app.exceptions import InvalidRequestError
from domain.enums import MessageRole
from domain.schemas.llm_schemas import Message

VARIABLE_PATTERN = re.compile(r"\{\{(\w+)\}\}")
SECTION_OPEN_PATTERN = re.compile(r"\{\{#(\w+)\}\}")

# Omitted values for these render as an empty string instead of failing.
OPTIONAL_VARIABLES = frozenset(
    {"dietary_restrictions", "purpose", "additional_notes", "cuisine"}
)


class PromptBuilder:
    """Expands templates and assembles chat messages."""

    def __init__(self, optional_variables: Iterable[str] = OPTIONAL_VARIABLES):
        self.optional_variables = frozenset(optional_variables)

    def build_system_prompt(self, template: str, variables: Mapping[str, str]) -> str:
        return self.render(template, variables)

    def build_user_prompt(self, template: str, variables: Mapping[str, str]) -> str:
        return self.render(template, variables)

    def render(self, template: str, variables: Mapping[str, str]) -> str:
        """
        Substitute variables into ``template``.

        Raises:
            InvalidRequestError: a required variable has no value; every
                missing name is listed in the error details
        """
        text = self._remove_empty_sections(template, variables)
        missing: List[str] = []

        def _replace(match: re.Match) -> str:
            name = match.group(1)
            value = variables.get(name)
            if value:
                return str(value)
            if name in self.optional_variables:
                return ""
            if name not in missing:
                missing.append(name)
            return match.group(0)

        result = VARIABLE_PATTERN.sub(_replace, text)
        if missing:
            raise InvalidRequestError(
                f"Missing required prompt variables: {', '.join(missing)}",
                details={"missing": missing},
            )
        return result

    @staticmethod
    def _remove_empty_sections(template: str, variables: Mapping[str, str]) -> str:
        lines = []
        for line in template.split("\n"):
            match = SECTION_OPEN_PATTERN.search(line)
            if match:
                name = match.group(1)
                if not variables.get(name):
                    continue
                line = line.replace("{{#" + name + "}}", "", 1)
                line = line.replace("{{/" + name + "}}", "", 1)
            lines.append(line)
        return "\n".join(lines)

    @staticmethod
    def build_messages(system_prompt: str, user_prompt: str) -> List[Message]:
        messages = []
        if system_prompt:
            messages.append(Message(role=MessageRole.SYSTEM, content=system_prompt))
        if user_prompt:
            messages.append(Message(role=MessageRole.USER, content=user_prompt))
        return messages

    @staticmethod
    def add_context(prompt: str, context: Optional[Mapping[str, str]]) -> str:
        """Prefix ``prompt`` with an ``Additional context:`` block (keys sorted, empty values skipped)"""
        if not context:
            return prompt
        lines = ["Additional context:"]
        for key in sorted(context):
            value = context[key]
            if value:
                lines.append(f"- {key}: {value}")
        return "\n".join(lines) + "\n\n" + prompt

    @staticmethod
    def template_variables(template: str) -> List[str]:
        seen: List[str] = []
        for name in VARIABLE_PATTERN.findall(template):
            if name not in seen:
                seen.append(name)
        return seen

    @staticmethod
    def validate_template(template: str, required: Iterable[str]) -> None:
        """Raise InvalidRequestError if any required variable never appears"""
        present = set(VARIABLE_PATTERN.findall(template))
        for name in required:
            if name not in present:
                raise InvalidRequestError(
                    f"Required variable '{name}' not found in template"
                )


# ============================================================================
# Static templates
# ============================================================================

RECIPE_SYSTEM_PROMPT = """You are an experienced chef specialized in home cooking. Your job is to create tasty, practical and personalized recipes based on the ingredients available in the user's pantry.

GUIDELINES:
1. Always prioritize ingredients the user ALREADY HAS in the pantry
2. If extra ingredients are needed, suggest only basic and common items
3. Fit the recipe to the requested cooking time
4. Respect the dietary restrictions provided
5. Give clear and detailed instructions
6. Include useful tips when appropriate

JSON FORMATTING RULES:
- ALWAYS use decimal numbers for amounts (0.5 for half, 1.0 for one)
- NEVER use fractions such as 1/2, 1/4 or 2/3; convert them to decimals
- For "to taste" amounts, use null in the amount field
- Make sure the JSON is valid

RESPONSE FORMAT:
Always answer with valid JSON using this structure:
{
  "title": "Recipe name",
  "description": "Short description",
  "ingredients": [
    {
      "name": "Ingredient name",
      "amount": decimal_amount,
      "unit": "unit of measure",
      "available": true/false,
      "alternative": "alternative ingredient if not available"
    }
  ],
  "instructions": [
    {
      "step": step_number,
      "description": "Detailed step description",
      "time": minutes,
      "temperature": "temperature if applicable"
    }
  ],
  "cooking_time": total_minutes,
  "preparation_time": preparation_minutes,
  "total_time": total_minutes,
  "serving_size": servings,
  "difficulty": "easy/medium/hard",
  "meal_type": "breakfast/lunch/dinner/snack/dessert",
  "cuisine": "cuisine type",
  "dietary_restrictions": ["applicable restrictions"],
  "tips": ["useful tips"],
  "nutrition_info": {
    "calories": approximate_calories,
    "protein": protein_grams,
    "carbohydrates": carbohydrate_grams,
    "fat": fat_grams
  }
}"""

RECIPE_USER_PROMPT = """Create a personalized recipe with the following requirements:

INGREDIENTS AVAILABLE IN THE PANTRY:
{{available_ingredients}}

PREFERENCES:
- Cooking time: {{cooking_time}} minutes
- Meal type: {{meal_type}}
- Difficulty: {{difficulty}}
- Servings: {{serving_size}}
{{#cuisine}}- Cuisine: {{cuisine}}{{/cuisine}}
{{#dietary_restrictions}}- Dietary restrictions: {{dietary_restrictions}}{{/dietary_restrictions}}
{{#purpose}}- Purpose: {{purpose}}{{/purpose}}
{{#additional_notes}}- Notes: {{additional_notes}}{{/additional_notes}}

Create a recipe that makes the most of the pantry ingredients and matches the preferences above. If more ingredients are needed, list only essential and common ones."""

RECIPE_REQUIRED_VARIABLES = (
    "available_ingredients",
    "cooking_time",
    "meal_type",
    "difficulty",
    "serving_size",
)

SHOPPING_LIST_PROMPT = """You are an assistant specialized in building smart, budget-aware grocery shopping lists.

USER CONTEXT:
- Maximum budget: {{budget}}
- Shopping type: {{shopping_type}}
- Include basic items: {{include_basics}}
- People served: {{people_count}}

USER PREFERENCES:
- Household size: {{household_size}} people
- Reported monthly income: {{monthly_income}}
{{#dietary_restrictions}}- Dietary restrictions: {{dietary_restrictions}}{{/dietary_restrictions}}
{{#preferred_budget}}- Profile preferred budget: {{preferred_budget}}{{/preferred_budget}}
{{#shopping_frequency}}- Usual shopping frequency: {{shopping_frequency}}{{/shopping_frequency}}
{{#pantry_items}}- Already in the pantry: {{pantry_items}}{{/pantry_items}}
{{#exclude_items}}- Items to exclude: {{exclude_items}}{{/exclude_items}}
{{#preferred_brands}}- Preferred brands: {{preferred_brands}}{{/preferred_brands}}
{{#notes}}- Special notes: {{notes}}{{/notes}}
{{#custom_prompt}}- Custom instructions: {{custom_prompt}}{{/custom_prompt}}

INSTRUCTIONS:
1. Build a balanced and economical shopping list
2. Use average supermarket prices
3. Prioritize essential, good quality items
4. Keep the household size and the budget in proportion
5. Give a short reason for each item

RESPONSE FORMAT (JSON):
{
  "items": [
    {
      "name": "Product name",
      "quantity": 1.0,
      "unit": "unit/kg/l",
      "estimated_price": 0.00,
      "category": "category",
      "priority": 1,
      "reason": "why it is included"
    }
  ],
  "reasoning": "Overall explanation of the list",
  "estimated_total": 0.00
}

PRIORITIES: 1=essential, 2=important, 3=desirable

Create the list now:"""

SHOPPING_LIST_REQUIRED_VARIABLES = (
    "budget",
    "shopping_type",
    "include_basics",
    "people_count",
    "household_size",
    "monthly_income",
)


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    user_prompt: str
    system_prompt: str = ""
    required_variables: Tuple[str, ...] = field(default_factory=tuple)


RECIPE_TEMPLATE = PromptTemplate(
    name="recipe_generation",
    system_prompt=RECIPE_SYSTEM_PROMPT,
    user_prompt=RECIPE_USER_PROMPT,
    required_variables=RECIPE_REQUIRED_VARIABLES,
)

SHOPPING_LIST_TEMPLATE = PromptTemplate(
    name="shopping_list_generation",
    user_prompt=SHOPPING_LIST_PROMPT,
    required_variables=SHOPPING_LIST_REQUIRED_VARIABLES,
)


class PromptTemplateRegistry:
    """
    Lookup of templates by name. Ships with the built-in templates; another
    store can register replacements without touching the callers.
    """

    def __init__(self, templates: Iterable[PromptTemplate] = (RECIPE_TEMPLATE, SHOPPING_LIST_TEMPLATE)):
        self._templates: Dict[str, PromptTemplate] = {}
        for template in templates:
            self.register(template)

    def register(self, template: PromptTemplate) -> None:
        PromptBuilder.validate_template(
            template.system_prompt + "\n" + template.user_prompt,
            template.required_variables,
        )
        self._templates[template.name] = template

    def get(self, name: str) -> PromptTemplate:
        template = self._templates.get(name)
        if template is None:
            raise InvalidRequestError(f"Unknown prompt template '{name}'")
        return template

    def names(self) -> List[str]:
        return sorted(self._templates)


template_registry = PromptTemplateRegistry()
