"""
Extraction and repair of JSON documents embedded in LLM replies.

Replies often wrap the JSON object in prose or code fences. The object is
taken as the span from the first ``{`` to the last ``}``. Before decoding, a
fixed set of textual substitutions repairs the malformations models commonly
produce. The LLM is never called again from here.
"""

import json
import logging
from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.exceptions import InvalidLLMResponseError
from domain.schemas.recipe_schemas import RecipeBody
from domain.schemas.shopping_list_schemas import AIShoppingListPayload

logger = logging.getLogger("pantrymind.llm.parser")

T = TypeVar("T", bound=BaseModel)

FRACTION_REPAIRS = (
    ("1/2", "0.5"),
    ("1/3", "0.33"),
    ("2/3", "0.67"),
    ("1/4", "0.25"),
    ("3/4", "0.75"),
    ("1/8", "0.125"),
    ("3/8", "0.375"),
    ("5/8", "0.625"),
    ("7/8", "0.875"),
)

TO_TASTE_AMOUNTS = ("a gosto", "à gosto", "ao gosto", "to taste")


def extract_json_object(text: str) -> str:
    """
    Return the substring from the first ``{`` to the last ``}``.

    Raises:
        InvalidLLMResponseError: the reply holds no braces
    """
    text = (text or "").strip()
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise InvalidLLMResponseError("No JSON object found in LLM response", raw_response=text)
    return text[start : end + 1]


def fix_common_json_issues(json_text: str) -> str:
    """Replace bare fraction amounts with decimals and to-taste amounts with null"""
    for fraction, decimal in FRACTION_REPAIRS:
        json_text = json_text.replace(f'"amount": {fraction}', f'"amount": {decimal}')
    for phrase in TO_TASTE_AMOUNTS:
        json_text = json_text.replace(f'"amount": "{phrase}"', '"amount": null')
    return json_text


def decode_json_object(text: str) -> Dict[str, Any]:
    """
    Locate, repair if needed, and decode the JSON object in ``text``.

    Raises:
        InvalidLLMResponseError: carrying the raw reply when nothing decodes
    """
    candidate = extract_json_object(text)
    repaired = fix_common_json_issues(candidate)
    if repaired != candidate:
        logger.debug("Repaired malformed amounts in LLM JSON")
    try:
        decoded = json.loads(repaired)
    except json.JSONDecodeError as exc:
        raise InvalidLLMResponseError(
            f"Could not decode JSON from LLM response: {exc}", raw_response=text
        ) from exc

    if not isinstance(decoded, dict):
        raise InvalidLLMResponseError("LLM response JSON is not an object", raw_response=text)
    return decoded


def parse_model(text: str, schema: Type[T]) -> T:
    decoded = decode_json_object(text)
    try:
        return schema.model_validate(decoded)
    except ValidationError as exc:
        raise InvalidLLMResponseError(
            f"LLM response does not match the expected {schema.__name__} shape",
            raw_response=text,
            details={"validation_errors": exc.error_count()},
        ) from exc


def parse_recipe(text: str) -> RecipeBody:
    return parse_model(text, RecipeBody)


def parse_shopping_list(text: str) -> AIShoppingListPayload:
    return parse_model(text, AIShoppingListPayload)
