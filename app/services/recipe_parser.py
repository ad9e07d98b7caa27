"""
Parser for model replies.

Model output is untrusted: it may be wrapped in Markdown fences, may not be
JSON at all, and fields may be missing or of the wrong type. Parsing never
raises; unusable input produces an empty draft that classifies as "empty".
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional, Type

from app.domain.models import (
    GeneratedIngredient,
    GeneratedRecipe,
    GeneratedRecipes,
    Macros,
    PageMetadata,
    ParsedRecipe,
    RecipeDraft,
    RecipeIngredient,
)

logger = logging.getLogger(__name__)

# ```json / ```JSON / ``` with or without a language tag
CODE_FENCE_PATTERN = re.compile(r"```[a-zA-Z]*")

MIN_INGREDIENTS_FOR_FOUND = 2
MIN_INSTRUCTIONS_FOR_FOUND = 1


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences the model sometimes adds despite instructions"""
    return CODE_FENCE_PATTERN.sub("", text or "").strip()


def load_json(text: str) -> Optional[Any]:
    """Parse fenced or bare JSON; None if it cannot be parsed"""
    try:
        return json.loads(strip_code_fences(text))
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(f"Model reply is not valid JSON: {e}")
        return None


def _coerce_str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None


def _coerce_str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if isinstance(item, dict):
            # {"step": 1, "text": "..."} style steps
            item = item.get("text") or item.get("description") or item.get("step")
        text = _coerce_str(item)
        if text:
            items.append(text)
    return items


def _coerce_macros(value: Any) -> Optional[Macros]:
    if not isinstance(value, dict):
        return None
    return Macros(
        protein=_coerce_str(value.get("protein")),
        carbs=_coerce_str(value.get("carbs")),
        fat=_coerce_str(value.get("fat")),
    )


def _coerce_ingredients(value: Any, ingredient_cls: Type[RecipeIngredient] = RecipeIngredient) -> List[RecipeIngredient]:
    if not isinstance(value, list):
        return []

    ingredients = []
    for item in value:
        if isinstance(item, str):
            name = _coerce_str(item)
            if name:
                ingredients.append(ingredient_cls(name=name))
            continue

        if not isinstance(item, dict):
            continue

        name = _coerce_str(item.get("name"))
        if not name:
            continue

        fields: Dict[str, Any] = {"name": name, "amount": _coerce_str(item.get("amount")) or ""}
        if issubclass(ingredient_cls, GeneratedIngredient) and isinstance(item.get("is_missing"), bool):
            fields["is_missing"] = item["is_missing"]
        ingredients.append(ingredient_cls(**fields))

    return ingredients


def coerce_draft(data: Dict[str, Any]) -> RecipeDraft:
    """Build a draft from a loosely shaped dict, dropping whatever does not fit"""
    return RecipeDraft(
        title=_coerce_str(data.get("title")),
        description=_coerce_str(data.get("description")),
        time=_coerce_str(data.get("time")),
        calories=_coerce_str(data.get("calories")),
        macros=_coerce_macros(data.get("macros")),
        ingredients=_coerce_ingredients(data.get("ingredients")),
        instructions=_coerce_str_list(data.get("instructions")),
        equipment=_coerce_str_list(data.get("equipment")),
        thumbnail=_coerce_str(data.get("thumbnail")),
    )


def is_complete(draft: RecipeDraft) -> bool:
    """A draft counts as found with more than one ingredient and at least one step"""
    return (
        len(draft.ingredients) >= MIN_INGREDIENTS_FOR_FOUND
        and len(draft.instructions) >= MIN_INSTRUCTIONS_FOR_FOUND
    )


def parse_recipe_reply(text: str, metadata: Optional[PageMetadata] = None) -> ParsedRecipe:
    """
    Parse and classify a model reply for a single recipe.

    Args:
        text: Raw model text
        metadata: Scraped metadata used to back-fill title/thumbnail on found drafts

    Returns:
        ParsedRecipe; is_found is False for malformed or incomplete replies
    """
    data = load_json(text)
    if not isinstance(data, dict):
        return ParsedRecipe()

    draft = coerce_draft(data)
    found = is_complete(draft)

    if found and metadata is not None:
        # Model values win; scraped values only fill gaps
        if not draft.thumbnail and metadata.thumbnail_url:
            draft.thumbnail = metadata.thumbnail_url
        if not draft.title and metadata.title:
            draft.title = metadata.title

    return ParsedRecipe(draft=draft, is_found=found)


def parse_generated_recipes(text: str) -> GeneratedRecipes:
    """Parse a generation reply ({"recipes": [...]}); malformed replies yield no recipes"""
    data = load_json(text)
    if not isinstance(data, dict) or not isinstance(data.get("recipes"), list):
        return GeneratedRecipes()

    recipes = []
    for item in data["recipes"]:
        if not isinstance(item, dict):
            continue
        draft = coerce_draft(item)
        recipes.append(GeneratedRecipe(
            **draft.model_dump(exclude={"ingredients"}),
            ingredients=_coerce_ingredients(item.get("ingredients"), GeneratedIngredient),
            image_prompt=_coerce_str(item.get("image_prompt")),
        ))

    return GeneratedRecipes(recipes=recipes)
