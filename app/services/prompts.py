"""
Prompt templates for the Gemini calls.

Import prompts ask for a single recipe object, generation prompts for a
list of recipes, the chef prompt for an answer plus optional ingredient
swap, and the fridge prompt for a flat ingredient list. Every prompt asks
for raw JSON; replies are still cleaned of code fences before parsing.
"""
import json
from typing import Any, Dict, List, Optional, Union

from app.domain.models import MediaAsset

RECIPE_JSON_SHAPE = """{
   "title": "String", "description": "String",
   "time": "String", "calories": "String", "macros": {"protein": "", "carbs": "", "fat": ""},
   "ingredients": [{"name": "", "amount": ""}],
   "instructions": ["Step 1"], "equipment": []
}"""

MOOD_GUIDE = """- Comfort: Hearty, warm, nostalgic.
- Date Night: Impressive, romantic, plating-focused.
- Quick & Easy: Minimal prep, fast cooking.
- Energetic: Light, fresh, high protein/healthy fats.
- Adventurous: Bold flavors, unique ingredients or combinations.
- Fancy: Gourmet techniques, elegant presentation."""

SURPRISE_MARKERS = ("surprise", "sorpre", "surpre")
SAVORY_MEAL_TYPES = ("lunch", "dinner", "main meal")


def build_import_prompt(
    source_url: str,
    title: Optional[str] = None,
    caption: Optional[str] = None
) -> str:
    """Instruction block for extracting one recipe from a shared link"""
    lines = [
        "You are a professional chef. Analyze content to extract a recipe.",
        f"Source URL: {source_url}",
    ]
    if title:
        lines.append(f'Title: "{title}"')
    if caption:
        lines.append(f'Caption: "{caption}"')

    lines.extend([
        "PRIORITY: Caption Text > Audio.",
        "Return only a syntactically valid JSON object, without markdown code fences.",
        "If no recipe can be identified, still return the JSON object with every field present and empty.",
        "Structure:",
        RECIPE_JSON_SHAPE,
    ])
    return "\n".join(lines)


def build_import_parts(prompt: str, media: Optional[MediaAsset] = None) -> List[Union[str, Dict[str, Any]]]:
    """Content parts for the model: the prompt, then the media inline when present"""
    parts: List[Union[str, Dict[str, Any]]] = [prompt]
    if media is not None:
        parts.append({"mime_type": media.mime_type, "data": media.data})
    return parts


def normalize_meal_type(meal_type: str) -> str:
    cleaned = meal_type.strip()
    # Common typo from the app's free-text field
    if cleaned.lower() == "launch":
        return "Lunch"
    return cleaned


def build_generation_prompt(
    mode: str,
    pantry_items: List[str],
    search_query: Optional[str] = None,
    meal_type: Optional[str] = None,
    filters: Optional[List[str]] = None,
    allergies: Optional[str] = None,
    mood: Optional[str] = None
) -> str:
    """
    Prompt for generating three recipes.

    Args:
        mode: "discover" (from a search query) or "pantry_chef" (from pantry items)
        pantry_items: Names of items in the caller's pantry
        search_query: Free-text request (discover mode)
        meal_type: Target meal type; "Surprise me" variants give the model free choice
        filters: Style/dietary filters
        allergies: Exclusions that must be respected
        mood: One of the moods in MOOD_GUIDE
    """
    prompt = "You are a world-class chef. Create 3 unique recipes."

    if mode == "discover":
        prompt += f'\n\nUser Request: "{search_query}"'
        prompt += "\nCreate these recipes based on the user's request. Compare required ingredients against the user's pantry list below."
    elif not pantry_items:
        prompt += "\n\nThe user's pantry is empty. Suggest 3 simple, accessible recipes fitting the Meal Type and Filters provided."
    else:
        prompt += """

Create recipes that use the ingredients from the user's pantry list below.
CRITICAL CULINARY LOGIC:
1. **SELECT A THEME FIRST**: Decide if the recipe is SAVORY or SWEET.
2. **STRICT EXCLUSION**:
   - If SAVORY (e.g., Meat, Chicken, Pasta), YOU MUST IGNORE all sweet ingredients (Chocolate, Biscuits, Vanilla) unless used in a trivial authentic way (e.g. pinch of sugar in sauce).
   - If SWEET (e.g., Dessert), YOU MUST IGNORE all savory ingredients (Meat, Garlic, Onions).
3. **DO NOT MIX** incompatible logical groups just to use more items. A simple Chicken Breast recipe is better than "Chicken with Chocolate Glaze"."""

    if meal_type:
        clean_meal_type = normalize_meal_type(meal_type)
        lower_type = clean_meal_type.lower()

        if any(marker in lower_type for marker in SURPRISE_MARKERS):
            prompt += "\nTarget Meal Type: CHEF'S CHOICE (Surprise the user)."
            prompt += "\nCRITICAL: Create 3 distinct, high-quality recipes (e.g. One Breakfast, One Main Course, One Dessert OR 3 Unique Dinner ideas)."
            prompt += "\nIMPORTANT: Ensure the recipes are COHESIVE and TASTY. Do NOT generate weird combinations just to be unique (e.g. avoid 'Chicken with Chocolate' unless it's a known authentic dish like Mole)."
        else:
            prompt += f"\nTarget Meal Type: {clean_meal_type}"
            if lower_type in SAVORY_MEAL_TYPES:
                prompt += f"\nCRITICAL: User specifically requested {clean_meal_type}. DO NOT PROVIDE DESSERTS, smoothies, or sweet snacks. Provide savory main courses only."
            elif lower_type == "dessert":
                prompt += "\nCRITICAL: User specifically requested Dessert. DO NOT PROVIDE SAVORY DISHES."

    if filters:
        prompt += f"\nStyle/Dietary Filters: {', '.join(filters)}"
    if allergies:
        prompt += f"\nSTRICT ALLERGIES/EXCLUSIONS: {allergies}"
    if mood:
        prompt += f'\n\nUSER MOOD: {mood}.\nThe user is in a "{mood}" mood. Ensure the recipes align with this vibe.\n{MOOD_GUIDE}'

    prompt += f"\n\nUser's Pantry List: [{', '.join(pantry_items)}]"
    prompt += """

CRITICAL OUTPUT RULES:
1. **STRICT RECIPES ONLY:** If the user's request is NOT related to cooking, food, or recipes (e.g., "write an essay", "math homework", "code"), you must REFUSE to generate the requested content. Instead, return a single recipe titled "Chef's Limitation" with the description "I am a Chef AI. I can only help you cook! Please ask me for a recipe." and empty ingredients/instructions.
2. Return strictly valid JSON.
3. For every ingredient, check if it exists (or is a close match) in the Pantry List. Set "is_missing" to true if NOT in pantry.
4. Include detailed step-by-step instructions.
5. List required kitchen equipment.
6. Provide a macro breakdown (protein, carbs, fat).
7. For every recipe, provide a "image_prompt" field. This should be a highly detailed, professional food photography prompt for an AI image generator.

JSON Structure:
{
  "recipes": [
    {
      "title": "Recipe Name",
      "description": "Brief description",
      "time": "15 mins",
      "calories": "350 kcal",
      "macros": { "protein": "25g", "carbs": "10g", "fat": "15g" },
      "image_prompt": "Detailed AI image prompt",
      "ingredients": [
        { "name": "Ingredient Name", "amount": "quantity", "is_missing": true }
      ],
      "instructions": ["Step 1...", "Step 2..."],
      "equipment": ["Oven", "Bowl", "Whisk"]
    }
  ]
}
Do not add markdown."""
    return prompt


def describe_recipe_context(recipe_context: Union[str, Dict[str, Any], None]) -> str:
    """Flatten the recipe the user is asking about into prompt text"""
    if not recipe_context:
        return "General Cooking"
    if isinstance(recipe_context, str):
        return recipe_context

    context = f"Title: {recipe_context.get('title') or 'Untitled'}\n"
    if recipe_context.get("ingredients"):
        context += f"Ingredients: {json.dumps(recipe_context['ingredients'])}\n"
    if recipe_context.get("instructions"):
        context += f"Instructions: {json.dumps(recipe_context['instructions'])}\n"
    return context


def build_consult_prompt(user_question: str, recipe_context: Union[str, Dict[str, Any], None]) -> str:
    """Prompt for the substitution/technique assistant"""
    return f"""You are a helpful culinary assistant.
Context Recipe: {describe_recipe_context(recipe_context)}

User Question: "{user_question}"

OUTPUT FORMAT:
Return a strictly valid JSON object with the following structure:
{{
  "answer": "Your concise, helpful answer (max 2-3 sentences). Focus on substitutions, techniques, or equipment. CRITICAL: If a substitution requires adjusting other ingredients (e.g. 'add more liquid' when using coconut flour), explain why in this answer.",
  "modification": {{
     "type": "replace or remove",
     "target_ingredient": "exact name of ingredient to change",
     "replacement_ingredient": {{
         "name": "new ingredient name (Title Case)",
         "amount": "adjusted amount (e.g. '3/4 cup')"
     }}
  }}
}}

- "modification" block is OPTIONAL. Include it ONLY if the user request implies a change (swap, remove, etc.).
- If no modification, set "modification" to null.

Do not include markdown code blocks. Just the raw JSON."""


FRIDGE_SCAN_PROMPT = """Identify all food ingredients in this image.
Return a strictly valid JSON list of strings under the key "ingredients".
Be specific (e.g. 'Red Onion', 'Baby Spinach', 'Almond Milk').
Do not include non-food items.

JSON Example:
{
  "ingredients": ["Tomato", "Mozzarella", "Basil"]
}
Do not add markdown formatting."""
