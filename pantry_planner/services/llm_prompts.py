"""LLM prompt templates for recipes, meal plans and product vision."""

from collections.abc import Iterable
from datetime import date

from pantry_planner.schemas.planner import MEAL_TYPE_LABELS
from pantry_planner.schemas.recipe import RecipeFilters

CHEF_SYSTEM_PROMPT = """You are an expert chef and nutritionist helping a household \
cook with what they already have at home.

Write recipe names, descriptions, ingredient names and steps in Spanish. When an ingredient is in \
the pantry list, use exactly the same name as the pantry list so it can be matched.
Use only these units for ingredient quantities: g, kg, ml, L, unidades, paquetes, latas, botellas.

Respond ONLY with valid JSON, with no additional text and no markdown code blocks."""

RECIPE_JSON_SCHEMA = """{
  "id": "unique string",
  "name": "recipe name",
  "description": "short description",
  "ingredients": [{"name": "ingredient", "quantity": number, "unit": "unit"}],
  "steps": ["step 1", "step 2"],
  "prep_time": minutes,
  "cook_time": minutes,
  "difficulty": "easy" | "medium" | "hard",
  "servings": number,
  "cuisine": "cuisine type",
  "dietary_tags": [],
  "nutrition": {
    "calories": kcal per serving,
    "protein": grams,
    "carbs": {"total": grams, "fiber": grams, "sugar": grams},
    "fat": {"total": grams, "saturated": grams, "unsaturated": grams},
    "sodium": milligrams
  }
}"""


def format_pantry_list(items: Iterable) -> str:
    """Render pantry items as a bullet list: '- Leche: 2 L'."""
    return "\n".join(f"- {item.name}: {item.quantity:g} {item.unit}" for item in items)


def format_dietary_profile(profile) -> str:
    """Render a dietary profile as prompt restrictions, or an empty string."""
    if profile is None:
        return ""

    lines = []
    if profile.diet_type:
        lines.append(f"- Diet: {profile.diet_type}")
    if profile.allergies:
        lines.append(f"- Allergies (never include): {', '.join(profile.allergies)}")
    if profile.avoid_ingredients:
        lines.append(f"- Avoid these ingredients: {', '.join(profile.avoid_ingredients)}")

    if not lines:
        return ""
    return "DIETARY PROFILE:\n" + "\n".join(lines) + "\n"


def format_filters(filters: RecipeFilters | None) -> str:
    if filters is None:
        return ""

    lines = []
    if filters.max_prep_time:
        lines.append(f"- Maximum preparation time: {filters.max_prep_time} minutes")
    if filters.difficulty:
        lines.append(f"- Difficulty: {filters.difficulty}")
    if filters.cuisine:
        lines.append(f"- Cuisine: {filters.cuisine}")
    if filters.dietary_tags:
        lines.append(f"- Dietary restrictions: {', '.join(filters.dietary_tags)}")

    if not lines:
        return ""
    return "FILTERS:\n" + "\n".join(lines) + "\n"


def get_recipe_generation_prompt(
    pantry_list: str,
    max_missing_percentage: int,
    count: int = 3,
    filters: RecipeFilters | None = None,
    profile=None,
) -> str:
    """Generate prompt for recipe suggestions from pantry contents."""
    return f"""Generate {count} recipes based on the available ingredients.

AVAILABLE INGREDIENTS:
{pantry_list}

RULES:
1. At least {100 - max_missing_percentage}% of each recipe's ingredients must be available
2. At most {max_missing_percentage}% of the ingredients may be missing (to be bought)
3. Prefer recipes that use as many available ingredients as possible
4. Take the available quantities into account
5. Include estimated nutrition information PER SERVING

{format_filters(filters)}{format_dietary_profile(profile)}
Respond with JSON in this structure:
{{
  "recipes": [
    {RECIPE_JSON_SCHEMA}
  ]
}}"""


def get_meal_plan_prompt(
    pantry_list: str,
    dates: list[date],
    meal_types: list[str],
    servings: int,
    profile=None,
) -> str:
    """Generate prompt for one meal plan request covering the given dates."""
    meal_labels = ", ".join(MEAL_TYPE_LABELS[meal_type] for meal_type in meal_types)
    date_list = ", ".join(day.isoformat() for day in dates)
    valid_types = ", ".join(f'"{meal_type}"' for meal_type in meal_types)

    return f"""Generate a complete meal plan.

AVAILABLE INGREDIENTS:
{pantry_list}

CONFIGURATION:
- Period: {dates[0].isoformat()} to {dates[-1].isoformat()} ({len(dates)} days)
- Meals per day: {meal_labels}
- Servings per meal: {servings}
- Exact dates: {date_list}

RULES:
1. Generate exactly one recipe per meal type per day
2. Prefer available ingredients: at least 80% of each recipe's ingredients must be available
3. Vary the recipes: do not repeat a dish within the period
4. Scale quantities to the number of servings
5. Produce one consolidated shopping list with the missing ingredients and total quantities needed
6. Include estimated nutrition information per serving for each recipe

{format_dietary_profile(profile)}
Respond with JSON in this exact structure:
{{
  "meals": [
    {{
      "date": "YYYY-MM-DD",
      "meal_type": "{meal_types[0]}",
      "recipe": {RECIPE_JSON_SCHEMA}
    }}
  ],
  "shopping_list": [
    {{
      "name": "ingredient",
      "quantity": total quantity needed,
      "unit": "unit",
      "available": quantity available in the pantry,
      "to_buy": quantity to buy
    }}
  ]
}}

Valid values for meal_type are: {valid_types}
Dates must be exactly the ones listed above."""


PRODUCT_IDENTIFICATION_PROMPT = """Analyze this image of a food product and return JSON:

{
  "name": "product name in Spanish",
  "brand": "brand if visible, otherwise null",
  "category": one of "frutas", "verduras", "lacteos", "carnes", "mariscos", "granos", \
"enlatados", "condimentos", "bebidas", "snacks", "panaderia", "congelados", "huevos", \
"aceites", "otros",
  "suggested_quantity": suggested quantity as a number,
  "suggested_unit": "one of unidades, kg, g, L, ml, paquetes, latas, botellas",
  "confidence": number from 0 to 1
}

If you cannot identify the product or it is not food, respond with:
{
  "name": null,
  "suggested_quantity": null,
  "suggested_unit": null,
  "confidence": 0,
  "error": "description of the problem"
}

Respond ONLY with the JSON, no additional text."""


RECEIPT_SCAN_PROMPT = """Analyze this supermarket receipt and extract all purchased food items.

For each item provide:
1. The name, cleaned up and in Spanish (e.g. "LECHE ENT 1L" -> "Leche")
2. The purchased quantity as a number
3. The unit: one of unidades, kg, g, L, ml, paquetes, latas, botellas

Do not include tax lines, totals, store information, payment information, discounts or coupons.

Respond ONLY with a JSON object like:
{"items": [{"name": "Leche", "quantity": 2, "unit": "L"}, {"name": "Arroz", "quantity": 1, \
"unit": "kg"}]}"""
