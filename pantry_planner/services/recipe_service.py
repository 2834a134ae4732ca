"""Recipe service for AI generation, availability and cooking."""

import logging
from collections.abc import Sequence

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from pantry_planner.config import get_settings
from pantry_planner.models.dietary_profile import DietaryProfile
from pantry_planner.models.pantry import Pantry, PantryItem
from pantry_planner.models.recipe import CookedRecipe
from pantry_planner.schemas.recipe import (
    CookRequest,
    CookResponse,
    Recipe,
    RecipeGenerateRequest,
)
from pantry_planner.services.availability import Quantified, calculate_availability
from pantry_planner.services.llm import AIResponseError, LLMService
from pantry_planner.services.llm_prompts import (
    CHEF_SYSTEM_PROMPT,
    format_pantry_list,
    get_recipe_generation_prompt,
)
from pantry_planner.services.pantry_service import PantryService

logger = logging.getLogger(__name__)


def apply_availability(recipe: Recipe, pantry_items: Sequence[Quantified]) -> Recipe:
    """Replace the model's availability claims with values computed from stock."""
    result = calculate_availability(recipe.ingredients, pantry_items)
    recipe.missing_items = result.missing_items
    recipe.available_percentage = result.available_percentage
    recipe.unit_conflicts = result.unit_conflicts
    return recipe


def parse_recipes(raw_recipes: object) -> list[Recipe]:
    """Validate recipes from a model response, dropping malformed entries."""
    if not isinstance(raw_recipes, list):
        raise AIResponseError("AI response has no recipe list")

    recipes = []
    for raw in raw_recipes:
        try:
            recipes.append(Recipe.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping malformed recipe from AI: {e.error_count()} errors")
    return recipes


class RecipeService:
    """Service for recipe-related operations."""

    def __init__(self, db: Session, llm_service: LLMService | None = None):
        self.db = db
        self.llm_service = llm_service or LLMService()
        self.settings = get_settings()

    def _pantry_items(self, pantry: Pantry) -> list[PantryItem]:
        return (
            self.db.query(PantryItem)
            .filter(PantryItem.pantry_id == pantry.id)
            .order_by(PantryItem.added_at, PantryItem.id)
            .all()
        )

    def _dietary_profile(self, user_id: int) -> DietaryProfile | None:
        return self.db.query(DietaryProfile).filter(DietaryProfile.user_id == user_id).first()

    async def generate_recipes(
        self,
        pantry: Pantry,
        user_id: int,
        request: RecipeGenerateRequest,
    ) -> list[Recipe]:
        """Ask the model for recipes that mostly use what the pantry holds.

        Availability fields are always recomputed locally, whatever the model
        claimed, and recipes are returned best-covered first.
        """
        pantry_items = self._pantry_items(pantry)
        if not pantry_items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Pantry items are required to generate recipes",
            )

        max_missing = request.max_missing_percentage
        if max_missing is None:
            max_missing = self.settings.max_missing_percentage

        prompt = get_recipe_generation_prompt(
            format_pantry_list(pantry_items),
            max_missing_percentage=max_missing,
            count=request.count,
            filters=request.filters,
            profile=self._dietary_profile(user_id),
        )
        result = await self.llm_service.generate_json(
            prompt=prompt,
            system_prompt=CHEF_SYSTEM_PROMPT,
            max_tokens=6000,
        )

        raw_recipes = result.get("recipes") if isinstance(result, dict) else result
        recipes = [
            apply_availability(recipe, pantry_items) for recipe in parse_recipes(raw_recipes)
        ]
        if not recipes:
            raise AIResponseError("AI response contained no usable recipes")

        logger.info(f"Generated {len(recipes)} recipes for pantry {pantry.id}")
        return sorted(recipes, key=lambda recipe: recipe.available_percentage, reverse=True)

    def cook_recipe(self, pantry: Pantry, user_id: int, request: CookRequest) -> CookResponse:
        """Record a cooked recipe and deduct its available ingredients."""
        cooked = CookedRecipe(
            user_id=user_id,
            pantry_id=pantry.id,
            recipe_name=request.recipe_name,
            ingredients=[ingredient.model_dump() for ingredient in request.ingredients],
        )
        self.db.add(cooked)
        self.db.flush()

        consumed, skipped = PantryService(self.db).consume_ingredients(
            pantry, request.ingredients
        )
        self.db.refresh(cooked)

        logger.info(
            f"Cooked '{request.recipe_name}' from pantry {pantry.id}: "
            f"{len(consumed)} items updated, {len(skipped)} ingredients skipped"
        )
        return CookResponse(cooked_recipe_id=cooked.id, consumed=consumed, skipped=skipped)
