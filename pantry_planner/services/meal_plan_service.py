"""Meal plan generation service."""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, timedelta

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from pantry_planner.config import get_settings
from pantry_planner.models.dietary_profile import DietaryProfile
from pantry_planner.models.meal_plan import MealPlan
from pantry_planner.models.pantry import Pantry, PantryItem
from pantry_planner.schemas.planner import MealPlanConfig, PlannedMeal, ShoppingListItem
from pantry_planner.services.availability import normalize_name
from pantry_planner.services.llm import AIResponseError, LLMService
from pantry_planner.services.llm_prompts import (
    CHEF_SYSTEM_PROMPT,
    format_pantry_list,
    get_meal_plan_prompt,
)
from pantry_planner.services.recipe_service import apply_availability
from pantry_planner.services.units import are_units_compatible, convert_quantity

logger = logging.getLogger(__name__)

MEAL_PLAN_MAX_TOKENS = 16000


def count_days(start: date, end: date) -> int:
    """Number of days in an inclusive date range."""
    return (end - start).days + 1


def dates_in_range(start: date, end: date) -> list[date]:
    return [start + timedelta(days=offset) for offset in range(count_days(start, end))]


def chunk_dates(dates: Sequence[date], chunk_days: int) -> list[list[date]]:
    """Split consecutive dates into chunks of at most `chunk_days`."""
    return [list(dates[i : i + chunk_days]) for i in range(0, len(dates), chunk_days)]


def validate_config(config: MealPlanConfig, max_days: int) -> None:
    """Reject inverted or overly long planning periods."""
    if config.end_date < config.start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End date must not be before start date",
        )
    days = count_days(config.start_date, config.end_date)
    if days > max_days:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Meal plans can cover at most {max_days} days (requested {days})",
        )


def merge_shopping_lists(lists: Iterable[Iterable[ShoppingListItem]]) -> list[ShoppingListItem]:
    """Combine per-chunk shopping lists into one.

    Entries for the same ingredient are summed in the unit of the first entry
    when their units are compatible. Entries whose units cannot be converted
    stay as separate lines. The pantry's `available` quantity is the same
    stock in every chunk, so the first entry's value is kept.
    """
    merged: dict[str, list[ShoppingListItem]] = {}
    for shopping_list in lists:
        for entry in shopping_list:
            entries = merged.setdefault(normalize_name(entry.name), [])
            target = next(
                (
                    existing
                    for existing in entries
                    if are_units_compatible(existing.unit, entry.unit)
                ),
                None,
            )
            if target is None:
                entries.append(entry.model_copy())
                continue
            target.quantity += convert_quantity(entry.quantity, entry.unit, target.unit)
            target.to_buy += convert_quantity(entry.to_buy, entry.unit, target.unit)

    return [entry for entries in merged.values() for entry in entries]


def parse_meals(
    raw_meals: object, dates: Sequence[date], meal_types: Sequence[str]
) -> list[PlannedMeal]:
    """Validate meals from a model response, keeping only requested slots."""
    if not isinstance(raw_meals, list):
        raise AIResponseError("AI response has no meal list")

    allowed = set(dates)
    meals = []
    for raw in raw_meals:
        try:
            meal = PlannedMeal.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Skipping malformed meal from AI: {e.error_count()} errors")
            continue
        if meal.date not in allowed:
            logger.warning(f"Skipping meal dated {meal.date} outside the requested period")
            continue
        if meal.meal_type not in meal_types:
            logger.warning(f"Skipping unrequested meal type {meal.meal_type}")
            continue
        meals.append(meal)
    return meals


def parse_shopping_list(raw_items: object) -> list[ShoppingListItem]:
    if not isinstance(raw_items, list):
        return []

    items = []
    for raw in raw_items:
        try:
            items.append(ShoppingListItem.model_validate(raw))
        except ValidationError:
            logger.warning(f"Skipping malformed shopping list entry: {raw!r}")
    return items


class MealPlanService:
    """Service for generating and storing meal plans."""

    def __init__(self, db: Session, llm_service: LLMService | None = None):
        self.db = db
        self.llm_service = llm_service or LLMService()
        self.settings = get_settings()

    def _date_chunks(self, config: MealPlanConfig) -> list[list[date]]:
        """Plan dates, split into several requests when the plan is large."""
        dates = dates_in_range(config.start_date, config.end_date)
        total_meals = len(dates) * len(config.meal_types)
        if total_meals <= self.settings.meal_plan_chunk_threshold:
            return [dates]
        return chunk_dates(dates, self.settings.meal_plan_chunk_days)

    async def _generate_chunk(
        self,
        pantry_list: str,
        dates: list[date],
        config: MealPlanConfig,
        profile: DietaryProfile | None,
    ) -> tuple[list[PlannedMeal], list[ShoppingListItem]]:
        prompt = get_meal_plan_prompt(
            pantry_list,
            dates,
            list(config.meal_types),
            config.servings,
            profile=profile,
        )
        result = await self.llm_service.generate_json(
            prompt=prompt,
            system_prompt=CHEF_SYSTEM_PROMPT,
            max_tokens=MEAL_PLAN_MAX_TOKENS,
        )
        if not isinstance(result, dict):
            raise AIResponseError("AI response is not a meal plan object")

        meals = parse_meals(result.get("meals"), dates, config.meal_types)
        shopping_list = parse_shopping_list(result.get("shopping_list"))
        return meals, shopping_list

    async def generate_plan(self, pantry: Pantry, user_id: int, config: MealPlanConfig) -> MealPlan:
        """Generate a meal plan for the configured period and store it."""
        validate_config(config, self.settings.meal_plan_max_days)

        pantry_items = (
            self.db.query(PantryItem)
            .filter(PantryItem.pantry_id == pantry.id)
            .order_by(PantryItem.added_at, PantryItem.id)
            .all()
        )
        if not pantry_items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Pantry items are required to generate a meal plan",
            )
        profile = (
            self.db.query(DietaryProfile).filter(DietaryProfile.user_id == user_id).first()
        )
        pantry_list = format_pantry_list(pantry_items)

        chunks = self._date_chunks(config)
        logger.info(
            f"Generating meal plan for pantry {pantry.id}: "
            f"{config.start_date} to {config.end_date} in {len(chunks)} request(s)"
        )

        meals: list[PlannedMeal] = []
        shopping_lists: list[list[ShoppingListItem]] = []
        for dates in chunks:
            chunk_meals, chunk_list = await self._generate_chunk(
                pantry_list, dates, config, profile
            )
            meals.extend(chunk_meals)
            shopping_lists.append(chunk_list)

        if not meals:
            raise AIResponseError("AI response contained no usable meals")

        for meal in meals:
            apply_availability(meal.recipe, pantry_items)
        meal_order = {meal_type: index for index, meal_type in enumerate(config.meal_types)}
        meals.sort(key=lambda meal: (meal.date, meal_order[meal.meal_type]))

        plan = MealPlan(
            user_id=user_id,
            pantry_id=pantry.id,
            start_date=config.start_date,
            end_date=config.end_date,
            config=config.model_dump(mode="json"),
            meals=[meal.model_dump(mode="json") for meal in meals],
            shopping_list=[
                item.model_dump(mode="json") for item in merge_shopping_lists(shopping_lists)
            ],
        )
        self.db.add(plan)
        self.db.commit()
        self.db.refresh(plan)

        logger.info(f"Stored meal plan {plan.id} with {len(meals)} meals")
        return plan
