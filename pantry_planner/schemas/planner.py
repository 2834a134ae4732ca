"""Meal planner schemas."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from pantry_planner.schemas.recipe import Recipe

MealType = Literal["desayuno", "almuerzo", "once", "cena", "merienda"]

MEAL_TYPE_LABELS: dict[str, str] = {
    "desayuno": "Desayuno",
    "almuerzo": "Almuerzo",
    "once": "Once",
    "cena": "Cena",
    "merienda": "Merienda",
}


class MealPlanConfig(BaseModel):
    """Period, meals per day and servings of a plan."""

    start_date: date
    end_date: date
    meal_types: list[MealType] = Field(..., min_length=1)
    servings: int = Field(2, ge=1, le=20)


class PlannedMeal(BaseModel):
    date: date
    meal_type: MealType
    recipe: Recipe


class ShoppingListItem(BaseModel):
    """Consolidated quantity to buy for one ingredient."""

    name: str
    quantity: float = 0
    unit: str = ""
    available: float = 0
    to_buy: float = 0


class MealPlanGenerateRequest(BaseModel):
    pantry_id: int | None = None
    config: MealPlanConfig


class MealPlanResponse(BaseModel):
    """A stored meal plan."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    pantry_id: int | None
    config: MealPlanConfig
    meals: list[PlannedMeal]
    shopping_list: list[ShoppingListItem]
    generated_at: datetime


class MealPlanSummary(BaseModel):
    """Meal plan history entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    start_date: date
    end_date: date
    meal_count: int
    generated_at: datetime
