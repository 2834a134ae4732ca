"""Recipe schemas."""

from datetime import datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

Difficulty = Literal["easy", "medium", "hard"]

# --- Recipe Ingredient ---


class RecipeIngredient(BaseModel):
    """A named quantity requirement of a recipe."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(..., ge=0)
    unit: str = Field(..., min_length=1, max_length=50)


# --- Nutrition ---


class CarbsInfo(BaseModel):
    total: float = 0
    fiber: float = 0
    sugar: float = 0


class FatInfo(BaseModel):
    total: float = 0
    saturated: float = 0
    unsaturated: float = 0


class NutritionalInfo(BaseModel):
    """Estimated nutrition per serving."""

    calories: float = 0
    protein: float = 0
    carbs: CarbsInfo = Field(default_factory=CarbsInfo)
    fat: FatInfo = Field(default_factory=FatInfo)
    sodium: float = 0  # milligrams


# --- Recipe ---


class RecipeBase(BaseModel):
    """Fields shared by generated and saved recipes."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    ingredients: list[RecipeIngredient] = []
    steps: list[str] = []
    prep_time: int | None = Field(None, ge=0)  # minutes
    cook_time: int | None = Field(None, ge=0)  # minutes
    difficulty: Difficulty | None = None
    servings: int | None = Field(None, ge=1)
    cuisine: str | None = None
    dietary_tags: list[str] = []
    nutrition: NutritionalInfo | None = None


class Recipe(RecipeBase):
    """A generated recipe with availability computed against the pantry."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    missing_items: list[RecipeIngredient] = []
    available_percentage: int = Field(0, ge=0, le=100)
    unit_conflicts: list[str] = []


class RecipeFilters(BaseModel):
    """Optional constraints passed to recipe generation."""

    max_prep_time: int | None = Field(None, ge=1)
    difficulty: Difficulty | None = None
    cuisine: str | None = Field(None, max_length=100)
    dietary_tags: list[str] = []


class RecipeGenerateRequest(BaseModel):
    """Generate recipes from a pantry."""

    pantry_id: int | None = None  # default pantry when omitted
    filters: RecipeFilters | None = None
    max_missing_percentage: int | None = Field(None, ge=0, le=100)
    count: int = Field(3, ge=1, le=6)


class RecipeGenerateResponse(BaseModel):
    recipes: list[Recipe]


# --- Availability ---


class AvailabilityRequest(BaseModel):
    """Check ingredients against a pantry."""

    ingredients: list[RecipeIngredient]
    pantry_id: int | None = None


class AvailabilityResponse(BaseModel):
    """Missing ingredients and percentage of the recipe covered by stock."""

    missing_items: list[RecipeIngredient]
    available_percentage: int
    unit_conflicts: list[str] = []


# --- Cooking ---


class CookRequest(BaseModel):
    """Record a cooked recipe and consume its ingredients from a pantry."""

    recipe_name: str = Field(..., min_length=1, max_length=255)
    ingredients: list[RecipeIngredient] = Field(..., min_length=1)
    pantry_id: int | None = None


class ConsumedItem(BaseModel):
    """Stock change on one pantry item."""

    item_id: int
    name: str
    unit: str
    quantity_before: float
    quantity_after: float


class CookResponse(BaseModel):
    cooked_recipe_id: int
    consumed: list[ConsumedItem]
    skipped: list[str]  # ingredient names not deducted (missing from stock)


class CookedRecipeResponse(BaseModel):
    """Cooked recipe history entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    recipe_name: str
    pantry_id: int | None
    ingredients: list[RecipeIngredient]
    cooked_at: datetime


# --- Saved recipes ---


class SavedRecipeCreate(RecipeBase):
    """Save a recipe (availability fields are not stored)."""


class SavedRecipeResponse(RecipeBase):
    """Saved recipe response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    saved_at: datetime
