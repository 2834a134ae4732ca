"""Pydantic schemas for API requests and responses."""

from pantry_planner.schemas.auth import Token, UserLogin, UserRegister, UserResponse
from pantry_planner.schemas.pantry import (
    PantryCreate,
    PantryItemCreate,
    PantryItemResponse,
    PantryItemUpdate,
    PantryResponse,
    PantryUpdate,
)
from pantry_planner.schemas.planner import MealPlanConfig, MealPlanResponse, ShoppingListItem
from pantry_planner.schemas.recipe import Recipe, RecipeIngredient

__all__ = [
    "UserRegister",
    "UserLogin",
    "Token",
    "UserResponse",
    "PantryCreate",
    "PantryUpdate",
    "PantryResponse",
    "PantryItemCreate",
    "PantryItemUpdate",
    "PantryItemResponse",
    "Recipe",
    "RecipeIngredient",
    "MealPlanConfig",
    "MealPlanResponse",
    "ShoppingListItem",
]
