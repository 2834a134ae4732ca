"""SQLAlchemy models."""

from pantry_planner.models.dietary_profile import DietaryProfile
from pantry_planner.models.meal_plan import MealPlan
from pantry_planner.models.pantry import Pantry, PantryItem, ProductImage
from pantry_planner.models.receipt_scan import ReceiptScan
from pantry_planner.models.recipe import CookedRecipe, SavedRecipe
from pantry_planner.models.user import User

__all__ = [
    "User",
    "Pantry",
    "PantryItem",
    "ProductImage",
    "SavedRecipe",
    "CookedRecipe",
    "MealPlan",
    "DietaryProfile",
    "ReceiptScan",
]
