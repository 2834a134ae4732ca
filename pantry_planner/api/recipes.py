"""Recipe API endpoints: availability, AI generation, cooking and saved recipes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from pantry_planner.api.dependencies import (
    get_current_user,
    get_pantry_service,
    get_recipe_service,
    require_llm_service,
)
from pantry_planner.database import get_db
from pantry_planner.models.recipe import CookedRecipe, SavedRecipe
from pantry_planner.models.user import User
from pantry_planner.schemas.recipe import (
    AvailabilityRequest,
    AvailabilityResponse,
    CookedRecipeResponse,
    CookRequest,
    CookResponse,
    RecipeGenerateRequest,
    RecipeGenerateResponse,
    SavedRecipeCreate,
    SavedRecipeResponse,
)
from pantry_planner.services.availability import calculate_availability
from pantry_planner.services.llm import AIResponseError
from pantry_planner.services.pantry_service import PantryService
from pantry_planner.services.recipe_service import RecipeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])


@router.post("/availability", response_model=AvailabilityResponse)
def check_availability(
    request: AvailabilityRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
):
    """Check which ingredients a pantry cannot fully supply."""
    pantry = service.resolve_pantry(request.pantry_id, current_user.id)
    result = calculate_availability(request.ingredients, service.list_items(pantry.id))
    return AvailabilityResponse(
        missing_items=result.missing_items,
        available_percentage=result.available_percentage,
        unit_conflicts=result.unit_conflicts,
    )


@router.post(
    "/generate",
    response_model=RecipeGenerateResponse,
    dependencies=[Depends(require_llm_service)],
)
async def generate_recipes(
    request: RecipeGenerateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    pantry_service: Annotated[PantryService, Depends(get_pantry_service)],
    recipe_service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Generate recipes from the pantry's contents using Claude.

    Availability of every recipe is computed against the pantry, whatever
    the model reported.
    """
    pantry = pantry_service.resolve_pantry(request.pantry_id, current_user.id)
    try:
        recipes = await recipe_service.generate_recipes(pantry, current_user.id, request)
    except AIResponseError as e:
        logger.error(f"Recipe generation failed for user {current_user.id}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
    return RecipeGenerateResponse(recipes=recipes)


@router.post("/cook", response_model=CookResponse)
def cook_recipe(
    request: CookRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    pantry_service: Annotated[PantryService, Depends(get_pantry_service)],
    recipe_service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Record a cooked recipe and deduct its ingredients from the pantry."""
    pantry = pantry_service.resolve_pantry(request.pantry_id, current_user.id)
    return recipe_service.cook_recipe(pantry, current_user.id, request)


@router.get("/cooked", response_model=list[CookedRecipeResponse])
def list_cooked_recipes(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
):
    """List recently cooked recipes, newest first."""
    return (
        db.query(CookedRecipe)
        .filter(CookedRecipe.user_id == current_user.id)
        .order_by(CookedRecipe.cooked_at.desc(), CookedRecipe.id.desc())
        .limit(limit)
        .all()
    )


# --- Saved recipes ---


@router.get("/saved", response_model=list[SavedRecipeResponse])
def list_saved_recipes(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """List saved recipes, newest first."""
    return (
        db.query(SavedRecipe)
        .filter(SavedRecipe.user_id == current_user.id)
        .order_by(SavedRecipe.saved_at.desc(), SavedRecipe.id.desc())
        .all()
    )


@router.post("/saved", response_model=SavedRecipeResponse, status_code=status.HTTP_201_CREATED)
def save_recipe(
    recipe_data: SavedRecipeCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Save a recipe."""
    recipe = SavedRecipe(user_id=current_user.id, **recipe_data.model_dump(mode="json"))
    db.add(recipe)
    db.commit()
    db.refresh(recipe)
    return recipe


@router.delete("/saved/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_saved_recipe(
    recipe_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a saved recipe."""
    recipe = (
        db.query(SavedRecipe)
        .filter(SavedRecipe.id == recipe_id, SavedRecipe.user_id == current_user.id)
        .first()
    )
    if not recipe:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not found")
    db.delete(recipe)
    db.commit()
