"""Meal planner API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pantry_planner.api.dependencies import (
    get_current_user,
    get_meal_plan_service,
    get_pantry_service,
)
from pantry_planner.database import get_db
from pantry_planner.models.meal_plan import MealPlan
from pantry_planner.models.user import User
from pantry_planner.schemas.planner import (
    MealPlanGenerateRequest,
    MealPlanResponse,
    MealPlanSummary,
)
from pantry_planner.services.llm import AIResponseError
from pantry_planner.services.meal_plan_service import MealPlanService
from pantry_planner.services.pantry_service import PantryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/planner", tags=["planner"])


def get_user_plan(db: Session, plan_id: int, user: User) -> MealPlan:
    """Get a meal plan owned by the user, or 404."""
    plan = db.query(MealPlan).filter(MealPlan.id == plan_id, MealPlan.user_id == user.id).first()
    if not plan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meal plan not found")
    return plan


@router.post("/generate", response_model=MealPlanResponse, status_code=status.HTTP_201_CREATED)
async def generate_meal_plan(
    request: MealPlanGenerateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    pantry_service: Annotated[PantryService, Depends(get_pantry_service)],
    meal_plan_service: Annotated[MealPlanService, Depends(get_meal_plan_service)],
):
    """Generate and store a meal plan with its shopping list.

    Plans with many meals are generated one week at a time and their
    shopping lists merged.
    """
    pantry = pantry_service.resolve_pantry(request.pantry_id, current_user.id)
    try:
        return await meal_plan_service.generate_plan(pantry, current_user.id, request.config)
    except AIResponseError as e:
        logger.error(f"Meal plan generation failed for user {current_user.id}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e


@router.get("/plans", response_model=list[MealPlanSummary])
def list_meal_plans(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """List stored meal plans, newest first."""
    plans = (
        db.query(MealPlan)
        .filter(MealPlan.user_id == current_user.id)
        .order_by(MealPlan.generated_at.desc(), MealPlan.id.desc())
        .all()
    )
    return [
        MealPlanSummary(
            id=plan.id,
            start_date=plan.start_date,
            end_date=plan.end_date,
            meal_count=len(plan.meals or []),
            generated_at=plan.generated_at,
        )
        for plan in plans
    ]


@router.get("/plans/{plan_id}", response_model=MealPlanResponse)
def get_meal_plan(
    plan_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a stored meal plan."""
    return get_user_plan(db, plan_id, current_user)


@router.delete("/plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_meal_plan(
    plan_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a stored meal plan."""
    plan = get_user_plan(db, plan_id, current_user)
    db.delete(plan)
    db.commit()
