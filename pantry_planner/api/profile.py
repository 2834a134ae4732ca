"""Dietary profile API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pantry_planner.api.dependencies import get_current_user
from pantry_planner.database import get_db
from pantry_planner.models.dietary_profile import DietaryProfile
from pantry_planner.models.user import User
from pantry_planner.schemas.profile import DietaryProfileResponse, DietaryProfileUpdate

router = APIRouter(prefix="/api/v1/profile", tags=["profile"])


@router.get("/dietary", response_model=DietaryProfileResponse)
def get_dietary_profile(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get the dietary profile used when generating recipes and meal plans."""
    profile = db.query(DietaryProfile).filter(DietaryProfile.user_id == current_user.id).first()
    if profile is None:
        return DietaryProfileResponse()
    return profile


@router.put("/dietary", response_model=DietaryProfileResponse)
def update_dietary_profile(
    profile_data: DietaryProfileUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Replace the dietary profile."""
    profile = db.query(DietaryProfile).filter(DietaryProfile.user_id == current_user.id).first()
    if profile is None:
        profile = DietaryProfile(user_id=current_user.id)
        db.add(profile)

    profile.diet_type = profile_data.diet_type
    profile.allergies = profile_data.allergies
    profile.avoid_ingredients = profile_data.avoid_ingredients
    db.commit()
    db.refresh(profile)
    return profile
