"""FastAPI dependencies for authentication, database and services."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pantry_planner.database import get_db
from pantry_planner.models.user import User
from pantry_planner.services.auth import read_access_token
from pantry_planner.services.llm import LLMService
from pantry_planner.services.meal_plan_service import MealPlanService
from pantry_planner.services.pantry_service import PantryService
from pantry_planner.services.recipe_service import RecipeService
from pantry_planner.services.vision_service import VisionService

security = HTTPBearer()


def get_user_from_token(db: Session, token: str) -> User | None:
    """Resolve a JWT to its user, or None if the token is invalid."""
    user_id = read_access_token(token)
    if user_id is None:
        return None
    return db.query(User).filter(User.id == user_id).first()


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    user = get_user_from_token(db, credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_llm_service() -> LLMService:
    """Get LLM service instance."""
    return LLMService()


def require_llm_service(
    llm_service: Annotated[LLMService, Depends(get_llm_service)],
) -> LLMService:
    """Get the LLM service, rejecting the request if no API key is set."""
    if not llm_service.is_configured:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="AI service is not configured",
        )
    return llm_service


def get_pantry_service(
    db: Annotated[Session, Depends(get_db)],
) -> PantryService:
    """Get pantry service with dependencies."""
    return PantryService(db)


def get_recipe_service(
    db: Annotated[Session, Depends(get_db)],
    llm_service: Annotated[LLMService, Depends(get_llm_service)],
) -> RecipeService:
    """Get recipe service with dependencies."""
    return RecipeService(db, llm_service)


def get_meal_plan_service(
    db: Annotated[Session, Depends(get_db)],
    llm_service: Annotated[LLMService, Depends(require_llm_service)],
) -> MealPlanService:
    """Get meal plan service with dependencies."""
    return MealPlanService(db, llm_service)


def get_vision_service(
    llm_service: Annotated[LLMService, Depends(require_llm_service)],
) -> VisionService:
    """Get vision service with dependencies."""
    return VisionService(llm_service)
