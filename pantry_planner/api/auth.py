"""Account endpoints: register, login and the current user."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pantry_planner.api.dependencies import get_current_user
from pantry_planner.database import get_db
from pantry_planner.models.user import User
from pantry_planner.schemas.auth import AuthResponse, UserLogin, UserRegister, UserResponse
from pantry_planner.services.auth import (
    authenticate_user,
    create_access_token,
    create_user,
    get_user_by_email,
)
from pantry_planner.services.pantry_service import PantryService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def build_user_response(db: Session, user: User) -> UserResponse:
    """User info including the id of their default pantry."""
    response = UserResponse.model_validate(user)
    response.default_pantry_id = PantryService(db).get_default_pantry(user.id).id
    return response


def issue_token(db: Session, user: User) -> AuthResponse:
    return AuthResponse(
        access_token=create_access_token(user.id, user.email),
        user=build_user_response(db, user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Annotated[Session, Depends(get_db)]):
    """Create an account with its default pantry and sign it in."""
    if get_user_by_email(db, user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    user = create_user(db, user_data.email, user_data.password, user_data.name)
    return issue_token(db, user)


@router.post("/login", response_model=AuthResponse)
def login(credentials: UserLogin, db: Annotated[Session, Depends(get_db)]):
    user = authenticate_user(db, credentials.email, credentials.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return issue_token(db, user)


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    return build_user_response(db, current_user)


@router.post("/logout")
async def logout(current_user: Annotated[User, Depends(get_current_user)]):
    """Tokens are stateless; the client discards its copy."""
    return {"message": "Logged out successfully"}
