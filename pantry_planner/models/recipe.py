"""Saved and cooked recipe models."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from pantry_planner.database import Base, TimestampMixin


class SavedRecipe(Base, TimestampMixin):
    """A generated recipe the user chose to keep."""

    __tablename__ = "saved_recipes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    # [{"name": "Arroz", "quantity": 200, "unit": "g"}, ...]
    ingredients = Column(JSON, nullable=False, default=list)
    steps = Column(JSON, nullable=False, default=list)
    prep_time = Column(Integer, nullable=True)  # minutes
    cook_time = Column(Integer, nullable=True)  # minutes
    difficulty = Column(String(10), nullable=True)  # "easy" | "medium" | "hard"
    servings = Column(Integer, nullable=True)
    cuisine = Column(String(100), nullable=True)
    dietary_tags = Column(JSON, nullable=True)
    nutrition = Column(JSON, nullable=True)
    saved_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    user = relationship("User", backref="saved_recipes")


class CookedRecipe(Base, TimestampMixin):
    """History entry recorded each time a recipe is cooked."""

    __tablename__ = "cooked_recipes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    pantry_id = Column(
        Integer, ForeignKey("pantries.id", ondelete="SET NULL"), nullable=True, index=True
    )
    recipe_name = Column(String(255), nullable=False)
    ingredients = Column(JSON, nullable=False, default=list)
    cooked_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    user = relationship("User", backref="cooked_recipes")
