"""Dietary profile model."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from pantry_planner.database import Base, TimestampMixin


class DietaryProfile(Base, TimestampMixin):
    """Diet type, allergies and disliked ingredients used in AI prompts."""

    __tablename__ = "dietary_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True, index=True)
    diet_type = Column(String(50), nullable=True)  # "vegetariano", "keto", ... see DIET_TYPES
    allergies = Column(JSON, nullable=False, default=list)
    avoid_ingredients = Column(JSON, nullable=False, default=list)

    # Relationships
    user = relationship("User", back_populates="dietary_profile")
