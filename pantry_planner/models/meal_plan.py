"""Meal plan model."""

from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import relationship

from pantry_planner.database import Base, TimestampMixin


class MealPlan(Base, TimestampMixin):
    """A generated multi-day meal plan with its shopping list."""

    __tablename__ = "meal_plans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    pantry_id = Column(Integer, ForeignKey("pantries.id", ondelete="SET NULL"), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    # {"start_date": ..., "end_date": ..., "meal_types": [...], "servings": 2}
    config = Column(JSON, nullable=False)
    # [{"date": "2025-01-06", "meal_type": "cena", "recipe": {...}}, ...]
    meals = Column(JSON, nullable=False, default=list)
    # [{"name": ..., "quantity": ..., "unit": ..., "available": ..., "to_buy": ...}]
    shopping_list = Column(JSON, nullable=False, default=list)
    generated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    user = relationship("User", backref="meal_plans")
