"""User model."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from pantry_planner.database import Base, TimestampMixin


class User(Base, TimestampMixin):
    """Account that owns pantries, saved recipes and meal plans."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)

    # Relationships
    pantries = relationship(
        "Pantry", back_populates="user", cascade="all, delete-orphan", order_by="Pantry.id"
    )
    dietary_profile = relationship(
        "DietaryProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
