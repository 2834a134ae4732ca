"""Pantry and pantry item models."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from pantry_planner.database import Base, TimestampMixin


class Pantry(Base, TimestampMixin):
    """A named container of food items (e.g. "Kitchen", "Freezer")."""

    __tablename__ = "pantries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(2000), nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)

    # Relationships
    user = relationship("User", back_populates="pantries")
    items = relationship(
        "PantryItem", back_populates="pantry", cascade="all, delete-orphan"
    )


class PantryItem(Base, TimestampMixin):
    """One stock entry: a named quantity of food in a pantry."""

    __tablename__ = "pantry_items"

    id = Column(Integer, primary_key=True, index=True)
    pantry_id = Column(Integer, ForeignKey("pantries.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)  # Display name
    normalized_name = Column(String(255), nullable=False, index=True)  # Lowercase, trimmed
    brand = Column(String(255), nullable=True)
    category = Column(String(50), nullable=True)  # "frutas", "lacteos", ... see FOOD_CATEGORIES
    quantity = Column(Float, nullable=False, default=1)
    unit = Column(String(50), nullable=False, default="unidades")
    expiration_date = Column(Date, nullable=True)
    image_url = Column(String(1000), nullable=True)
    added_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    pantry = relationship("Pantry", back_populates="items")


class ProductImage(Base, TimestampMixin):
    """The last photo a user attached to a product, reused for new items of that name."""

    __tablename__ = "product_images"
    __table_args__ = (UniqueConstraint("user_id", "normalized_name"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    normalized_name = Column(String(255), nullable=False)
    image_url = Column(String(1000), nullable=False)
