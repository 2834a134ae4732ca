"""Dietary profile schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

DIET_TYPES = (
    "omnivoro",
    "vegetariano",
    "vegano",
    "keto",
    "paleo",
    "sinGluten",
    "sinLactosa",
)

ALLERGY_OPTIONS = ("nueces", "mariscos", "gluten", "lactosa", "huevo", "mani", "soya")


class DietaryProfileUpdate(BaseModel):
    """Replace the dietary profile."""

    diet_type: str | None = Field(None, max_length=50)
    allergies: list[str] = []
    avoid_ingredients: list[str] = []

    @field_validator("diet_type")
    @classmethod
    def validate_diet_type(cls, value: str | None) -> str | None:
        if value is not None and value not in DIET_TYPES:
            raise ValueError(f"Unknown diet type. Allowed: {', '.join(DIET_TYPES)}")
        return value

    @field_validator("avoid_ingredients")
    @classmethod
    def strip_ingredients(cls, value: list[str]) -> list[str]:
        return [name.strip() for name in value if name.strip()]


class DietaryProfileResponse(BaseModel):
    """Dietary profile response."""

    model_config = ConfigDict(from_attributes=True)

    diet_type: str | None = None
    allergies: list[str] = []
    avoid_ingredients: list[str] = []
