"""Pantry schemas."""

from datetime import date, datetime
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

FoodCategory = Literal[
    "frutas",
    "verduras",
    "lacteos",
    "carnes",
    "mariscos",
    "granos",
    "enlatados",
    "condimentos",
    "bebidas",
    "snacks",
    "panaderia",
    "congelados",
    "huevos",
    "aceites",
    "otros",
]

FOOD_CATEGORIES: tuple[str, ...] = get_args(FoodCategory)

# Units offered by the client and accepted by the spreadsheet importer
VALID_UNITS = ("unidades", "kg", "g", "L", "ml", "paquetes", "latas", "botellas")

DEFAULT_UNIT = "unidades"


# --- Pantry ---


class PantryCreate(BaseModel):
    """Create a pantry."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)


class PantryUpdate(BaseModel):
    """Update a pantry."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)


class PantryResponse(BaseModel):
    """Pantry response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    description: str | None
    is_default: bool
    created_at: datetime
    item_count: int = 0


# --- Pantry items ---


class PantryItemCreate(BaseModel):
    """Create a pantry item."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    brand: str | None = Field(None, max_length=255)
    category: FoodCategory | None = None
    quantity: float = Field(1, ge=0)
    unit: str = Field(DEFAULT_UNIT, min_length=1, max_length=50)
    expiration_date: date | None = None
    image_url: str | None = Field(None, max_length=1000)


class PantryItemUpdate(BaseModel):
    """Update a pantry item."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=255)
    brand: str | None = Field(None, max_length=255)
    category: FoodCategory | None = None
    quantity: float | None = Field(None, ge=0)
    unit: str | None = Field(None, min_length=1, max_length=50)
    expiration_date: date | None = None
    image_url: str | None = Field(None, max_length=1000)


class PantryItemResponse(BaseModel):
    """Pantry item response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    pantry_id: int
    name: str
    normalized_name: str
    brand: str | None
    category: str | None
    quantity: float
    unit: str
    expiration_date: date | None
    image_url: str | None
    added_at: datetime
    updated_at: datetime


class PantryBulkAddRequest(BaseModel):
    """Bulk add items to a pantry."""

    items: list[PantryItemCreate] = Field(..., min_length=1)
    replace: bool = False  # delete existing items first


class PantryBulkAddResponse(BaseModel):
    """Result of bulk adding to a pantry."""

    added: int
    deleted: int = 0
    items: list[PantryItemResponse]


class PantryBulkDeleteResponse(BaseModel):
    """Result of deleting every item in a pantry."""

    deleted: int


class PantryItemMoveRequest(BaseModel):
    """Move items to another pantry."""

    item_ids: list[int] = Field(..., min_length=1)
    target_pantry_id: int


class PantryItemMoveResponse(BaseModel):
    """Result of moving items."""

    moved: int
    target_pantry_id: int


class ExpiringItemsResponse(BaseModel):
    """Items past their expiration date and items expiring soon."""

    days: int
    expired: list[PantryItemResponse]
    expiring: list[PantryItemResponse]


# --- Spreadsheet import ---


class ImportedRow(BaseModel):
    """One parsed spreadsheet row, valid or not."""

    row: int  # 1-based data row, header excluded
    name: str
    quantity: float
    unit: str
    expiration_date: date | None = None
    selected: bool
    error: str | None = None


class ImportPreviewResponse(BaseModel):
    """Parsed rows of an uploaded CSV or Excel file."""

    items: list[ImportedRow]
    valid_count: int
    error_count: int
