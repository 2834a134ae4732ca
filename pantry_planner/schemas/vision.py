"""Product identification and receipt scan schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProductIdentification(BaseModel):
    """What the vision model saw in a product photo."""

    name: str | None = None
    brand: str | None = None
    category: str | None = None
    suggested_quantity: float | None = None
    suggested_unit: str | None = None
    confidence: float = Field(0, ge=0, le=1)
    error: str | None = None


class ParsedReceiptItem(BaseModel):
    """An item parsed from a receipt."""

    name: str
    quantity: float = 1
    unit: str = "unidades"


class ReceiptScanResponse(BaseModel):
    """Response for a receipt scan."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    status: str
    error_message: str | None = None
    parsed_items: list[ParsedReceiptItem] | None = None
    item_count: int | None = None
    processed_at: datetime | None = None
    created_at: datetime


class ReceiptScanCreateResponse(BaseModel):
    """Response when creating a receipt scan."""

    id: int
    status: str
    message: str
