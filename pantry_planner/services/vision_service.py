"""Product and receipt recognition using Claude Vision."""

import logging

from pydantic import ValidationError

from pantry_planner.schemas.pantry import DEFAULT_UNIT, FOOD_CATEGORIES
from pantry_planner.schemas.vision import ParsedReceiptItem, ProductIdentification
from pantry_planner.services.bulk_import import normalize_unit
from pantry_planner.services.llm import AIResponseError, ImageInput, LLMService
from pantry_planner.services.llm_prompts import (
    PRODUCT_IDENTIFICATION_PROMPT,
    RECEIPT_SCAN_PROMPT,
)

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
MAX_IMAGE_BYTES = 10 * 1024 * 1024


def _coerce_unit(unit: object) -> str:
    if not isinstance(unit, str):
        return DEFAULT_UNIT
    return normalize_unit(unit) or DEFAULT_UNIT


def _coerce_quantity(quantity: object) -> float:
    try:
        value = float(quantity)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1.0
    return value if value > 0 else 1.0


class VisionService:
    """Service for reading product photos and receipts."""

    def __init__(self, llm_service: LLMService | None = None) -> None:
        self.llm_service = llm_service or LLMService()

    @property
    def is_configured(self) -> bool:
        return self.llm_service.is_configured

    async def identify_product(self, image_data: bytes, media_type: str) -> ProductIdentification:
        """Identify a food product from a photo.

        Unknown units fall back to "unidades" and unknown categories to "otros",
        so the result can prefill an item form directly.
        """
        result = await self.llm_service.generate_json(
            prompt=PRODUCT_IDENTIFICATION_PROMPT,
            max_tokens=1024,
            images=[ImageInput(data=image_data, media_type=media_type)],
        )
        if not isinstance(result, dict):
            raise AIResponseError("AI response is not a product object")

        try:
            product = ProductIdentification.model_validate(result)
        except ValidationError as e:
            raise AIResponseError("AI response is not a valid product") from e

        if product.name:
            product.suggested_unit = _coerce_unit(product.suggested_unit)
            if product.category not in FOOD_CATEGORIES:
                product.category = "otros"
        logger.info(f"Identified product {product.name!r} (confidence {product.confidence})")
        return product

    async def parse_receipt_image(
        self, image_data: bytes, media_type: str
    ) -> list[ParsedReceiptItem]:
        """Parse a receipt image into pantry-ready items.

        Args:
            image_data: Raw bytes of the image
            media_type: MIME type (e.g., "image/jpeg", "image/png")

        Returns:
            List of parsed items from the receipt
        """
        result = await self.llm_service.generate_json(
            prompt=RECEIPT_SCAN_PROMPT,
            max_tokens=4096,
            images=[ImageInput(data=image_data, media_type=media_type)],
        )

        raw_items = result.get("items") if isinstance(result, dict) else result
        if not isinstance(raw_items, list):
            raise AIResponseError("AI response has no item list")

        items = []
        for raw in raw_items:
            if not isinstance(raw, dict) or not str(raw.get("name") or "").strip():
                continue
            items.append(
                ParsedReceiptItem(
                    name=str(raw["name"]).strip(),
                    quantity=_coerce_quantity(raw.get("quantity")),
                    unit=_coerce_unit(raw.get("unit")),
                )
            )

        logger.info(f"Parsed {len(items)} items from receipt")
        return items
