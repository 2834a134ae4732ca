"""Pantry service for stock lookups, bulk changes and recipe consumption."""

import logging
from collections.abc import Sequence
from datetime import date, timedelta

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from pantry_planner.models.pantry import Pantry, PantryItem, ProductImage
from pantry_planner.schemas.pantry import PantryItemCreate
from pantry_planner.schemas.recipe import ConsumedItem, RecipeIngredient
from pantry_planner.services.auth import DEFAULT_PANTRY_NAME
from pantry_planner.services.availability import calculate_availability, normalize_name
from pantry_planner.services.realtime import PantryEventType, publish_pantry_event
from pantry_planner.services.units import are_units_compatible, convert_quantity

logger = logging.getLogger(__name__)

# Leftover below this after unit round-trips counts as fully consumed
EPSILON = 1e-9


class PantryService:
    """Service for pantry-related operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_pantry(self, pantry_id: int, user_id: int) -> Pantry:
        """Get a pantry owned by the user, or 404."""
        pantry = (
            self.db.query(Pantry)
            .filter(Pantry.id == pantry_id, Pantry.user_id == user_id)
            .first()
        )
        if not pantry:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pantry not found")
        return pantry

    def get_default_pantry(self, user_id: int) -> Pantry:
        """Get the user's default pantry, creating it on first use."""
        pantry = (
            self.db.query(Pantry)
            .filter(Pantry.user_id == user_id, Pantry.is_default.is_(True))
            .first()
        )
        if pantry is None:
            pantry = Pantry(user_id=user_id, name=DEFAULT_PANTRY_NAME, is_default=True)
            self.db.add(pantry)
            self.db.commit()
            self.db.refresh(pantry)
            logger.info(f"Created default pantry {pantry.id} for user {user_id}")
        return pantry

    def resolve_pantry(self, pantry_id: int | None, user_id: int) -> Pantry:
        """Get the requested pantry, or the default one when no id is given."""
        if pantry_id is None:
            return self.get_default_pantry(user_id)
        return self.get_pantry(pantry_id, user_id)

    def list_items(self, pantry_id: int, search: str | None = None) -> list[PantryItem]:
        """List a pantry's items, newest first, optionally filtered by name."""
        query = self.db.query(PantryItem).filter(PantryItem.pantry_id == pantry_id)
        if search:
            query = query.filter(PantryItem.normalized_name.contains(normalize_name(search)))
        return query.order_by(PantryItem.added_at.desc(), PantryItem.id.desc()).all()

    def product_names(
        self, user_id: int, search: str | None = None, limit: int = 50
    ) -> list[str]:
        """Distinct names of the user's items across pantries, newest first.

        Names differing only in case or surrounding spaces count once; the most
        recently added spelling is kept.
        """
        query = (
            self.db.query(PantryItem.name, PantryItem.normalized_name)
            .join(Pantry, PantryItem.pantry_id == Pantry.id)
            .filter(Pantry.user_id == user_id)
        )
        if search:
            query = query.filter(PantryItem.normalized_name.contains(normalize_name(search)))

        names: dict[str, str] = {}
        for name, normalized in query.order_by(PantryItem.added_at.desc(), PantryItem.id.desc()):
            names.setdefault(normalized, name)
            if len(names) >= limit:
                break
        return list(names.values())

    def remembered_image(self, user_id: int, normalized_name: str) -> str | None:
        image = (
            self.db.query(ProductImage)
            .filter(
                ProductImage.user_id == user_id,
                ProductImage.normalized_name == normalized_name,
            )
            .first()
        )
        return image.image_url if image else None

    def remember_image(self, user_id: int, normalized_name: str, image_url: str) -> None:
        """Store a product's photo for later items of the same name. Not committed."""
        image = (
            self.db.query(ProductImage)
            .filter(
                ProductImage.user_id == user_id,
                ProductImage.normalized_name == normalized_name,
            )
            .first()
        )
        if image is None:
            self.db.add(
                ProductImage(user_id=user_id, normalized_name=normalized_name, image_url=image_url)
            )
            # Visible to the next lookup in the same batch
            self.db.flush()
        else:
            image.image_url = image_url

    def build_item(self, pantry: Pantry, item_data: PantryItemCreate) -> PantryItem:
        """A new, unsaved item; without a photo it gets the product's remembered one."""
        normalized = normalize_name(item_data.name)
        values = item_data.model_dump()
        if values["image_url"]:
            self.remember_image(pantry.user_id, normalized, values["image_url"])
        else:
            values["image_url"] = self.remembered_image(pantry.user_id, normalized)
        return PantryItem(pantry_id=pantry.id, normalized_name=normalized, **values)

    def bulk_add(
        self,
        pantry: Pantry,
        items: Sequence[PantryItemCreate],
        replace: bool = False,
    ) -> tuple[list[PantryItem], int]:
        """Add several items at once, optionally replacing the pantry's contents.

        Returns:
            (created items, number of items deleted first)
        """
        deleted = 0
        if replace:
            deleted = (
                self.db.query(PantryItem)
                .filter(PantryItem.pantry_id == pantry.id)
                .delete(synchronize_session=False)
            )

        created = []
        for item_data in items:
            item = self.build_item(pantry, item_data)
            self.db.add(item)
            created.append(item)

        self.db.commit()
        for item in created:
            self.db.refresh(item)

        logger.info(f"Bulk added {len(created)} items to pantry {pantry.id} (deleted {deleted})")
        publish_pantry_event(
            pantry.id,
            PantryEventType.ITEMS_BULK_ADDED,
            {"item_ids": [item.id for item in created], "deleted": deleted},
        )
        return created, deleted

    def move_items(self, item_ids: list[int], source: Pantry, target: Pantry) -> int:
        """Move items between two pantries of the same user."""
        if source.id == target.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Source and target pantry are the same",
            )

        items = (
            self.db.query(PantryItem)
            .filter(PantryItem.pantry_id == source.id, PantryItem.id.in_(item_ids))
            .all()
        )
        if len(items) != len(set(item_ids)):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="One or more pantry items not found",
            )

        for item in items:
            item.pantry_id = target.id
        self.db.commit()

        moved_ids = [item.id for item in items]
        publish_pantry_event(
            source.id, PantryEventType.ITEMS_MOVED, {"item_ids": moved_ids, "to": target.id}
        )
        publish_pantry_event(
            target.id, PantryEventType.ITEMS_MOVED, {"item_ids": moved_ids, "from": source.id}
        )
        return len(items)

    def expiring_items(
        self,
        pantry_id: int,
        days: int,
        today: date | None = None,
    ) -> tuple[list[PantryItem], list[PantryItem]]:
        """Split dated items into expired and expiring within `days`.

        Returns:
            (expired, expiring) both ordered by expiration date
        """
        today = today or date.today()
        limit = today + timedelta(days=days)

        dated = (
            self.db.query(PantryItem)
            .filter(PantryItem.pantry_id == pantry_id, PantryItem.expiration_date.isnot(None))
            .order_by(PantryItem.expiration_date, PantryItem.id)
            .all()
        )
        expired = [item for item in dated if item.expiration_date < today]
        expiring = [item for item in dated if today <= item.expiration_date <= limit]
        return expired, expiring

    def consume_ingredients(
        self,
        pantry: Pantry,
        ingredients: Sequence[RecipeIngredient],
    ) -> tuple[list[ConsumedItem], list[str]]:
        """Deduct a cooked recipe's ingredients from the pantry.

        Ingredients the pantry cannot fully supply are skipped. Available ones
        are deducted from matching items with compatible units, oldest first,
        converting to each item's unit. Quantities are clamped at zero and the
        items are kept.

        Returns:
            (per-item stock changes, names of skipped ingredients)
        """
        items = (
            self.db.query(PantryItem)
            .filter(PantryItem.pantry_id == pantry.id)
            .order_by(PantryItem.added_at, PantryItem.id)
            .all()
        )
        availability = calculate_availability(ingredients, items)
        missing_ids = {id(ingredient) for ingredient in availability.missing_items}

        consumed: dict[int, ConsumedItem] = {}
        skipped: list[str] = []

        for ingredient in ingredients:
            if id(ingredient) in missing_ids:
                skipped.append(ingredient.name)
                continue

            remaining = ingredient.quantity
            key = normalize_name(ingredient.name)
            for item in items:
                if remaining <= EPSILON:
                    break
                if item.normalized_name != key or item.quantity <= 0:
                    continue
                if not are_units_compatible(item.unit, ingredient.unit):
                    continue

                wanted = convert_quantity(remaining, ingredient.unit, item.unit)
                taken = min(item.quantity, wanted)
                change = consumed.setdefault(
                    item.id,
                    ConsumedItem(
                        item_id=item.id,
                        name=item.name,
                        unit=item.unit,
                        quantity_before=item.quantity,
                        quantity_after=item.quantity,
                    ),
                )
                item.quantity = max(item.quantity - taken, 0)
                change.quantity_after = item.quantity
                remaining -= convert_quantity(taken, item.unit, ingredient.unit)

        self.db.commit()

        if consumed:
            publish_pantry_event(
                pantry.id,
                PantryEventType.ITEMS_CONSUMED,
                {"item_ids": list(consumed)},
            )
        return list(consumed.values()), skipped
