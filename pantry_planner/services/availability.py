"""Ingredient availability against pantry stock."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

from pantry_planner.services.units import are_units_compatible, normalize_quantity

logger = logging.getLogger(__name__)


class Quantified(Protocol):
    """Anything with a name, quantity and unit (schemas, ORM rows, dataclasses)."""

    name: str
    quantity: float
    unit: str


T = TypeVar("T", bound=Quantified)


@dataclass
class StockTotal:
    """Aggregated stock of one ingredient in one normalized unit."""

    quantity: float
    unit: str


@dataclass
class AvailabilityResult(Generic[T]):
    """Missing ingredients and the share of the recipe covered by stock."""

    missing_items: list[T]
    available_percentage: int
    unit_conflicts: list[str] = field(default_factory=list)


def normalize_name(name: str) -> str:
    """Identity key for matching ingredients to pantry items."""
    return name.lower().strip()


def aggregate_pantry_items(pantry_items: Iterable[Quantified]) -> dict[str, list[StockTotal]]:
    """Sum pantry quantities per ingredient name.

    Entries with compatible units are summed in the base unit. An entry whose
    unit is incompatible with every existing sub-total for that name starts a
    new sub-total instead of being dropped.
    """
    aggregated: dict[str, list[StockTotal]] = {}

    for item in pantry_items:
        normalized = normalize_quantity(item.quantity, item.unit)
        totals = aggregated.setdefault(normalize_name(item.name), [])

        existing = next(
            (total for total in totals if are_units_compatible(total.unit, normalized.unit)),
            None,
        )
        if existing:
            existing.quantity += normalized.quantity
        else:
            totals.append(StockTotal(quantity=normalized.quantity, unit=normalized.unit))

    return aggregated


def _is_satisfied(ingredient: Quantified, totals: list[StockTotal] | None) -> bool:
    if not totals:
        return False

    for total in totals:
        if are_units_compatible(total.unit, ingredient.unit):
            required = normalize_quantity(ingredient.quantity, ingredient.unit)
            return total.quantity >= required.quantity

    # Stock exists but in units that can't be compared
    return False


def _round_half_up_percentage(part: int, whole: int) -> int:
    # floor(part / whole * 100 + 0.5) in integer arithmetic
    return (part * 200 + whole) // (2 * whole)


def calculate_availability(
    ingredients: Sequence[T],
    pantry_items: Iterable[Quantified],
) -> AvailabilityResult[T]:
    """Determine which ingredients the pantry cannot fully supply.

    An ingredient is missing when it has no pantry entry, when the pantry
    stock in a compatible unit is below the required amount, or when the
    stock is only recorded in incompatible units. The percentage is the
    share of ingredients that are not missing, rounded half up.
    """
    stock = aggregate_pantry_items(pantry_items)

    missing: list[T] = []
    conflicts: list[str] = []
    for ingredient in ingredients:
        key = normalize_name(ingredient.name)
        totals = stock.get(key)
        if totals and len(totals) > 1 and key not in conflicts:
            conflicts.append(key)
        if not _is_satisfied(ingredient, totals):
            missing.append(ingredient)

    if conflicts:
        logger.warning(f"Pantry stock recorded in incompatible units for: {', '.join(conflicts)}")

    total = len(ingredients)
    percentage = _round_half_up_percentage(total - len(missing), total) if total else 0

    return AvailabilityResult(
        missing_items=missing,
        available_percentage=percentage,
        unit_conflicts=conflicts,
    )
