"""Unit normalization for ingredient quantities.

Mass and volume units convert to a base unit (grams, milliliters). Any other
unit token ("unidades", "latas", "cans", ...) is discrete: it is never
converted and only compares equal to itself.
"""

from enum import StrEnum
from typing import NamedTuple


class UnitGroup(StrEnum):
    """Physical dimension a unit belongs to."""

    MASS = "mass"
    VOLUME = "volume"


class UnitConfig(NamedTuple):
    group: UnitGroup
    to_base: float


UNIT_CONFIG: dict[str, UnitConfig] = {
    # Mass, base unit grams
    "g": UnitConfig(UnitGroup.MASS, 1),
    "kg": UnitConfig(UnitGroup.MASS, 1000),
    # Volume, base unit milliliters
    "ml": UnitConfig(UnitGroup.VOLUME, 1),
    "l": UnitConfig(UnitGroup.VOLUME, 1000),
}

BASE_UNITS: dict[UnitGroup, str] = {
    UnitGroup.MASS: "g",
    UnitGroup.VOLUME: "ml",
}


class NormalizedQuantity(NamedTuple):
    """A quantity expressed in its dimension's base unit."""

    quantity: float
    unit: str


class IncompatibleUnitsError(ValueError):
    """Raised when converting between units of different dimensions."""

    def __init__(self, from_unit: str, to_unit: str):
        super().__init__(f"Cannot convert '{from_unit}' to '{to_unit}'")
        self.from_unit = from_unit
        self.to_unit = to_unit


def normalize_unit_key(unit: str) -> str:
    """Lowercase and trim a unit token for lookups and comparisons."""
    return unit.lower().strip()


def are_units_compatible(unit_a: str, unit_b: str) -> bool:
    """Check whether quantities in the two units can be compared.

    Configured units are compatible when they share a dimension. If either
    unit is not configured, they are compatible only if textually identical
    (case-insensitive, trimmed).
    """
    key_a = normalize_unit_key(unit_a)
    key_b = normalize_unit_key(unit_b)
    config_a = UNIT_CONFIG.get(key_a)
    config_b = UNIT_CONFIG.get(key_b)
    if config_a is None or config_b is None:
        return key_a == key_b
    return config_a.group == config_b.group


def normalize_quantity(quantity: float, unit: str) -> NormalizedQuantity:
    """Scale a quantity to its base unit; unknown units pass through unchanged."""
    config = UNIT_CONFIG.get(normalize_unit_key(unit))
    if config is None:
        return NormalizedQuantity(quantity, unit)
    return NormalizedQuantity(quantity * config.to_base, BASE_UNITS[config.group])


def convert_quantity(quantity: float, from_unit: str, to_unit: str) -> float:
    """Convert a quantity between two compatible units."""
    if not are_units_compatible(from_unit, to_unit):
        raise IncompatibleUnitsError(from_unit, to_unit)

    target = UNIT_CONFIG.get(normalize_unit_key(to_unit))
    if target is None:
        # Identical discrete units
        return quantity
    return normalize_quantity(quantity, from_unit).quantity / target.to_base
