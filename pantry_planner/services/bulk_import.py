"""Parse CSV and Excel pantry spreadsheets into importable rows."""

import io
import logging
import numbers
import re
from datetime import date, datetime, timedelta
from pathlib import PurePath
from typing import Any
from zipfile import BadZipFile

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException
from xlrd import XLRDError

from pantry_planner.schemas.pantry import DEFAULT_UNIT, VALID_UNITS, ImportedRow

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls")

UNIT_SYNONYMS = {
    # Spanish
    "unidad": "unidades",
    "ud": "unidades",
    "uds": "unidades",
    "kilogramo": "kg",
    "kilogramos": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "gramo": "g",
    "gramos": "g",
    "gr": "g",
    "litro": "L",
    "litros": "L",
    "mililitro": "ml",
    "mililitros": "ml",
    "paquete": "paquetes",
    "paq": "paquetes",
    "lata": "latas",
    "botella": "botellas",
    # English
    "unit": "unidades",
    "units": "unidades",
    "kilogram": "kg",
    "kilograms": "kg",
    "gram": "g",
    "grams": "g",
    "liter": "L",
    "liters": "L",
    "litre": "L",
    "litres": "L",
    "milliliter": "ml",
    "milliliters": "ml",
    "millilitre": "ml",
    "millilitres": "ml",
    "package": "paquetes",
    "packages": "paquetes",
    "can": "latas",
    "cans": "latas",
    "bottle": "botellas",
    "bottles": "botellas",
}

COLUMN_MAPPINGS = {
    # Spanish
    "nombre": "name",
    "producto": "name",
    "cantidad": "quantity",
    "unidad": "unit",
    "caducidad": "expiration_date",
    "fecha_caducidad": "expiration_date",
    "vencimiento": "expiration_date",
    "fecha_vencimiento": "expiration_date",
    # English
    "name": "name",
    "product": "name",
    "quantity": "quantity",
    "unit": "unit",
    "expiration": "expiration_date",
    "expiration_date": "expiration_date",
    "expiry": "expiration_date",
    "expiry_date": "expiration_date",
}

TEMPLATE_ROWS = [
    ("Leche", "2", "L", "2025-01-15"),
    ("Arroz", "1", "kg", ""),
    ("Tomates", "6", "unidades", "2025-01-10"),
    ("Aceite de oliva", "1", "botellas", "2025-06-30"),
]

ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
DMY_DATE_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")
EXCEL_EPOCH = date(1899, 12, 30)


class UnsupportedFileError(ValueError):
    """Raised for uploads that are not CSV or Excel files."""


def normalize_column_name(column: Any) -> str:
    key = re.sub(r"\s+", "_", str(column).lower().strip())
    return COLUMN_MAPPINGS.get(key, key)


def normalize_unit(unit: str) -> str | None:
    """Map a unit token or synonym to one of VALID_UNITS, or None if unknown."""
    key = unit.lower().strip()
    for valid in VALID_UNITS:
        if valid.lower() == key:
            return valid
    return UNIT_SYNONYMS.get(key)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_date(value: Any) -> date | None:
    """Parse Excel dates, Excel serial numbers, YYYY-MM-DD and DD/MM/YYYY."""
    if _is_blank(value):
        return None

    if isinstance(value, datetime):  # includes pandas Timestamp
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, numbers.Real):
        try:
            return EXCEL_EPOCH + timedelta(days=int(value))
        except (OverflowError, ValueError):
            return None

    text = str(value).strip()
    try:
        if match := ISO_DATE_RE.match(text):
            year, month, day = match.groups()
            return date(int(year), int(month), int(day))
        if match := DMY_DATE_RE.match(text):
            day, month, year = match.groups()
            return date(int(year), int(month), int(day))
    except ValueError:
        return None
    return None


def parse_row(row_number: int, row: dict[str, Any]) -> ImportedRow:
    """Validate one spreadsheet row; errors are reported, not raised."""
    errors = []

    name = "" if _is_blank(row.get("name")) else str(row["name"]).strip()
    if not name:
        errors.append("Name required")

    quantity = 1.0
    raw_quantity = row.get("quantity")
    if not _is_blank(raw_quantity):
        try:
            parsed = float(str(raw_quantity).strip().replace(",", "."))
        except ValueError:
            parsed = float("nan")
        if parsed != parsed or parsed <= 0:
            errors.append("Invalid quantity")
        else:
            quantity = parsed

    unit = DEFAULT_UNIT
    raw_unit = row.get("unit")
    if not _is_blank(raw_unit):
        normalized = normalize_unit(str(raw_unit))
        if normalized is None:
            errors.append(f"Invalid unit: {raw_unit}")
        else:
            unit = normalized

    return ImportedRow(
        row=row_number,
        name=name,
        quantity=quantity,
        unit=unit,
        expiration_date=parse_date(row.get("expiration_date")),
        selected=not errors,
        error=", ".join(errors) if errors else None,
    )


def read_spreadsheet(content: bytes, filename: str) -> pd.DataFrame:
    """Load an uploaded CSV or Excel file's first sheet."""
    extension = PurePath(filename).suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileError(
            f"Only CSV or Excel files are accepted ({', '.join(SUPPORTED_EXTENSIONS)})"
        )

    buffer = io.BytesIO(content)
    if extension == ".csv":
        return pd.read_csv(buffer, dtype=str, keep_default_na=False, skipinitialspace=True)
    try:
        return pd.read_excel(buffer, sheet_name=0)
    except (BadZipFile, XLRDError, InvalidFileException) as e:
        raise UnsupportedFileError(f"Could not read {filename}: {e}") from e


def parse_spreadsheet(content: bytes, filename: str) -> list[ImportedRow]:
    """Parse every data row of an uploaded spreadsheet."""
    frame = read_spreadsheet(content, filename)
    frame = frame.rename(columns=normalize_column_name)

    rows = [
        parse_row(index + 1, record)
        for index, record in enumerate(frame.to_dict(orient="records"))
        if not all(_is_blank(value) for value in record.values())
    ]
    logger.info(
        f"Parsed {len(rows)} rows from {filename}: "
        f"{sum(1 for row in rows if row.error)} with errors"
    )
    return rows


def generate_template_csv() -> str:
    """CSV template with Spanish headers and example rows."""
    frame = pd.DataFrame(TEMPLATE_ROWS, columns=["nombre", "cantidad", "unidad", "caducidad"])
    return frame.to_csv(index=False, lineterminator="\n")
