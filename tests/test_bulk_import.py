"""Tests for CSV and Excel pantry import parsing."""

import io
from datetime import date, datetime

import pandas as pd
import pytest

from pantry_planner.services.bulk_import import (
    UnsupportedFileError,
    generate_template_csv,
    normalize_column_name,
    normalize_unit,
    parse_date,
    parse_row,
    parse_spreadsheet,
)


class TestNormalizeUnit:
    """Tests for unit token and synonym mapping."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("kg", "kg"),
            ("KG", "kg"),
            ("l", "L"),
            ("Litros", "L"),
            ("gramos", "g"),
            ("ud", "unidades"),
            ("cans", "latas"),
            ("bottle", "botellas"),
            (" paquete ", "paquetes"),
        ],
    )
    def test_known_units(self, raw, expected):
        assert normalize_unit(raw) == expected

    def test_unknown_unit(self):
        assert normalize_unit("puñado") is None


class TestNormalizeColumnName:
    """Tests for header mapping."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Nombre", "name"),
            ("PRODUCT", "name"),
            ("Cantidad", "quantity"),
            ("Fecha de vencimiento", "fecha_de_vencimiento"),
            ("Fecha vencimiento", "expiration_date"),
            ("expiry date", "expiration_date"),
        ],
    )
    def test_mapping(self, raw, expected):
        assert normalize_column_name(raw) == expected


class TestParseDate:
    """Tests for spreadsheet date parsing."""

    def test_iso(self):
        assert parse_date("2025-01-15") == date(2025, 1, 15)

    def test_day_month_year(self):
        assert parse_date("15/01/2025") == date(2025, 1, 15)
        assert parse_date("5-3-2025") == date(2025, 3, 5)

    def test_excel_serial_number(self):
        assert parse_date(45672) == date(2025, 1, 15)

    def test_datetime_and_timestamp(self):
        assert parse_date(datetime(2025, 1, 15, 10, 30)) == date(2025, 1, 15)
        assert parse_date(pd.Timestamp("2025-01-15")) == date(2025, 1, 15)

    @pytest.mark.parametrize(
        "value", [None, "", "  ", float("nan"), "mañana", "2025-13-01", 99999999, float("inf")]
    )
    def test_unparseable(self, value):
        assert parse_date(value) is None


class TestParseRow:
    """Tests for per-row validation."""

    def test_defaults(self):
        row = parse_row(1, {"name": "Sal"})
        assert row.quantity == 1
        assert row.unit == "unidades"
        assert row.selected is True
        assert row.error is None

    def test_decimal_comma(self):
        assert parse_row(1, {"name": "Queso", "quantity": "0,5", "unit": "kg"}).quantity == 0.5

    def test_collects_all_errors(self):
        row = parse_row(3, {"name": "", "quantity": "-2", "unit": "puñado"})
        assert row.row == 3
        assert row.selected is False
        assert row.error == "Name required, Invalid quantity, Invalid unit: puñado"

    def test_non_numeric_quantity(self):
        assert parse_row(1, {"name": "Pan", "quantity": "muchos"}).error == "Invalid quantity"


def test_parse_csv_with_english_headers():
    content = b"name,quantity,unit,expiration\nMilk,2,liters,2030-01-15\n,,,\nRice,1,kg,\n"

    rows = parse_spreadsheet(content, "pantry.csv")

    assert [(row.name, row.quantity, row.unit) for row in rows] == [
        ("Milk", 2, "L"),
        ("Rice", 1, "kg"),
    ]
    assert rows[0].expiration_date == date(2030, 1, 15)


def test_parse_excel():
    frame = pd.DataFrame(
        {
            "Producto": ["Tomates", "Aceite"],
            "Cantidad": [6, 1],
            "Unidad": ["unidades", "botella"],
            "Caducidad": [pd.Timestamp("2030-01-10"), None],
        }
    )
    buffer = io.BytesIO()
    frame.to_excel(buffer, index=False)

    rows = parse_spreadsheet(buffer.getvalue(), "despensa.xlsx")

    assert [row.name for row in rows] == ["Tomates", "Aceite"]
    assert rows[0].quantity == 6
    assert rows[0].expiration_date == date(2030, 1, 10)
    assert rows[1].unit == "botellas"
    assert rows[1].expiration_date is None


def test_unsupported_extension():
    with pytest.raises(UnsupportedFileError):
        parse_spreadsheet(b"data", "pantry.json")


def test_template_round_trips_through_parser():
    rows = parse_spreadsheet(generate_template_csv().encode(), "plantilla.csv")
    assert len(rows) == 4
    assert all(row.error is None for row in rows)
    assert rows[0].name == "Leche"


@pytest.mark.parametrize("filename", ["despensa.xlsx", "despensa.xls"])
def test_corrupt_excel_is_unsupported(filename):
    with pytest.raises(UnsupportedFileError):
        parse_spreadsheet(b"PK\x03\x04" + b"x" * 100, filename)
