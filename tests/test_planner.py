"""Meal planner tests."""

from datetime import date

import pytest
from fastapi import HTTPException

from pantry_planner.schemas.planner import MealPlanConfig, ShoppingListItem
from pantry_planner.services.meal_plan_service import (
    chunk_dates,
    count_days,
    dates_in_range,
    merge_shopping_lists,
    validate_config,
)


def meal(day: str, meal_type: str, name: str) -> dict:
    return {
        "date": day,
        "meal_type": meal_type,
        "recipe": {
            "name": name,
            "ingredients": [{"name": "Pollo", "quantity": 250, "unit": "g"}],
            "steps": ["Cocinar"],
        },
    }


# --- Date helpers ---


def test_count_days_inclusive():
    assert count_days(date(2025, 1, 6), date(2025, 1, 6)) == 1
    assert count_days(date(2025, 1, 6), date(2025, 1, 12)) == 7


def test_dates_in_range_crosses_month():
    dates = dates_in_range(date(2025, 1, 30), date(2025, 2, 2))
    assert dates == [date(2025, 1, 30), date(2025, 1, 31), date(2025, 2, 1), date(2025, 2, 2)]


def test_chunk_dates():
    dates = dates_in_range(date(2025, 1, 1), date(2025, 1, 10))
    chunks = chunk_dates(dates, 7)
    assert [len(chunk) for chunk in chunks] == [7, 3]
    assert chunks[1][0] == date(2025, 1, 8)


def test_validate_config_end_before_start():
    config = MealPlanConfig(
        start_date=date(2025, 1, 10), end_date=date(2025, 1, 9), meal_types=["cena"]
    )
    with pytest.raises(HTTPException) as exc_info:
        validate_config(config, max_days=14)
    assert exc_info.value.status_code == 400


def test_validate_config_too_long():
    config = MealPlanConfig(
        start_date=date(2025, 1, 1), end_date=date(2025, 1, 15), meal_types=["cena"]
    )
    with pytest.raises(HTTPException):
        validate_config(config, max_days=14)


def test_validate_config_max_length_allowed():
    config = MealPlanConfig(
        start_date=date(2025, 1, 1), end_date=date(2025, 1, 14), meal_types=["cena"]
    )
    validate_config(config, max_days=14)


# --- Shopping list merge ---


def test_merge_shopping_lists_sums_compatible_units():
    merged = merge_shopping_lists(
        [
            [ShoppingListItem(name="Pollo", quantity=500, unit="g", available=200, to_buy=300)],
            [ShoppingListItem(name="pollo", quantity=1, unit="kg", available=0.2, to_buy=0.8)],
        ]
    )
    assert len(merged) == 1
    assert merged[0].name == "Pollo"
    assert merged[0].unit == "g"
    assert merged[0].quantity == pytest.approx(1500)
    assert merged[0].to_buy == pytest.approx(1100)
    assert merged[0].available == 200


def test_merge_shopping_lists_keeps_incompatible_units_apart():
    merged = merge_shopping_lists(
        [
            [ShoppingListItem(name="Leche", quantity=1, unit="L", to_buy=1)],
            [ShoppingListItem(name="Leche", quantity=2, unit="botellas", to_buy=2)],
        ]
    )
    assert [(item.unit, item.quantity) for item in merged] == [("L", 1), ("botellas", 2)]


def test_merge_shopping_lists_does_not_mutate_input():
    first = ShoppingListItem(name="Arroz", quantity=1, unit="kg", to_buy=1)
    merge_shopping_lists([[first], [ShoppingListItem(name="Arroz", quantity=1, unit="kg")]])
    assert first.quantity == 1


# --- API ---


@pytest.fixture
def stocked_pantry(add_items):
    return add_items(
        {"name": "Pollo", "quantity": 1, "unit": "kg"},
        {"name": "Arroz", "quantity": 2, "unit": "kg"},
    )


def test_generate_short_plan_single_request(client, auth_headers, stocked_pantry, mock_llm):
    mock_llm.generate_json.return_value = {
        "meals": [
            meal("2025-01-07", "cena", "Pollo asado"),
            meal("2025-01-06", "cena", "Arroz con pollo"),
        ],
        "shopping_list": [{"name": "Limón", "quantity": 2, "unit": "unidades", "to_buy": 2}],
    }

    response = client.post(
        "/api/v1/planner/generate",
        headers=auth_headers,
        json={
            "config": {
                "start_date": "2025-01-06",
                "end_date": "2025-01-07",
                "meal_types": ["cena"],
                "servings": 4,
            }
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert mock_llm.generate_json.call_count == 1
    assert [m["date"] for m in data["meals"]] == ["2025-01-06", "2025-01-07"]
    assert data["meals"][0]["recipe"]["available_percentage"] == 100
    assert data["shopping_list"][0]["name"] == "Limón"
    assert data["config"]["servings"] == 4
    assert data["pantry_id"] == auth_headers.pantry_id

    prompt = mock_llm.generate_json.call_args.kwargs["prompt"]
    assert "Servings per meal: 4" in prompt
    assert "2025-01-06, 2025-01-07" in prompt


def test_generate_long_plan_in_weekly_chunks(client, auth_headers, stocked_pantry, mock_llm):
    """10 days x 2 meals exceeds the single-request limit."""
    mock_llm.generate_json.side_effect = [
        {
            "meals": [
                meal("2025-01-01", "cena", "Pollo asado"),
                meal("2025-01-01", "almuerzo", "Arroz con pollo"),
                meal("2024-12-31", "cena", "Fuera de rango"),
            ],
            "shopping_list": [
                {"name": "Pollo", "quantity": 500, "unit": "g", "available": 1000, "to_buy": 0},
            ],
        },
        {
            "meals": [meal("2025-01-08", "almuerzo", "Cazuela")],
            "shopping_list": [
                {"name": "pollo", "quantity": 1.5, "unit": "kg", "available": 1, "to_buy": 1},
                {"name": "Zapallo", "quantity": 1, "unit": "kg", "to_buy": 1},
            ],
        },
    ]

    response = client.post(
        "/api/v1/planner/generate",
        headers=auth_headers,
        json={
            "config": {
                "start_date": "2025-01-01",
                "end_date": "2025-01-10",
                "meal_types": ["almuerzo", "cena"],
            }
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert mock_llm.generate_json.call_count == 2

    first_prompt = mock_llm.generate_json.call_args_list[0].kwargs["prompt"]
    second_prompt = mock_llm.generate_json.call_args_list[1].kwargs["prompt"]
    assert "2025-01-01 to 2025-01-07 (7 days)" in first_prompt
    assert "2025-01-08 to 2025-01-10 (3 days)" in second_prompt

    assert [(m["date"], m["meal_type"]) for m in data["meals"]] == [
        ("2025-01-01", "almuerzo"),
        ("2025-01-01", "cena"),
        ("2025-01-08", "almuerzo"),
    ]

    shopping = {item["name"]: item for item in data["shopping_list"]}
    assert shopping["Pollo"]["quantity"] == pytest.approx(2000)
    assert shopping["Pollo"]["to_buy"] == pytest.approx(1000)
    assert shopping["Pollo"]["available"] == 1000
    assert "Zapallo" in shopping


@pytest.mark.parametrize(
    ("end_date", "meal_types", "expected_requests"),
    [
        ("2025-01-05", ["desayuno", "almuerzo", "cena"], 1),  # 15 meals
        ("2025-01-08", ["almuerzo", "cena"], 2),  # 16 meals
    ],
)
def test_chunking_threshold(
    client, auth_headers, stocked_pantry, mock_llm, end_date, meal_types, expected_requests
):
    mock_llm.generate_json.return_value = {
        "meals": [meal("2025-01-01", "cena", "Arroz con pollo")],
        "shopping_list": [],
    }

    response = client.post(
        "/api/v1/planner/generate",
        headers=auth_headers,
        json={
            "config": {
                "start_date": "2025-01-01",
                "end_date": end_date,
                "meal_types": meal_types,
            }
        },
    )
    assert response.status_code == 201
    assert mock_llm.generate_json.call_count == expected_requests


def test_generate_plan_too_long(client, auth_headers, stocked_pantry, mock_llm):
    response = client.post(
        "/api/v1/planner/generate",
        headers=auth_headers,
        json={
            "config": {
                "start_date": "2025-01-01",
                "end_date": "2025-01-15",
                "meal_types": ["cena"],
            }
        },
    )
    assert response.status_code == 400
    mock_llm.generate_json.assert_not_called()


def test_generate_plan_end_before_start(client, auth_headers, stocked_pantry):
    response = client.post(
        "/api/v1/planner/generate",
        headers=auth_headers,
        json={
            "config": {
                "start_date": "2025-01-05",
                "end_date": "2025-01-01",
                "meal_types": ["cena"],
            }
        },
    )
    assert response.status_code == 400


def test_generate_plan_unknown_meal_type(client, auth_headers, stocked_pantry):
    response = client.post(
        "/api/v1/planner/generate",
        headers=auth_headers,
        json={
            "config": {
                "start_date": "2025-01-01",
                "end_date": "2025-01-02",
                "meal_types": ["brunch"],
            }
        },
    )
    assert response.status_code == 422


def test_generate_plan_no_usable_meals(client, auth_headers, stocked_pantry, mock_llm):
    mock_llm.generate_json.return_value = {"meals": [], "shopping_list": []}

    response = client.post(
        "/api/v1/planner/generate",
        headers=auth_headers,
        json={
            "config": {
                "start_date": "2025-01-01",
                "end_date": "2025-01-01",
                "meal_types": ["cena"],
            }
        },
    )
    assert response.status_code == 502


def test_list_get_and_delete_plans(client, auth_headers, stocked_pantry, mock_llm):
    mock_llm.generate_json.return_value = {
        "meals": [meal("2025-01-06", "almuerzo", "Arroz con pollo")],
        "shopping_list": [],
    }
    plan = client.post(
        "/api/v1/planner/generate",
        headers=auth_headers,
        json={
            "config": {
                "start_date": "2025-01-06",
                "end_date": "2025-01-06",
                "meal_types": ["almuerzo"],
            }
        },
    ).json()

    response = client.get("/api/v1/planner/plans", headers=auth_headers)
    assert response.status_code == 200
    summaries = response.json()
    assert len(summaries) == 1
    assert summaries[0]["id"] == plan["id"]
    assert summaries[0]["meal_count"] == 1

    response = client.get(f"/api/v1/planner/plans/{plan['id']}", headers=auth_headers)
    assert response.json()["meals"][0]["recipe"]["name"] == "Arroz con pollo"

    response = client.delete(f"/api/v1/planner/plans/{plan['id']}", headers=auth_headers)
    assert response.status_code == 204
    response = client.get(f"/api/v1/planner/plans/{plan['id']}", headers=auth_headers)
    assert response.status_code == 404
