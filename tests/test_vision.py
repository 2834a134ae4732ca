"""Tests for product identification and receipt scanning."""

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pantry_planner.models.receipt_scan import ReceiptScan
from pantry_planner.schemas.vision import ParsedReceiptItem
from pantry_planner.services.llm import AIResponseError
from pantry_planner.services.vision_service import VisionService

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake image"


class TestVisionService:
    """Tests for VisionService with a mocked LLM."""

    @pytest.mark.asyncio
    async def test_identify_product_normalizes_fields(self, mock_llm):
        mock_llm.generate_json.return_value = {
            "name": "Leche entera",
            "brand": "Colun",
            "category": "dairy",
            "suggested_quantity": 1,
            "suggested_unit": "litro",
            "confidence": 0.9,
        }
        service = VisionService(mock_llm)

        product = await service.identify_product(PNG_BYTES, "image/png")

        assert product.name == "Leche entera"
        assert product.suggested_unit == "L"
        assert product.category == "otros"
        image = mock_llm.generate_json.call_args.kwargs["images"][0]
        assert image.media_type == "image/png"
        assert image.data == PNG_BYTES

    @pytest.mark.asyncio
    async def test_identify_unrecognized_product(self, mock_llm):
        mock_llm.generate_json.return_value = {
            "name": None,
            "confidence": 0,
            "error": "No es un alimento",
        }
        product = await VisionService(mock_llm).identify_product(PNG_BYTES, "image/png")
        assert product.name is None
        assert product.error == "No es un alimento"

    @pytest.mark.asyncio
    async def test_identify_invalid_response(self, mock_llm):
        mock_llm.generate_json.return_value = ["not", "an", "object"]
        with pytest.raises(AIResponseError):
            await VisionService(mock_llm).identify_product(PNG_BYTES, "image/png")

    @pytest.mark.asyncio
    async def test_parse_receipt_image(self, mock_llm):
        mock_llm.generate_json.return_value = {
            "items": [
                {"name": "Leche", "quantity": 2, "unit": "L"},
                {"name": "Arroz", "quantity": "1", "unit": "kilos"},
                {"name": "Pan amasado", "quantity": None, "unit": "bolsa"},
                {"name": "  ", "quantity": 1},
                "TOTAL 12.990",
            ]
        }

        items = await VisionService(mock_llm).parse_receipt_image(PNG_BYTES, "image/jpeg")

        assert items == [
            ParsedReceiptItem(name="Leche", quantity=2, unit="L"),
            ParsedReceiptItem(name="Arroz", quantity=1, unit="kg"),
            ParsedReceiptItem(name="Pan amasado", quantity=1, unit="unidades"),
        ]

    @pytest.mark.asyncio
    async def test_parse_receipt_without_items(self, mock_llm):
        mock_llm.generate_json.return_value = {"total": 12990}
        with pytest.raises(AIResponseError):
            await VisionService(mock_llm).parse_receipt_image(PNG_BYTES, "image/jpeg")


# --- API ---


def test_identify_endpoint(client, auth_headers, mock_llm):
    mock_llm.generate_json.return_value = {
        "name": "Atún en agua",
        "category": "enlatados",
        "suggested_quantity": 1,
        "suggested_unit": "lata",
        "confidence": 0.8,
    }

    response = client.post(
        "/api/v1/vision/identify",
        headers=auth_headers,
        files={"file": ("atun.png", PNG_BYTES, "image/png")},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "enlatados"
    assert data["suggested_unit"] == "latas"


def test_identify_rejects_non_images(client, auth_headers):
    response = client.post(
        "/api/v1/vision/identify",
        headers=auth_headers,
        files={"file": ("notes.txt", b"hola", "text/plain")},
    )
    assert response.status_code == 400


def test_identify_ai_not_configured(client, auth_headers, mock_llm):
    mock_llm.is_configured = False
    response = client.post(
        "/api/v1/vision/identify",
        headers=auth_headers,
        files={"file": ("atun.png", PNG_BYTES, "image/png")},
    )
    assert response.status_code == 400


def test_scan_receipt_queues_task(client, auth_headers):
    with patch("pantry_planner.tasks.receipt_scan.process_receipt_scan.delay") as mock_delay:
        response = client.post(
            "/api/v1/vision/scan-receipt",
            headers=auth_headers,
            files={"file": ("boleta.jpg", PNG_BYTES, "image/jpeg")},
        )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "pending"

    scan_id, image_b64, media_type = mock_delay.call_args[0]
    assert scan_id == data["id"]
    assert base64.b64decode(image_b64) == PNG_BYTES
    assert media_type == "image/jpeg"

    response = client.get(f"/api/v1/vision/scan-receipt/{scan_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "pending"
    assert response.json()["parsed_items"] is None


def test_get_unknown_receipt_scan(client, auth_headers):
    response = client.get("/api/v1/vision/scan-receipt/99999", headers=auth_headers)
    assert response.status_code == 404


# --- Celery task ---


def create_scan(db, user_id: int) -> int:
    scan = ReceiptScan(user_id=user_id, status="pending")
    db.add(scan)
    db.commit()
    return scan.id


def test_process_receipt_scan_stores_items(db, auth_headers, session_factory):
    from pantry_planner.tasks.receipt_scan import process_receipt_scan

    scan_id = create_scan(db, auth_headers.user_id)
    mock_service = MagicMock()
    mock_service.is_configured = True
    mock_service.parse_receipt_image = AsyncMock(
        return_value=[ParsedReceiptItem(name="Leche", quantity=2, unit="L")]
    )

    with patch("pantry_planner.tasks.receipt_scan.VisionService", return_value=mock_service):
        result = process_receipt_scan(scan_id, base64.b64encode(PNG_BYTES).decode(), "image/png")

    assert result == {"status": "completed", "item_count": 1}
    db.expire_all()
    scan = db.get(ReceiptScan, scan_id)
    assert scan.status == "completed"
    assert scan.parsed_items == [{"name": "Leche", "quantity": 2, "unit": "L"}]
    assert scan.processed_at is not None


def test_process_receipt_scan_records_failure(db, auth_headers, session_factory):
    from pantry_planner.tasks.receipt_scan import process_receipt_scan

    scan_id = create_scan(db, auth_headers.user_id)
    mock_service = MagicMock()
    mock_service.is_configured = True
    mock_service.parse_receipt_image = AsyncMock(side_effect=AIResponseError("Bad JSON"))

    with patch("pantry_planner.tasks.receipt_scan.VisionService", return_value=mock_service):
        result = process_receipt_scan(scan_id, base64.b64encode(PNG_BYTES).decode(), "image/png")

    assert result == {"error": "Bad JSON"}
    db.expire_all()
    scan = db.get(ReceiptScan, scan_id)
    assert scan.status == "failed"
    assert scan.error_message == "Bad JSON"


def test_process_missing_scan(session_factory):
    from pantry_planner.tasks.receipt_scan import process_receipt_scan

    assert process_receipt_scan(99999, "", "image/png") == {"error": "Scan not found"}
