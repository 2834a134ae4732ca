"""Celery task that reads grocery receipts with the vision model."""

import asyncio
import base64
import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from pantry_planner.celery_app import app as celery_app
from pantry_planner.database import SessionLocal
from pantry_planner.models.receipt_scan import ReceiptScan
from pantry_planner.services.vision_service import VisionService

logger = logging.getLogger(__name__)


def _fail(db: Session, scan: ReceiptScan, message: str) -> dict:
    scan.status = "failed"
    scan.error_message = message
    scan.processed_at = datetime.now(UTC)
    db.commit()
    return {"error": message}


@celery_app.task(name="tasks.process_receipt_scan")
def process_receipt_scan(scan_id: int, image_data_b64: str, media_type: str) -> dict:
    """Parse a receipt image and store the items found on its scan record.

    Items are only stored for review. The client adds the ones it keeps
    through the pantry bulk endpoint, so a misread line never reaches stock.

    Args:
        scan_id: ID of the ReceiptScan record
        image_data_b64: Base64-encoded image data
        media_type: MIME type of the image

    Returns:
        Dict with the outcome, either the item count or an error message
    """
    db = SessionLocal()
    try:
        scan = db.get(ReceiptScan, scan_id)
        if scan is None:
            logger.error(f"ReceiptScan {scan_id} not found")
            return {"error": "Scan not found"}

        scan.status = "processing"
        db.commit()

        vision = VisionService()
        if not vision.is_configured:
            return _fail(db, scan, "Anthropic API not configured")

        try:
            items = asyncio.run(
                vision.parse_receipt_image(base64.b64decode(image_data_b64), media_type)
            )
        except Exception as e:
            logger.error(f"Receipt scan {scan_id} could not be parsed: {e}")
            return _fail(db, scan, str(e))

        scan.parsed_items = [item.model_dump() for item in items]
        scan.item_count = len(items)
        scan.status = "completed"
        scan.processed_at = datetime.now(UTC)
        db.commit()

        logger.info(f"Receipt scan {scan_id} completed with {len(items)} items")
        return {"status": "completed", "item_count": len(items)}
    finally:
        db.close()
