"""Vision API endpoints: product identification and receipt scanning."""

import base64
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from pantry_planner.api.dependencies import (
    get_current_user,
    get_vision_service,
    require_llm_service,
)
from pantry_planner.database import get_db
from pantry_planner.models.receipt_scan import ReceiptScan
from pantry_planner.models.user import User
from pantry_planner.schemas.vision import (
    ProductIdentification,
    ReceiptScanCreateResponse,
    ReceiptScanResponse,
)
from pantry_planner.services.llm import AIResponseError
from pantry_planner.services.vision_service import (
    ALLOWED_IMAGE_TYPES,
    MAX_IMAGE_BYTES,
    VisionService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/vision", tags=["vision"])


async def read_image(file: UploadFile) -> bytes:
    """Read an uploaded image, rejecting unsupported types and large files."""
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type. Allowed types: {', '.join(ALLOWED_IMAGE_TYPES)}",
        )

    image_data = await file.read()
    if len(image_data) > MAX_IMAGE_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File too large. Maximum size is 10MB.",
        )
    return image_data


@router.post("/identify", response_model=ProductIdentification)
async def identify_product(
    file: Annotated[UploadFile, File(description="Product photo (JPEG, PNG, GIF, or WebP)")],
    current_user: Annotated[User, Depends(get_current_user)],
    vision_service: Annotated[VisionService, Depends(get_vision_service)],
):
    """Identify a food product in a photo to prefill a new pantry item."""
    image_data = await read_image(file)
    try:
        return await vision_service.identify_product(image_data, file.content_type)
    except AIResponseError as e:
        logger.error(f"Product identification failed for user {current_user.id}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e


@router.post(
    "/scan-receipt",
    response_model=ReceiptScanCreateResponse,
    dependencies=[Depends(require_llm_service)],
)
async def scan_receipt(
    file: Annotated[UploadFile, File(description="Receipt image (JPEG, PNG, GIF, or WebP)")],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Upload a receipt image for scanning.

    The receipt will be processed asynchronously using Claude Vision.
    Poll the status endpoint to check when processing is complete, then add
    the reviewed items through the pantry bulk endpoint.

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    from pantry_planner.tasks.receipt_scan import process_receipt_scan

    image_data = await read_image(file)

    scan = ReceiptScan(user_id=current_user.id, status="pending")
    db.add(scan)
    db.commit()
    db.refresh(scan)

    # Queue async processing
    image_data_b64 = base64.b64encode(image_data).decode("utf-8")
    process_receipt_scan.delay(scan.id, image_data_b64, file.content_type)

    return ReceiptScanCreateResponse(
        id=scan.id,
        status="pending",
        message="Receipt uploaded successfully. Processing in background.",
    )


@router.get("/scan-receipt/{scan_id}", response_model=ReceiptScanResponse)
def get_receipt_scan(
    scan_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get the status and results of a receipt scan."""
    scan = (
        db.query(ReceiptScan)
        .filter(
            ReceiptScan.id == scan_id,
            ReceiptScan.user_id == current_user.id,
        )
        .first()
    )

    if not scan:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Receipt scan not found",
        )

    return scan
