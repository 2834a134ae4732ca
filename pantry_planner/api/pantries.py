"""Pantry and pantry item API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from pantry_planner.api.dependencies import get_current_user, get_pantry_service
from pantry_planner.config import get_settings
from pantry_planner.database import get_db
from pantry_planner.models.pantry import Pantry, PantryItem
from pantry_planner.models.user import User
from pantry_planner.schemas.pantry import (
    ExpiringItemsResponse,
    ImportPreviewResponse,
    PantryBulkAddRequest,
    PantryBulkAddResponse,
    PantryBulkDeleteResponse,
    PantryCreate,
    PantryItemCreate,
    PantryItemMoveRequest,
    PantryItemMoveResponse,
    PantryItemResponse,
    PantryItemUpdate,
    PantryResponse,
    PantryUpdate,
)
from pantry_planner.services.availability import normalize_name
from pantry_planner.services.bulk_import import generate_template_csv, parse_spreadsheet
from pantry_planner.services.pantry_service import PantryService
from pantry_planner.services.realtime import PantryEventType, publish_pantry_event

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/api/v1/pantries", tags=["pantries"])

MAX_IMPORT_BYTES = 5 * 1024 * 1024


def build_pantry_response(db: Session, pantry: Pantry) -> PantryResponse:
    """Build pantry response with item count."""
    item_count = (
        db.query(func.count(PantryItem.id)).filter(PantryItem.pantry_id == pantry.id).scalar()
    )
    response = PantryResponse.model_validate(pantry)
    response.item_count = item_count or 0
    return response


def get_pantry_item(db: Session, pantry: Pantry, item_id: int) -> PantryItem:
    """Get an item of the given pantry, or 404."""
    item = (
        db.query(PantryItem)
        .filter(PantryItem.id == item_id, PantryItem.pantry_id == pantry.id)
        .first()
    )
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pantry item not found")
    return item


# --- Pantries ---


@router.get("", response_model=list[PantryResponse])
def list_pantries(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
):
    """List the user's pantries, default first."""
    service.get_default_pantry(current_user.id)
    pantries = (
        db.query(Pantry)
        .filter(Pantry.user_id == current_user.id)
        .order_by(Pantry.is_default.desc(), Pantry.id)
        .all()
    )
    return [build_pantry_response(db, pantry) for pantry in pantries]


@router.post("", response_model=PantryResponse, status_code=status.HTTP_201_CREATED)
def create_pantry(
    pantry_data: PantryCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create an additional pantry."""
    existing = (
        db.query(Pantry)
        .filter(
            Pantry.user_id == current_user.id,
            func.lower(Pantry.name) == pantry_data.name.lower(),
        )
        .first()
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Pantry '{existing.name}' already exists",
        )

    pantry = Pantry(
        user_id=current_user.id,
        name=pantry_data.name,
        description=pantry_data.description,
        is_default=False,
    )
    db.add(pantry)
    db.commit()
    db.refresh(pantry)
    return build_pantry_response(db, pantry)


@router.put("/{pantry_id}", response_model=PantryResponse)
def update_pantry(
    pantry_id: int,
    pantry_data: PantryUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
):
    """Rename a pantry or change its description."""
    pantry = service.get_pantry(pantry_id, current_user.id)
    for field, value in pantry_data.model_dump(exclude_unset=True).items():
        setattr(pantry, field, value)
    db.commit()
    db.refresh(pantry)
    return build_pantry_response(db, pantry)


@router.delete("/{pantry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_pantry(
    pantry_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
):
    """Delete a pantry and its items. The default pantry cannot be deleted."""
    pantry = service.get_pantry(pantry_id, current_user.id)
    if pantry.is_default:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The default pantry cannot be deleted",
        )
    db.delete(pantry)
    db.commit()
    logger.info(f"Deleted pantry {pantry_id} of user {current_user.id}")


@router.get("/product-names", response_model=list[str])
def list_product_names(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
    q: Annotated[str | None, Query(max_length=255)] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
):
    """Names the user has stocked before, for autocomplete."""
    return service.product_names(current_user.id, search=q, limit=limit)


# --- Spreadsheet import ---


@router.get("/import/template")
def download_import_template():
    """Download a CSV template for bulk import."""
    return Response(
        content=generate_template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="plantilla_despensa.csv"'},
    )


@router.post("/{pantry_id}/import/preview", response_model=ImportPreviewResponse)
async def preview_import(
    pantry_id: int,
    file: Annotated[UploadFile, File(description="CSV or Excel file (.csv, .xlsx, .xls)")],
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
):
    """Parse a spreadsheet and return its rows for review.

    Nothing is stored. The client sends the selected rows to the bulk endpoint.

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    service.get_pantry(pantry_id, current_user.id)

    content = await file.read()
    if len(content) > MAX_IMPORT_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File too large. Maximum size is 5MB.",
        )

    try:
        rows = parse_spreadsheet(content, file.filename or "")
    except ValueError as e:
        # Unsupported extensions, CSV parser errors and corrupt Excel files
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    error_count = sum(1 for row in rows if row.error)
    return ImportPreviewResponse(
        items=rows,
        valid_count=len(rows) - error_count,
        error_count=error_count,
    )


# --- Pantry items ---


@router.get("/{pantry_id}/items", response_model=list[PantryItemResponse])
def list_items(
    pantry_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
    q: Annotated[str | None, Query(max_length=255)] = None,
):
    """List a pantry's items, newest first, optionally filtered by name."""
    pantry = service.get_pantry(pantry_id, current_user.id)
    return service.list_items(pantry.id, search=q)


@router.post(
    "/{pantry_id}/items",
    response_model=PantryItemResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_item(
    pantry_id: int,
    item_data: PantryItemCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
):
    """Add an item to a pantry."""
    pantry = service.get_pantry(pantry_id, current_user.id)

    item = service.build_item(pantry, item_data)
    db.add(item)
    db.commit()
    db.refresh(item)

    publish_pantry_event(
        pantry.id,
        PantryEventType.ITEM_CREATED,
        PantryItemResponse.model_validate(item).model_dump(mode="json"),
    )
    return item


@router.post("/{pantry_id}/items/bulk", response_model=PantryBulkAddResponse)
def bulk_add_items(
    pantry_id: int,
    request: PantryBulkAddRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
):
    """Add several items at once (imports, receipt scans, post-shopping)."""
    pantry = service.get_pantry(pantry_id, current_user.id)
    items, deleted = service.bulk_add(pantry, request.items, replace=request.replace)
    return PantryBulkAddResponse(added=len(items), deleted=deleted, items=items)


@router.delete("/{pantry_id}/items", response_model=PantryBulkDeleteResponse)
def delete_all_items(
    pantry_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
):
    """Delete every item in a pantry."""
    pantry = service.get_pantry(pantry_id, current_user.id)
    deleted = (
        db.query(PantryItem)
        .filter(PantryItem.pantry_id == pantry.id)
        .delete(synchronize_session=False)
    )
    db.commit()

    if deleted:
        publish_pantry_event(pantry.id, PantryEventType.ITEMS_BULK_DELETED, {"deleted": deleted})
    return PantryBulkDeleteResponse(deleted=deleted)


@router.post("/{pantry_id}/items/move", response_model=PantryItemMoveResponse)
def move_items(
    pantry_id: int,
    request: PantryItemMoveRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
):
    """Move items to another of the user's pantries."""
    source = service.get_pantry(pantry_id, current_user.id)
    target = service.get_pantry(request.target_pantry_id, current_user.id)
    moved = service.move_items(request.item_ids, source, target)
    return PantryItemMoveResponse(moved=moved, target_pantry_id=target.id)


@router.get("/{pantry_id}/items/expiring", response_model=ExpiringItemsResponse)
def list_expiring_items(
    pantry_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
    days: Annotated[int | None, Query(ge=0, le=365)] = None,
):
    """List expired items and items expiring within `days` days."""
    pantry = service.get_pantry(pantry_id, current_user.id)
    if days is None:
        days = settings.expiring_soon_days
    expired, expiring = service.expiring_items(pantry.id, days)
    return ExpiringItemsResponse(days=days, expired=expired, expiring=expiring)


@router.get("/{pantry_id}/items/{item_id}", response_model=PantryItemResponse)
def get_item(
    pantry_id: int,
    item_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
):
    """Get a specific pantry item."""
    pantry = service.get_pantry(pantry_id, current_user.id)
    return get_pantry_item(db, pantry, item_id)


@router.put("/{pantry_id}/items/{item_id}", response_model=PantryItemResponse)
def update_item(
    pantry_id: int,
    item_id: int,
    item_data: PantryItemUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
):
    """Update a pantry item. Only the fields sent are changed."""
    pantry = service.get_pantry(pantry_id, current_user.id)
    item = get_pantry_item(db, pantry, item_id)

    updates = item_data.model_dump(exclude_unset=True)
    for field in ("name", "quantity", "unit"):
        # Required columns
        if field in updates and updates[field] is None:
            del updates[field]
    for field, value in updates.items():
        setattr(item, field, value)
    if "name" in updates:
        item.normalized_name = normalize_name(item.name)
    if updates.get("image_url"):
        service.remember_image(current_user.id, item.normalized_name, item.image_url)

    db.commit()
    db.refresh(item)

    publish_pantry_event(
        pantry.id,
        PantryEventType.ITEM_UPDATED,
        PantryItemResponse.model_validate(item).model_dump(mode="json"),
    )
    return item


@router.delete("/{pantry_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    pantry_id: int,
    item_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[PantryService, Depends(get_pantry_service)],
):
    """Remove an item from a pantry."""
    pantry = service.get_pantry(pantry_id, current_user.id)
    item = get_pantry_item(db, pantry, item_id)
    db.delete(item)
    db.commit()

    publish_pantry_event(pantry.id, PantryEventType.ITEM_DELETED, {"id": item_id})
