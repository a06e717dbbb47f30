"""
CafeStaff Backend — Cafe Route Handlers
=========================================

What:  /api/cafes: ranked listing, create/update (multipart, optional logo),
       cascade delete, and logo streaming.
How:   Routes read the request, call CafeService/ReportingService, and set
       status codes and headers. Errors propagate to the global handlers.

Request Flow (create/update):
    1. Client sends multipart/form-data: name, description, location, [logo]
    2. FastAPI parses Form fields and the optional UploadFile
    3. The logo bytes are read into memory (bounded by the size check)
    4. CafeService validates, stores the logo, then writes the row
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from fastapi.responses import StreamingResponse

from cafestaff.dependencies import get_asset_store, get_cafe_service, get_reporting_service
from cafestaff.schemas.cafe import (
    CafeDeleteResponse,
    CafeListItem,
    CafeResponse,
    CafeUpdateResponse,
)
from cafestaff.schemas.common import ErrorResponse
from cafestaff.services.asset_store import AssetStore
from cafestaff.services.cafe_service import CafeService
from cafestaff.services.reporting_service import ReportingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Cafes"])


@router.get(
    "/cafes",
    response_model=list[CafeListItem],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List cafes ranked by employee count",
)
async def list_cafes(
    response: Response,
    location: str | None = Query(
        default=None,
        description="Case-insensitive substring of the cafe location",
    ),
    reporting: ReportingService = Depends(get_reporting_service),
) -> list[CafeListItem]:
    """
    Cafes with their current headcount, busiest first.

    An unmatched location filter returns an empty list, not 404.
    """
    cafes = await reporting.cafes_by_popularity(location=location)
    response.headers["X-Total-Count"] = str(len(cafes))
    return cafes


@router.post(
    "/cafes",
    status_code=201,
    response_model=CafeResponse,
    responses={
        400: {"description": "Missing field or invalid logo", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a cafe",
)
async def create_cafe(
    name: str = Form(..., description="Cafe name"),
    description: str = Form(default="", description="Short description"),
    location: str = Form(..., description="Free-text location"),
    logo: UploadFile | None = File(
        default=None,
        description="Logo image (PNG or JPEG, max 5MB)",
    ),
    image: UploadFile | None = File(
        default=None,
        description="Same logo under its alternative field name",
    ),
    cafes: CafeService = Depends(get_cafe_service),
) -> CafeResponse:
    """Create a cafe; the logo is optional."""
    upload = logo if logo is not None else image
    logo_filename, logo_content, logo_size = await _read_logo(upload)
    return await cafes.create_cafe(
        name=name,
        description=description,
        location=location,
        logo_filename=logo_filename,
        logo_content=logo_content,
        logo_size=logo_size,
    )


@router.put(
    "/cafes/{cafe_id}",
    response_model=CafeUpdateResponse,
    responses={
        400: {"description": "Blank field or invalid logo", "model": ErrorResponse},
        404: {"description": "Cafe not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update a cafe",
)
async def update_cafe(
    cafe_id: str,
    name: str | None = Form(default=None),
    description: str | None = Form(default=None),
    location: str | None = Form(default=None),
    logo: UploadFile | None = File(default=None),
    image: UploadFile | None = File(default=None),
    cafes: CafeService = Depends(get_cafe_service),
) -> CafeUpdateResponse:
    """
    Partial update. Fields left out of the form are unchanged.

    A new logo replaces the old one; if the old file cannot be removed the
    update still succeeds and the response carries a warning.
    """
    upload = logo if logo is not None else image
    logo_filename, logo_content, logo_size = await _read_logo(upload)
    return await cafes.update_cafe(
        cafe_id,
        name=name,
        description=description,
        location=location,
        logo_filename=logo_filename,
        logo_content=logo_content,
        logo_size=logo_size,
    )


@router.delete(
    "/cafes/{cafe_id}",
    response_model=CafeDeleteResponse,
    responses={
        404: {"description": "Cafe not found", "model": ErrorResponse},
        500: {"description": "Server error (nothing deleted)", "model": ErrorResponse},
    },
    summary="Delete a cafe and every employee assigned to it",
)
async def delete_cafe(
    cafe_id: str,
    cafes: CafeService = Depends(get_cafe_service),
) -> CafeDeleteResponse:
    return await cafes.delete_cafe(cafe_id)


@router.get(
    "/cafes/logos/{asset_ref:path}",
    summary="Serve a cafe logo",
    responses={
        200: {"description": "Logo image"},
        400: {"description": "Invalid logo reference", "model": ErrorResponse},
        404: {"description": "Logo not found", "model": ErrorResponse},
    },
)
async def get_logo(
    asset_ref: str,
    asset_store: AssetStore = Depends(get_asset_store),
) -> StreamingResponse:
    """
    Stream a stored logo.

    Logo files are never rewritten in place (a replacement gets a new
    reference), so clients may cache them for a day.
    """
    chunks = asset_store.open_stream(asset_ref)
    return StreamingResponse(
        chunks,
        media_type=asset_store.media_type(asset_ref),
        headers={"Cache-Control": "public, max-age=86400"},
    )


async def _read_logo(logo: UploadFile | None):
    """Returns (filename, content, declared size), or Nones without an upload."""
    if logo is None or not logo.filename:
        return None, None, None
    try:
        content = await logo.read()
    finally:
        await logo.close()
    logger.info("Received logo upload: filename=%s, size=%d bytes", logo.filename, len(content))
    return logo.filename, content, logo.size
