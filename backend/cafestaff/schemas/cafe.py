"""
CafeStaff Backend — Cafe Request/Response Schemas
===================================================

What:  Pydantic models defining the cafe part of the API contract.
Why:   Automatic serialization and OpenAPI docs; the ORM model never leaks
       to clients directly.

Cafe writes arrive as multipart forms (they may carry a logo file), so
there is no request-body model here: the route declares Form fields and
FastAPI validates them.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class CafeResponse(BaseModel):
    """
    What:  Full representation of a cafe.
    Who:   Returned by POST /api/cafes and embedded in list/update responses.
    """
    id: str = Field(description="Cafe identifier (UUID4)")
    name: str = Field(description="Display name")
    description: str = Field(description="Short description")
    location: str = Field(description="Free-text location")
    logo: Optional[str] = Field(
        default=None,
        description="Asset reference of the logo (null when none was uploaded)"
    )
    logo_url: Optional[str] = Field(
        default=None,
        description="URL path serving the logo image"
    )
    created_at: datetime = Field(description="When the cafe was created (UTC)")

    model_config = {"from_attributes": True}


class CafeListItem(CafeResponse):
    """
    What:  Cafe with its current headcount.
    Who:   Returned by GET /api/cafes, sorted by employee_count descending.
    """
    employee_count: int = Field(description="Employees currently assigned to this cafe")


class CafeUpdateResponse(CafeResponse):
    """
    What:  Updated cafe plus any non-fatal warnings.
    When:  A replaced logo could not be removed from storage after the new
           reference was saved. The update itself succeeded.
    """
    warnings: List[str] = Field(default_factory=list)


class CafeDeleteResponse(BaseModel):
    """
    What:  Confirmation of a cascade delete.
    Why deleted_employee_ids: The client removes those employees from its
           own state without refetching.
    """
    message: str = Field(default="Cafe and associated employees deleted")
    cafe_id: str
    deleted_employee_ids: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class CafeSummary(BaseModel):
    """Compact cafe embedded in employee listings."""
    id: str
    name: str
    location: str
    logo_url: Optional[str] = None


def logo_url(asset_ref: Optional[str]) -> Optional[str]:
    """URL path of the route that streams a stored logo."""
    return f"/api/cafes/logos/{asset_ref}" if asset_ref else None
