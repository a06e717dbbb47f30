"""
CafeStaff Backend — Employee Request/Response Schemas
=======================================================

What:  Pydantic models for the employee endpoints.

Request aliases:
    Clients may send `email`/`phone` or `email_address`/`phone_number`;
    responses always use the long names.

Partial updates:
    EmployeeUpdate distinguishes an omitted `cafe_id` (keep the current
    assignment) from an explicit `null` (remove it). Services read
    `model_fields_set` to tell the two apart.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from cafestaff.schemas.cafe import CafeSummary

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PHONE_PATTERN = r"^[0-9+\-() ]{3,32}$"


def _strip_required(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    stripped = value.strip()
    if not stripped:
        raise ValueError("must not be blank")
    return stripped


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class EmployeeCreate(BaseModel):
    """Body of POST /api/employees."""
    name: str = Field(min_length=1, max_length=100)
    email_address: str = Field(
        pattern=EMAIL_PATTERN,
        max_length=255,
        validation_alias=AliasChoices("email_address", "email"),
    )
    phone_number: str = Field(
        pattern=PHONE_PATTERN,
        validation_alias=AliasChoices("phone_number", "phone"),
    )
    gender: str = Field(min_length=1, max_length=16)
    cafe_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("cafe_id", "cafeId"),
        description="Cafe to assign the new employee to",
    )

    @field_validator("name", "gender")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _strip_required(v)


class EmployeeUpdate(BaseModel):
    """
    Body of PUT /api/employees/{id}. Every field is optional.

    cafe_id:
        omitted → assignment unchanged
        null    → assignment removed
        "<id>"  → reassigned; start_date resets only if the cafe differs
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email_address: Optional[str] = Field(
        default=None,
        pattern=EMAIL_PATTERN,
        max_length=255,
        validation_alias=AliasChoices("email_address", "email"),
    )
    phone_number: Optional[str] = Field(
        default=None,
        pattern=PHONE_PATTERN,
        validation_alias=AliasChoices("phone_number", "phone"),
    )
    gender: Optional[str] = Field(default=None, min_length=1, max_length=16)
    cafe_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("cafe_id", "cafeId"),
    )

    @field_validator("name", "gender")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _strip_required(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class EmployeeResponse(BaseModel):
    """
    What:  An employee with its current assignment, if any.
    Who:   Returned by POST and PUT /api/employees.
    """
    id: str = Field(description="Employee identifier, e.g. UI4K7Q2ZB")
    name: str
    email_address: str
    phone_number: str
    gender: str
    cafe_id: Optional[str] = Field(default=None, description="Assigned cafe, if any")
    start_date: Optional[datetime] = Field(
        default=None,
        description="When the current assignment began (UTC)"
    )


class EmployeeListItem(BaseModel):
    """
    What:  Employee joined with its cafe and tenure.
    Who:   Returned by GET /api/employees, sorted by days_worked descending
           with unassigned employees last.
    """
    id: str
    name: str
    email_address: str
    phone_number: str
    gender: str
    cafe: Optional[CafeSummary] = Field(default=None, description="Null when unassigned")
    days_worked: Optional[int] = Field(
        default=None,
        description="Whole days since the current assignment began; null when unassigned"
    )


class EmployeeDeleteResponse(BaseModel):
    message: str = Field(default="Employee deleted")
    employee_id: str

