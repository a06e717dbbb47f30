"""
CafeStaff Backend — Employee SQLAlchemy Model
===============================================

What:  ORM model for the `employees` table.

Identifier format:
    `UI` followed by 7 characters from A-Z0-9, e.g. `UI4K7Q2ZB`.
    Generated in Python with the `secrets` module. There is no collision
    check by construction; EmployeeService inserts and retries with a new
    identifier when the primary key is already taken.
"""

import secrets
import string
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from cafestaff.database import Base
from cafestaff.timeutils import utcnow

EMPLOYEE_ID_PREFIX = "UI"
EMPLOYEE_ID_LENGTH = 7
EMPLOYEE_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_employee_id() -> str:
    """Returns `UI` + 7 random uppercase alphanumeric characters."""
    suffix = "".join(
        secrets.choice(EMPLOYEE_ID_ALPHABET) for _ in range(EMPLOYEE_ID_LENGTH)
    )
    return f"{EMPLOYEE_ID_PREFIX}{suffix}"


class Employee(Base):
    """
    A person who may work at one cafe at a time.

    The cafe link lives in EmployeeCafeAssignment, not on this row, so an
    employee can exist without any assignment.
    """

    __tablename__ = "employees"

    id: Mapped[str] = mapped_column(
        String(EMPLOYEE_ID_LENGTH + len(EMPLOYEE_ID_PREFIX)),
        primary_key=True,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email_address: Mapped[str] = mapped_column(String(255), nullable=False)

    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)

    gender: Mapped[str] = mapped_column(String(16), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, name='{self.name}')>"
