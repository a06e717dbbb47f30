"""
CafeStaff Backend — Employee/Cafe Assignment Model
====================================================

What:  Join table linking an employee to the cafe they currently work at.

Cardinality:
    employee → assignment: 0..1 (employee_id is the primary key, so the
    database itself rejects a second assignment for the same employee)
    cafe → assignments:    0..N

start_date marks when the *current* assignment began. It only moves when
the employee changes cafe; see AssignmentService.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from cafestaff.database import Base
from cafestaff.timeutils import utcnow


class EmployeeCafeAssignment(Base):
    """Current cafe of one employee."""

    __tablename__ = "employee_cafe_assignments"

    employee_id: Mapped[str] = mapped_column(
        String(9),
        ForeignKey("employees.id"),
        primary_key=True,
    )

    cafe_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("cafes.id"),
        nullable=False,
    )

    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # Headcount grouping and cascade deletes look assignments up by cafe
    __table_args__ = (
        Index("idx_assignments_cafe_id", "cafe_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<EmployeeCafeAssignment(employee_id={self.employee_id}, "
            f"cafe_id={self.cafe_id}, start_date='{self.start_date}')>"
        )
