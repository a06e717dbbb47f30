"""
CafeStaff Backend — Reporting Views
=====================================

What:  The two read-only views behind the list endpoints:
       - cafes ranked by current headcount
       - employees joined with their cafe and tenure
How:   One SQL query each (outer joins + GROUP BY); tenure and final
       ordering are computed in Python from the joined rows.

Query plans:
    cafes_by_popularity
        SELECT cafes.*, count(a.employee_id) AS employee_count
        FROM cafes LEFT JOIN employee_cafe_assignments a ON a.cafe_id = cafes.id
        [WHERE lower(cafes.location) LIKE lower('%' || :location || '%')]
        GROUP BY cafes.id
        ORDER BY employee_count DESC, cafes.created_at, cafes.id

    employees_with_tenure
        SELECT employees.*, a.start_date, cafes.*
        FROM employees
        LEFT JOIN employee_cafe_assignments a ON a.employee_id = employees.id
        LEFT JOIN cafes ON cafes.id = a.cafe_id
        [WHERE lower(cafes.name) LIKE lower('%' || :cafe_name || '%')]

Ordering of employees:
    days_worked descending; employees without tenure (null) after every
    number; ties by employee created_at, then id.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import func, select

from cafestaff.database import Database
from cafestaff.exceptions import StorageError
from cafestaff.models import Cafe, Employee, EmployeeCafeAssignment
from cafestaff.schemas.cafe import CafeListItem, CafeSummary, logo_url
from cafestaff.schemas.employee import EmployeeListItem
from cafestaff.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def days_worked(start_date: Optional[datetime], now: datetime) -> Optional[int]:
    """Whole days elapsed since `start_date`, floored; None without a start date."""
    if start_date is None:
        return None
    elapsed = as_utc(now) - as_utc(start_date)
    return int(elapsed.total_seconds() // SECONDS_PER_DAY)


class ReportingService:
    """
    Args:
        database: Store client (read-only use)
        clock:    Returns "now" for tenure calculation
    """

    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow):
        self.database = database
        self.clock = clock

    async def cafes_by_popularity(self, location: Optional[str] = None) -> List[CafeListItem]:
        """
        Cafes ordered by how many employees are assigned to them.

        Args:
            location: Case-insensitive substring of the cafe's location;
                      None or "" lists every cafe.

        Returns:
            Possibly empty list; a filter that matches nothing is not an error.
        """
        employee_count = func.count(EmployeeCafeAssignment.employee_id).label("employee_count")
        query = (
            select(Cafe, employee_count)
            .outerjoin(EmployeeCafeAssignment, EmployeeCafeAssignment.cafe_id == Cafe.id)
            .group_by(Cafe.id)
            .order_by(employee_count.desc(), Cafe.created_at.asc(), Cafe.id.asc())
        )
        if location:
            query = query.where(Cafe.location.icontains(location, autoescape=True))

        try:
            async with self.database.session() as session:
                rows = (await session.execute(query)).all()
        except Exception as e:
            logger.error("Failed to rank cafes: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not retrieve cafes. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [
            CafeListItem(
                id=cafe.id,
                name=cafe.name,
                description=cafe.description,
                location=cafe.location,
                logo=cafe.logo,
                logo_url=logo_url(cafe.logo),
                created_at=cafe.created_at,
                employee_count=count,
            )
            for cafe, count in rows
        ]

    async def employees_with_tenure(self, cafe_name: Optional[str] = None) -> List[EmployeeListItem]:
        """
        Every employee with its current cafe and whole days worked there.

        Args:
            cafe_name: Case-insensitive substring of the cafe name. When set,
                       unassigned employees are excluded.
        """
        query = (
            select(Employee, EmployeeCafeAssignment.start_date, Cafe)
            .outerjoin(
                EmployeeCafeAssignment,
                EmployeeCafeAssignment.employee_id == Employee.id,
            )
            .outerjoin(Cafe, Cafe.id == EmployeeCafeAssignment.cafe_id)
        )
        if cafe_name:
            query = query.where(Cafe.name.icontains(cafe_name, autoescape=True))

        try:
            async with self.database.session() as session:
                rows = (await session.execute(query)).all()
        except Exception as e:
            logger.error("Failed to list employees: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not retrieve employees. Please try again.",
                context={"error_type": type(e).__name__},
            )

        now = self.clock()
        entries = []
        for employee, start_date, cafe in rows:
            item = EmployeeListItem(
                id=employee.id,
                name=employee.name,
                email_address=employee.email_address,
                phone_number=employee.phone_number,
                gender=employee.gender,
                cafe=(
                    CafeSummary(
                        id=cafe.id,
                        name=cafe.name,
                        location=cafe.location,
                        logo_url=logo_url(cafe.logo),
                    )
                    if cafe is not None
                    else None
                ),
                days_worked=days_worked(start_date, now),
            )
            entries.append((as_utc(employee.created_at), item))

        entries.sort(
            key=lambda entry: (
                entry[1].days_worked is None,
                -(entry[1].days_worked or 0),
                entry[0],
                entry[1].id,
            )
        )
        return [item for _, item in entries]
