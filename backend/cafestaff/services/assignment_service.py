"""
CafeStaff Backend — Assignment Consistency Service
====================================================

What:  Maintains the single employee → cafe assignment and its start date.
Why:   The "one assignment per employee" and "start_date only moves on a
       real cafe change" rules are shared by employee creation, update and
       deletion; keeping them here means every path applies them the same way.
How:   Every method works inside a session the caller opened with
       Database.transaction(), so the assignment write commits or rolls back
       together with whatever else the caller changed.

Rules:
    create_or_assign  no cafe given        → nothing happens
                      no assignment yet    → insert with start_date = now
    reassign          same cafe            → start_date kept
                      different cafe       → start_date = now
                      no assignment yet    → insert with start_date = now
    unassign          assignment removed if present

reassign locks the employee row and its assignment (SELECT ... FOR UPDATE)
before reading, so two reassigns of the same employee run one after the
other and the second sees the first one's cafe. A uniqueness violation
while writing (another request created the same employee's assignment
first) becomes ConflictError; the request is not merged with the
concurrent one.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cafestaff.exceptions import ConflictError, NotFoundError
from cafestaff.models import Cafe, Employee, EmployeeCafeAssignment

logger = logging.getLogger(__name__)


class AssignmentService:
    """Stateless; all state lives in the session passed to each call."""

    async def get(
        self, session: AsyncSession, employee_id: str, for_update: bool = False
    ) -> Optional[EmployeeCafeAssignment]:
        """
        Load the employee's assignment, if any.

        With `for_update` the row is locked until the caller's transaction
        ends and re-read even if the session already holds it.
        """
        query = select(EmployeeCafeAssignment).where(
            EmployeeCafeAssignment.employee_id == employee_id
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await session.execute(query)
        return result.scalar_one_or_none()

    async def require_cafe(self, session: AsyncSession, cafe_id: str) -> Cafe:
        """Raises NotFoundError unless the cafe exists."""
        cafe = await session.get(Cafe, cafe_id)
        if cafe is None:
            raise NotFoundError(resource="cafe", resource_id=cafe_id)
        return cafe

    async def create_or_assign(
        self,
        session: AsyncSession,
        employee_id: str,
        cafe_id: Optional[str],
        now: datetime,
    ) -> Optional[EmployeeCafeAssignment]:
        """
        Give an employee its first assignment.

        Returns:
            The new assignment, the existing one if the employee already had
            one, or None when no cafe was given.
        """
        if not cafe_id:
            return None

        existing = await self.get(session, employee_id)
        if existing is not None:
            return existing

        await self.require_cafe(session, cafe_id)
        assignment = EmployeeCafeAssignment(
            employee_id=employee_id,
            cafe_id=cafe_id,
            start_date=now,
        )
        session.add(assignment)
        await self._flush(session, employee_id)
        logger.info("Employee %s assigned to cafe %s", employee_id, cafe_id)
        return assignment

    async def reassign(
        self,
        session: AsyncSession,
        employee_id: str,
        new_cafe_id: str,
        now: datetime,
    ) -> EmployeeCafeAssignment:
        """
        Point an employee at `new_cafe_id`, upserting the assignment.

        Raises:
            NotFoundError: Unknown employee or cafe
            ConflictError: A concurrent request wrote the assignment first
        """
        # Employee row first: concurrent reassigns of one employee queue here
        if await session.get(Employee, employee_id, with_for_update=True) is None:
            raise NotFoundError(resource="employee", resource_id=employee_id)
        await self.require_cafe(session, new_cafe_id)

        existing = await self.get(session, employee_id, for_update=True)
        if existing is None:
            assignment = EmployeeCafeAssignment(
                employee_id=employee_id,
                cafe_id=new_cafe_id,
                start_date=now,
            )
            session.add(assignment)
            await self._flush(session, employee_id)
            logger.info("Employee %s assigned to cafe %s", employee_id, new_cafe_id)
            return assignment

        if existing.cafe_id != new_cafe_id:
            logger.info(
                "Employee %s moved from cafe %s to %s",
                employee_id,
                existing.cafe_id,
                new_cafe_id,
            )
            existing.cafe_id = new_cafe_id
            existing.start_date = now
            await self._flush(session, employee_id)
        return existing

    async def unassign(self, session: AsyncSession, employee_id: str) -> bool:
        """Remove the employee's assignment. Returns True if one existed."""
        result = await session.execute(
            delete(EmployeeCafeAssignment).where(
                EmployeeCafeAssignment.employee_id == employee_id
            )
        )
        removed = bool(result.rowcount)
        if removed:
            logger.info("Employee %s unassigned", employee_id)
        return removed

    async def _flush(self, session: AsyncSession, employee_id: str) -> None:
        try:
            await session.flush()
        except IntegrityError as e:
            raise ConflictError(
                message=(
                    "The employee's cafe assignment was changed by another request. "
                    "Please retry."
                ),
                context={"employee_id": employee_id, "error_type": type(e).__name__},
            )


assignment_service = AssignmentService()
