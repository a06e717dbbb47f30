"""
CafeStaff Backend — Employee Service
======================================

What:  Create, update and delete employees together with their assignment.
How:   Each operation runs in one Database.transaction(): the employee row
       and its assignment are committed together or not at all.

Identifier generation:
    IDs are random (`UI` + 7 characters) with no uniqueness guarantee by
    construction. Creation inserts, and on a primary key collision retries
    the whole transaction with a fresh ID (tenacity, bounded by
    settings.employee_id_max_attempts). Exhausting the attempts surfaces as
    ConflictError (409).
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
)

from cafestaff.config import settings
from cafestaff.database import Database
from cafestaff.exceptions import CafeStaffError, ConflictError, NotFoundError, StorageError
from cafestaff.models import Employee, EmployeeCafeAssignment, generate_employee_id
from cafestaff.schemas.employee import (
    EmployeeCreate,
    EmployeeDeleteResponse,
    EmployeeResponse,
    EmployeeUpdate,
)
from cafestaff.services.assignment_service import AssignmentService
from cafestaff.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)


class EmployeeIdCollision(ConflictError):
    """A freshly generated employee ID is already taken."""

    def __init__(self, employee_id: str):
        super().__init__(
            message="Could not allocate a unique employee ID. Please retry.",
            context={"employee_id": employee_id},
        )


def _employee_response(
    employee: Employee, assignment: Optional[EmployeeCafeAssignment]
) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        name=employee.name,
        email_address=employee.email_address,
        phone_number=employee.phone_number,
        gender=employee.gender,
        cafe_id=assignment.cafe_id if assignment else None,
        start_date=as_utc(assignment.start_date) if assignment else None,
    )


class EmployeeService:
    """
    Business logic for the employee endpoints.

    Args:
        database:    Store client opened by the application lifespan
        assignments: Assignment rules (defaults to a fresh AssignmentService)
        clock:       Returns "now"; tests pin it to check start dates
    """

    def __init__(
        self,
        database: Database,
        assignments: Optional[AssignmentService] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.database = database
        self.assignments = assignments or AssignmentService()
        self.clock = clock

    async def create_employee(self, data: EmployeeCreate) -> EmployeeResponse:
        """
        Insert an employee and, if `cafe_id` is given, its assignment.

        Raises:
            NotFoundError: cafe_id does not exist
            ConflictError: No free employee ID after all attempts
            StorageError: Any other database failure (nothing was written)
        """
        try:
            employee, assignment = await self._insert_employee(data)
        except CafeStaffError:
            raise
        except Exception as e:
            logger.error("Failed to create employee: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not create the employee. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Employee created: %s", employee.id)
        return _employee_response(employee, assignment)

    @retry(
        retry=retry_if_exception_type(EmployeeIdCollision),
        stop=stop_after_attempt(settings.employee_id_max_attempts),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _insert_employee(self, data: EmployeeCreate):
        """
        One attempt: new ID, new transaction.

        A collision rolls the whole attempt back (including any assignment)
        before tenacity starts the next one.
        """
        now = self.clock()
        async with self.database.transaction() as session:
            if data.cafe_id:
                await self.assignments.require_cafe(session, data.cafe_id)

            employee_id = generate_employee_id()
            employee = Employee(
                id=employee_id,
                name=data.name,
                email_address=data.email_address,
                phone_number=data.phone_number,
                gender=data.gender,
                created_at=now,
            )
            session.add(employee)
            try:
                await session.flush()
            except IntegrityError:
                raise EmployeeIdCollision(employee_id)

            assignment = await self.assignments.create_or_assign(
                session, employee.id, data.cafe_id, now
            )
        return employee, assignment

    async def update_employee(
        self, employee_id: str, data: EmployeeUpdate
    ) -> EmployeeResponse:
        """
        Apply a partial update and, when `cafe_id` is present, reassign.

        The employee fields and the assignment change are one transaction;
        no reader ever sees one without the other.

        Raises:
            NotFoundError: Unknown employee, or unknown cafe_id
            ConflictError: Concurrent reassignment of the same employee
            StorageError: Any other database failure (nothing was written)
        """
        fields = data.model_dump(exclude_unset=True)
        cafe_given = "cafe_id" in fields
        cafe_id = fields.pop("cafe_id", None)
        # Explicit nulls only mean something for cafe_id
        fields = {name: value for name, value in fields.items() if value is not None}

        try:
            async with self.database.transaction() as session:
                employee = await self._require(session, employee_id)

                for name, value in fields.items():
                    setattr(employee, name, value)

                if cafe_given and cafe_id is None:
                    await self.assignments.unassign(session, employee_id)
                elif cafe_given:
                    await self.assignments.reassign(
                        session, employee_id, cafe_id, self.clock()
                    )

                await session.flush()
                assignment = await self.assignments.get(session, employee_id)
        except CafeStaffError:
            raise
        except Exception as e:
            logger.error("Failed to update employee %s: %s", employee_id, str(e), exc_info=True)
            raise StorageError(
                message="Could not update the employee. Please try again.",
                context={"employee_id": employee_id, "error_type": type(e).__name__},
            )

        return _employee_response(employee, assignment)

    async def delete_employee(self, employee_id: str) -> EmployeeDeleteResponse:
        """
        Delete an employee and its assignment in one transaction.

        Raises:
            NotFoundError: Unknown employee
            StorageError: Database failure (nothing was deleted)
        """
        try:
            async with self.database.transaction() as session:
                employee = await self._require(session, employee_id)
                # Assignment first: it references the employee row
                await self.assignments.unassign(session, employee_id)
                await session.delete(employee)
        except CafeStaffError:
            raise
        except Exception as e:
            logger.error("Failed to delete employee %s: %s", employee_id, str(e), exc_info=True)
            raise StorageError(
                message="Could not delete the employee. Please try again.",
                context={"employee_id": employee_id, "error_type": type(e).__name__},
            )

        logger.info("Employee deleted: %s", employee_id)
        return EmployeeDeleteResponse(employee_id=employee_id)

    async def get_employee(self, employee_id: str) -> EmployeeResponse:
        """Single employee with its assignment. Raises NotFoundError."""
        async with self.database.session() as session:
            employee = await self._require(session, employee_id)
            assignment = await self.assignments.get(session, employee_id)
        return _employee_response(employee, assignment)

    async def _require(self, session: AsyncSession, employee_id: str) -> Employee:
        employee = await session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError(resource="employee", resource_id=employee_id)
        return employee
