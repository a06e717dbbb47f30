"""
CafeStaff Backend — Assignment Service Tests
==============================================

What we test:
    ✅ create_or_assign inserts with start_date = now, no-op without a cafe
    ✅ reassign to the same cafe keeps start_date
    ✅ reassign to a different cafe resets start_date
    ✅ reassign of an unknown employee / to an unknown cafe → NotFoundError
    ✅ reassign locks the employee and assignment rows before reading
    ✅ a write rejected by the database → ConflictError, nothing merged
    ✅ unassign removes the row and reports whether one existed
"""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import event
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from cafestaff.exceptions import ConflictError, NotFoundError
from cafestaff.models import Employee
from cafestaff.services.assignment_service import AssignmentService
from cafestaff.timeutils import as_utc

from conftest import T0


async def _add_employee(database, employee_id="UIAAAAAAA"):
    async with database.transaction() as session:
        session.add(
            Employee(
                id=employee_id,
                name="Jane Smith",
                email_address="jane@example.com",
                phone_number="098-765-4321",
                gender="Female",
                created_at=T0,
            )
        )
    return employee_id


class TestCreateOrAssign:
    """Tests for the first assignment of an employee."""

    def setup_method(self):
        self.service = AssignmentService()

    @pytest.mark.asyncio
    async def test_inserts_with_start_date_now(self, database, add_cafe):
        """A new assignment starts at the supplied `now`."""
        cafe_id = await add_cafe("Cafe A")
        employee_id = await _add_employee(database)

        async with database.transaction() as session:
            assignment = await self.service.create_or_assign(session, employee_id, cafe_id, T0)

        assert assignment.cafe_id == cafe_id
        async with database.session() as session:
            stored = await self.service.get(session, employee_id)
        assert stored.cafe_id == cafe_id
        assert as_utc(stored.start_date) == T0

    @pytest.mark.asyncio
    async def test_no_cafe_is_noop(self, database):
        """Without a cafe nothing is written."""
        employee_id = await _add_employee(database)

        async with database.transaction() as session:
            assert await self.service.create_or_assign(session, employee_id, None, T0) is None

        async with database.session() as session:
            assert await self.service.get(session, employee_id) is None

    @pytest.mark.asyncio
    async def test_existing_assignment_is_returned(self, database, add_cafe):
        """A second call leaves the first assignment in place."""
        first = await add_cafe("Cafe A")
        second = await add_cafe("Cafe B")
        employee_id = await _add_employee(database)

        async with database.transaction() as session:
            await self.service.create_or_assign(session, employee_id, first, T0)
        async with database.transaction() as session:
            assignment = await self.service.create_or_assign(
                session, employee_id, second, T0 + timedelta(days=1)
            )

        assert assignment.cafe_id == first
        assert as_utc(assignment.start_date) == T0

    @pytest.mark.asyncio
    async def test_concurrent_insert_is_conflict(self, database, add_cafe):
        """Another request's row appearing after the read → ConflictError, not a merge."""
        first = await add_cafe("Cafe A")
        second = await add_cafe("Cafe B")
        employee_id = await _add_employee(database)
        async with database.transaction() as session:
            await self.service.create_or_assign(session, employee_id, first, T0)

        # This request read "no assignment" before the other one committed
        with patch.object(self.service, "get", AsyncMock(return_value=None)):
            with pytest.raises(ConflictError):
                async with database.transaction() as session:
                    await self.service.create_or_assign(
                        session, employee_id, second, T0 + timedelta(days=1)
                    )

        async with database.session() as session:
            stored = await self.service.get(session, employee_id)
        assert stored.cafe_id == first
        assert as_utc(stored.start_date) == T0


class TestReassign:
    """Tests for start_date handling on reassignment."""

    def setup_method(self):
        self.service = AssignmentService()

    @pytest.mark.asyncio
    async def test_same_cafe_keeps_start_date(self, database, add_cafe):
        """Reassigning to the current cafe must not reset tenure."""
        cafe_id = await add_cafe("Cafe A")
        employee_id = await _add_employee(database)
        async with database.transaction() as session:
            await self.service.create_or_assign(session, employee_id, cafe_id, T0)

        later = T0 + timedelta(days=10)
        async with database.transaction() as session:
            assignment = await self.service.reassign(session, employee_id, cafe_id, later)

        assert assignment.cafe_id == cafe_id
        assert as_utc(assignment.start_date) == T0

    @pytest.mark.asyncio
    async def test_different_cafe_resets_start_date(self, database, add_cafe):
        """Moving to another cafe starts a new tenure at `now`."""
        first = await add_cafe("Cafe A")
        second = await add_cafe("Cafe B")
        employee_id = await _add_employee(database)
        async with database.transaction() as session:
            await self.service.create_or_assign(session, employee_id, first, T0)

        later = T0 + timedelta(days=10)
        async with database.transaction() as session:
            await self.service.reassign(session, employee_id, second, later)

        async with database.session() as session:
            stored = await self.service.get(session, employee_id)
        assert stored.cafe_id == second
        assert as_utc(stored.start_date) == later

    @pytest.mark.asyncio
    async def test_unassigned_employee_gets_new_assignment(self, database, add_cafe):
        """Reassigning someone without a cafe inserts the assignment."""
        cafe_id = await add_cafe("Cafe A")
        employee_id = await _add_employee(database)

        async with database.transaction() as session:
            assignment = await self.service.reassign(session, employee_id, cafe_id, T0)

        assert assignment.cafe_id == cafe_id
        assert as_utc(assignment.start_date) == T0

    @pytest.mark.asyncio
    async def test_unknown_employee_raises(self, database, add_cafe):
        """The employee must exist."""
        cafe_id = await add_cafe("Cafe A")

        with pytest.raises(NotFoundError) as exc_info:
            async with database.transaction() as session:
                await self.service.reassign(session, "UIZZZZZZZ", cafe_id, T0)

        assert exc_info.value.resource == "employee"

    @pytest.mark.asyncio
    async def test_unknown_cafe_raises(self, database):
        """The target cafe must exist."""
        employee_id = await _add_employee(database)

        with pytest.raises(NotFoundError) as exc_info:
            async with database.transaction() as session:
                await self.service.reassign(session, employee_id, "no-such-cafe", T0)

        assert exc_info.value.resource == "cafe"

    @pytest.mark.asyncio
    async def test_reads_are_locked(self, database, add_cafe):
        """Employee and assignment are read FOR UPDATE so concurrent reassigns queue."""
        first = await add_cafe("Cafe A")
        second = await add_cafe("Cafe B")
        employee_id = await _add_employee(database)
        async with database.transaction() as session:
            await self.service.create_or_assign(session, employee_id, first, T0)

        statements = []
        async with database.transaction() as session:
            event.listen(
                session.sync_session,
                "do_orm_execute",
                lambda state: statements.append(state.statement),
            )
            await self.service.reassign(session, employee_id, second, T0)

        locked = [
            str(statement.compile(dialect=postgresql.dialect()))
            for statement in statements
        ]
        locked = [sql for sql in locked if "FOR UPDATE" in sql]
        assert any("FROM employees" in sql for sql in locked)
        assert any("FROM employee_cafe_assignments" in sql for sql in locked)

    @pytest.mark.asyncio
    async def test_rejected_write_is_conflict(self, database, add_cafe):
        """A flush rejected by the database → ConflictError; the move is not applied."""
        first = await add_cafe("Cafe A")
        second = await add_cafe("Cafe B")
        employee_id = await _add_employee(database)
        async with database.transaction() as session:
            await self.service.create_or_assign(session, employee_id, first, T0)

        rejected = IntegrityError("UPDATE employee_cafe_assignments", {}, Exception("conflict"))
        with pytest.raises(ConflictError) as exc_info:
            async with database.transaction() as session:
                with patch.object(session, "flush", AsyncMock(side_effect=rejected)):
                    await self.service.reassign(
                        session, employee_id, second, T0 + timedelta(days=1)
                    )

        assert exc_info.value.context["employee_id"] == employee_id
        async with database.session() as session:
            stored = await self.service.get(session, employee_id)
        assert stored.cafe_id == first
        assert as_utc(stored.start_date) == T0


class TestUnassign:
    """Tests for removing an assignment."""

    def setup_method(self):
        self.service = AssignmentService()

    @pytest.mark.asyncio
    async def test_removes_existing_assignment(self, database, add_cafe):
        """Returns True and the row is gone."""
        cafe_id = await add_cafe("Cafe A")
        employee_id = await _add_employee(database)
        async with database.transaction() as session:
            await self.service.create_or_assign(session, employee_id, cafe_id, T0)

        async with database.transaction() as session:
            assert await self.service.unassign(session, employee_id) is True

        async with database.session() as session:
            assert await self.service.get(session, employee_id) is None

    @pytest.mark.asyncio
    async def test_without_assignment_returns_false(self, database):
        """Nothing to remove is not an error."""
        employee_id = await _add_employee(database)

        async with database.transaction() as session:
            assert await self.service.unassign(session, employee_id) is False
