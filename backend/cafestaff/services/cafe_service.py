"""
CafeStaff Backend — Cafe Service
==================================

What:  Creates, updates and deletes cafes, including their logo assets and
       the cascade removal of everyone who works there.
How:   Database writes run in one Database.transaction(); logo files are
       written before it opens and reclaimed after it commits, so no
       transaction ever waits on disk I/O.

Logo lifecycle:
    create  store(new) → INSERT cafe                → (failure: discard(new))
    update  store(new) → UPDATE cafe.logo → commit  → delete(old)
                                                     (failure: discard(new), old kept)
    delete  DELETE assignments, employees, cafe → commit → delete(logo)

Deleting the old file after commit may fail. The database is already
consistent at that point, so the failure is logged and handed back to the
caller as a warning instead of an error.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cafestaff.database import Database
from cafestaff.exceptions import AssetError, CafeStaffError, NotFoundError, StorageError, ValidationError
from cafestaff.models import Cafe, Employee, EmployeeCafeAssignment
from cafestaff.models.cafe import new_cafe_id
from cafestaff.schemas.cafe import (
    CafeDeleteResponse,
    CafeResponse,
    CafeUpdateResponse,
    logo_url,
)
from cafestaff.services.asset_store import AssetStore
from cafestaff.timeutils import utcnow

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 100
LOCATION_MAX_LENGTH = 255


def _required_text(value: Optional[str], field: str, max_length: int) -> str:
    stripped = (value or "").strip()
    if not stripped:
        raise ValidationError(message=f"Cafe {field} is required", field=field)
    if len(stripped) > max_length:
        raise ValidationError(
            message=f"Cafe {field} must be at most {max_length} characters",
            field=field,
            context={"max_length": max_length},
        )
    return stripped


def _cafe_fields(cafe: Cafe) -> dict:
    return {
        "id": cafe.id,
        "name": cafe.name,
        "description": cafe.description,
        "location": cafe.location,
        "logo": cafe.logo,
        "logo_url": logo_url(cafe.logo),
        "created_at": cafe.created_at,
    }


class CafeService:
    """
    Business logic for the cafe endpoints.

    Args:
        database:    Store client opened by the application lifespan
        asset_store: Where logo files live
    """

    def __init__(self, database: Database, asset_store: AssetStore):
        self.database = database
        self.asset_store = asset_store

    # ── Create ────────────────────────────────────────────────────────────

    async def create_cafe(
        self,
        name: str,
        description: str,
        location: str,
        logo_filename: Optional[str] = None,
        logo_content: Optional[bytes] = None,
        logo_size: Optional[int] = None,
    ) -> CafeResponse:
        """
        Insert a cafe, storing its logo first when one was uploaded.

        Raises:
            ValidationError: Blank name/location, or an unacceptable logo
            AssetError: The logo could not be written
            StorageError: The insert failed (the stored logo is discarded)
        """
        name = _required_text(name, "name", NAME_MAX_LENGTH)
        location = _required_text(location, "location", LOCATION_MAX_LENGTH)
        description = (description or "").strip()

        logo_ref = None
        if logo_filename:
            logo_ref = await self.asset_store.store(logo_filename, logo_content or b"", logo_size)

        cafe = Cafe(
            id=new_cafe_id(),
            name=name,
            description=description,
            location=location,
            logo=logo_ref,
            created_at=utcnow(),
        )
        try:
            async with self.database.transaction() as session:
                session.add(cafe)
        except Exception as e:
            if logo_ref:
                await self.asset_store.discard(logo_ref)
            logger.error("Failed to create cafe: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not create the cafe. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Cafe created: %s (%s)", cafe.id, cafe.name)
        return CafeResponse(**_cafe_fields(cafe))

    # ── Update ────────────────────────────────────────────────────────────

    async def update_cafe(
        self,
        cafe_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        location: Optional[str] = None,
        logo_filename: Optional[str] = None,
        logo_content: Optional[bytes] = None,
        logo_size: Optional[int] = None,
    ) -> CafeUpdateResponse:
        """
        Apply a partial update; a new logo replaces and reclaims the old one.

        Returns:
            The updated cafe. `warnings` lists a replaced logo that could not
            be removed from storage.

        Raises:
            NotFoundError: Unknown cafe (checked before the logo is stored)
            ValidationError: Blank name/location, or an unacceptable logo
            StorageError: The update failed; the new logo is discarded and
                          the old one is untouched
        """
        changes = {}
        if name is not None:
            changes["name"] = _required_text(name, "name", NAME_MAX_LENGTH)
        if location is not None:
            changes["location"] = _required_text(location, "location", LOCATION_MAX_LENGTH)
        if description is not None:
            changes["description"] = description.strip()

        async with self.database.session() as session:
            await self._require(session, cafe_id)

        new_logo = None
        if logo_filename:
            new_logo = await self.asset_store.store(logo_filename, logo_content or b"", logo_size)
            changes["logo"] = new_logo

        try:
            async with self.database.transaction() as session:
                # Re-read inside the transaction: the cafe may have been
                # deleted since the check above
                cafe = await self._require(session, cafe_id)
                old_logo = cafe.logo
                for field, value in changes.items():
                    setattr(cafe, field, value)
        except Exception as e:
            if new_logo:
                await self.asset_store.discard(new_logo)
            if isinstance(e, CafeStaffError):
                raise
            logger.error("Failed to update cafe %s: %s", cafe_id, str(e), exc_info=True)
            raise StorageError(
                message="Could not update the cafe. Please try again.",
                context={"cafe_id": cafe_id, "error_type": type(e).__name__},
            )

        warnings = []
        if new_logo and old_logo and old_logo != new_logo:
            warnings = await self._reclaim_logo(old_logo)

        logger.info("Cafe updated: %s", cafe_id)
        return CafeUpdateResponse(**_cafe_fields(cafe), warnings=warnings)

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_cafe(self, cafe_id: str) -> CafeDeleteResponse:
        """
        Delete a cafe together with every employee assigned to it.

        The assignments, the employees and the cafe go in one transaction:
        either all of them are gone or none are. The logo is reclaimed once,
        after commit.

        Raises:
            NotFoundError: Unknown cafe (nothing deleted)
            StorageError: Any database failure (nothing deleted)
        """
        try:
            async with self.database.transaction() as session:
                cafe = await self._require(session, cafe_id)
                logo_ref = cafe.logo
                employee_ids = await self._assigned_employee_ids(session, cafe_id)
                await self._delete_employees(session, employee_ids)
                await session.execute(
                    delete(EmployeeCafeAssignment).where(
                        EmployeeCafeAssignment.cafe_id == cafe_id
                    )
                )
                await session.delete(cafe)
        except CafeStaffError:
            raise
        except Exception as e:
            logger.error("Failed to delete cafe %s: %s", cafe_id, str(e), exc_info=True)
            raise StorageError(
                message="Could not delete the cafe. Please try again.",
                context={"cafe_id": cafe_id, "error_type": type(e).__name__},
            )

        logger.info(
            "Cafe deleted: %s with %d employee(s)", cafe_id, len(employee_ids)
        )

        warnings = []
        if logo_ref:
            warnings = await self._reclaim_logo(logo_ref)

        return CafeDeleteResponse(
            cafe_id=cafe_id,
            deleted_employee_ids=employee_ids,
            warnings=warnings,
        )

    async def _assigned_employee_ids(self, session: AsyncSession, cafe_id: str) -> List[str]:
        result = await session.execute(
            select(EmployeeCafeAssignment.employee_id)
            .where(EmployeeCafeAssignment.cafe_id == cafe_id)
            .order_by(EmployeeCafeAssignment.employee_id)
        )
        return list(result.scalars().all())

    async def _delete_employees(self, session: AsyncSession, employee_ids: Sequence[str]) -> None:
        """Assignments of these employees first, then the employee rows."""
        if not employee_ids:
            return
        await session.execute(
            delete(EmployeeCafeAssignment).where(
                EmployeeCafeAssignment.employee_id.in_(employee_ids)
            )
        )
        await session.execute(delete(Employee).where(Employee.id.in_(employee_ids)))

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _require(self, session: AsyncSession, cafe_id: str) -> Cafe:
        cafe = await session.get(Cafe, cafe_id)
        if cafe is None:
            raise NotFoundError(resource="cafe", resource_id=cafe_id)
        return cafe

    async def _reclaim_logo(self, asset_ref: str) -> List[str]:
        """
        Delete a logo nothing references any more.

        Returns:
            [] on success, or a one-item warning list when the file could
            not be removed. The caller's transaction has already committed.
        """
        try:
            await self.asset_store.delete(asset_ref)
        except (AssetError, ValidationError) as e:
            logger.warning("Could not reclaim logo %s: %s", asset_ref, e.message)
            return [f"Logo '{asset_ref}' could not be removed from storage: {e.message}"]
        return []
