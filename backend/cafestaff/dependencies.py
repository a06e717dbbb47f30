"""
CafeStaff Backend — FastAPI Dependencies
==========================================

What:  Builds the services a route needs from the collaborators the
       application lifespan put on `app.state`.
How:   Each request gets lightweight service objects bound to the shared
       Database and AssetStore; the expensive parts (engine, pool) live
       for the whole process.

Usage:
    @router.get("/cafes")
    async def list_cafes(reporting: ReportingService = Depends(get_reporting_service)):
        ...
"""

from fastapi import Depends, Request

from cafestaff.database import Database, get_database
from cafestaff.services.asset_store import AssetStore
from cafestaff.services.assignment_service import assignment_service
from cafestaff.services.cafe_service import CafeService
from cafestaff.services.employee_service import EmployeeService
from cafestaff.services.reporting_service import ReportingService


def get_asset_store(request: Request) -> AssetStore:
    return request.app.state.asset_store


def get_cafe_service(
    database: Database = Depends(get_database),
    asset_store: AssetStore = Depends(get_asset_store),
) -> CafeService:
    return CafeService(database, asset_store)


def get_employee_service(database: Database = Depends(get_database)) -> EmployeeService:
    return EmployeeService(database, assignments=assignment_service)


def get_reporting_service(database: Database = Depends(get_database)) -> ReportingService:
    return ReportingService(database)
