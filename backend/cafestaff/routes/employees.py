"""
CafeStaff Backend — Employee Route Handlers
=============================================

What:  /api/employees: tenure listing and JSON create/update/delete.

Update semantics for `cafe_id` (PUT body):
    omitted → assignment untouched
    null    → employee unassigned
    "<id>"  → reassigned; start_date resets only when the cafe changes
"""

import logging

from fastapi import APIRouter, Depends, Query, Response

from cafestaff.dependencies import get_employee_service, get_reporting_service
from cafestaff.schemas.common import ErrorResponse
from cafestaff.schemas.employee import (
    EmployeeCreate,
    EmployeeDeleteResponse,
    EmployeeListItem,
    EmployeeResponse,
    EmployeeUpdate,
)
from cafestaff.services.employee_service import EmployeeService
from cafestaff.services.reporting_service import ReportingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Employees"])


@router.get(
    "/employees",
    response_model=list[EmployeeListItem],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List employees with their cafe and days worked",
)
async def list_employees(
    response: Response,
    cafe: str | None = Query(
        default=None,
        description="Case-insensitive substring of the cafe name",
    ),
    cafe_name: str | None = Query(
        default=None,
        alias="cafeName",
        description="Same filter under its camelCase name",
    ),
    reporting: ReportingService = Depends(get_reporting_service),
) -> list[EmployeeListItem]:
    """
    Longest-serving employees first; unassigned employees (null
    days_worked) come last. A cafe filter drops unassigned employees.
    """
    employees = await reporting.employees_with_tenure(
        cafe_name=cafe if cafe is not None else cafe_name
    )
    response.headers["X-Total-Count"] = str(len(employees))
    return employees


@router.get(
    "/employees/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"description": "Employee not found", "model": ErrorResponse}},
    summary="Get a single employee",
)
async def get_employee(
    employee_id: str,
    employees: EmployeeService = Depends(get_employee_service),
) -> EmployeeResponse:
    return await employees.get_employee(employee_id)


@router.post(
    "/employees",
    status_code=201,
    response_model=EmployeeResponse,
    responses={
        404: {"description": "Cafe not found", "model": ErrorResponse},
        409: {"description": "Could not allocate an employee ID", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create an employee",
)
async def create_employee(
    body: EmployeeCreate,
    employees: EmployeeService = Depends(get_employee_service),
) -> EmployeeResponse:
    """Creates the employee and, when `cafe_id` is given, its assignment."""
    return await employees.create_employee(body)


@router.put(
    "/employees/{employee_id}",
    response_model=EmployeeResponse,
    responses={
        404: {"description": "Employee or cafe not found", "model": ErrorResponse},
        409: {"description": "Concurrent reassignment", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update an employee",
)
async def update_employee(
    employee_id: str,
    body: EmployeeUpdate,
    employees: EmployeeService = Depends(get_employee_service),
) -> EmployeeResponse:
    return await employees.update_employee(employee_id, body)


@router.delete(
    "/employees/{employee_id}",
    response_model=EmployeeDeleteResponse,
    responses={
        404: {"description": "Employee not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete an employee",
)
async def delete_employee(
    employee_id: str,
    employees: EmployeeService = Depends(get_employee_service),
) -> EmployeeDeleteResponse:
    return await employees.delete_employee(employee_id)
