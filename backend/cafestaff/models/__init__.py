"""ORM models. Importing this package registers every table on Base.metadata."""

from cafestaff.models.assignment import EmployeeCafeAssignment
from cafestaff.models.cafe import Cafe
from cafestaff.models.employee import Employee, generate_employee_id

__all__ = ["Cafe", "Employee", "EmployeeCafeAssignment", "generate_employee_id"]
