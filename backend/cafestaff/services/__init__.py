# Services package init
"""
CafeStaff Backend — Services Layer
====================================

What:  Business logic between the routes (HTTP) and the storage layer.
How:   Services receive their collaborators (Database, AssetStore) at
       construction and are built per request in cafestaff.dependencies.

Service Inventory:
    - AssignmentService: one-cafe-per-employee rule and start_date handling
    - EmployeeService:   employee create/update/delete with their assignment
    - CafeService:       cafe create/update, logo replacement, cascade delete
    - ReportingService:  cafes ranked by headcount, employees with tenure
    - AssetStore:        logo validation, storage, streaming and cleanup
"""
