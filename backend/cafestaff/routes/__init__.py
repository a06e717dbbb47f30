# Routes package init
"""
CafeStaff Backend — API Routes Package
========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - cafes.py:      GET    /api/cafes                      (ranked by headcount)
                     POST   /api/cafes                      (multipart, optional logo)
                     PUT    /api/cafes/{id}                 (partial update)
                     DELETE /api/cafes/{id}                 (cascade delete)
                     GET    /api/cafes/logos/{asset_ref}    (logo bytes)
    - employees.py:  GET    /api/employees                  (with tenure)
                     GET    /api/employees/{id}
                     POST   /api/employees
                     PUT    /api/employees/{id}
                     DELETE /api/employees/{id}
    - health.py:     GET    /health

Routes stay thin: they extract request data, call a service, and set the
status code and headers. Business rules live in the services.
"""
