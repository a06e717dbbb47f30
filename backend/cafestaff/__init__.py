"""
CafeStaff Backend — Application Package Initializer
===================================================

What: Marks the `cafestaff` directory as a Python package.
Why:  Enables module imports like `from cafestaff.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Assignments, reporting, cascades
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database + Asset Store (Storage)  │  ← Async SQLAlchemy, logo files
    └─────────────────────────────────────┘

    Services receive their storage collaborators (Database, AssetStore) at
    construction time. Nothing below the route layer reaches for a global
    connection handle.
"""

__version__ = "1.0.0"
