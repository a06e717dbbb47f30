"""
CafeStaff Backend — Demo Data Seeder
======================================

What:  Wipes the three tables and loads five cafes and 25 employees.
How:   python -m cafestaff.seed   (uses DATABASE_URL, creates missing tables)

Distribution (cafe order below):
    Cafe Lahore 10, Tea House Karachi 5, Brewed Awakening 4,
    Cafe Islamabad 4, Coffee Corner 2

Every assignment starts "now", so all seeded employees show 0 days worked.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete

from cafestaff.database import Database
from cafestaff.main import setup_logging
from cafestaff.models import Cafe, Employee, EmployeeCafeAssignment
from cafestaff.models.cafe import new_cafe_id
from cafestaff.timeutils import utcnow

logger = logging.getLogger(__name__)

CAFES = [
    ("Cafe Lahore", "Cozy cafe in Lahore.", "Lahore"),
    ("Tea House Karachi", "A tranquil spot in Karachi for tea lovers.", "Karachi"),
    ("Brewed Awakening", "Your local coffee shop in Karachi.", "Karachi"),
    ("Cafe Islamabad", "A beautiful cafe with a view in Islamabad.", "Islamabad"),
    ("Coffee Corner", "A favorite hangout in Lahore.", "Lahore"),
]

# (id, name, email, phone, gender)
EMPLOYEES = [
    ("UI1234567", "John Wed", "john@example.com", "123-456-7890", "Male"),
    ("UI7654321", "Jane Smith", "jane@example.com", "098-765-4321", "Female"),
    ("UI1357924", "Emily Johnson", "emily@example.com", "555-555-5555", "Female"),
    ("UI2468013", "Michael Brown", "michael@example.com", "777-777-7777", "Male"),
    ("UI3692581", "Linda Green", "linda@example.com", "444-444-4444", "Female"),
    ("UI1239874", "David Wilson", "david@example.com", "888-888-8888", "Male"),
    ("UI4561237", "Sarah Taylor", "sarah@example.com", "222-222-2222", "Female"),
    ("UI7894561", "James Moore", "james@example.com", "666-666-6666", "Male"),
    ("UI3216548", "Jessica Lee", "jessica@example.com", "333-333-3333", "Female"),
    ("UI6541237", "Daniel Harris", "daniel@example.com", "999-999-9999", "Male"),
    ("UI1597538", "Sophia Clark", "sophia@example.com", "111-111-1111", "Female"),
    ("UI7539514", "William Lewis", "william@example.com", "222-333-4444", "Male"),
    ("UI9876543", "Mia Young", "mia@example.com", "555-666-7777", "Female"),
    ("UI6549872", "Ava Walker", "ava@example.com", "888-999-0000", "Female"),
    ("UI8529634", "Lucas Hall", "lucas@example.com", "111-222-3333", "Male"),
    ("UI3691475", "Ethan Allen", "ethan@example.com", "444-555-6666", "Male"),
    ("UI9517536", "Charlotte Wright", "charlotte@example.com", "777-888-9999", "Female"),
    ("UI3214569", "Benjamin King", "benjamin@example.com", "222-333-5555", "Male"),
    ("UI4569873", "Zoe Scott", "zoe@example.com", "444-555-8888", "Female"),
    ("UI7891236", "Chloe Adams", "chloe@example.com", "333-666-9999", "Female"),
    ("UI1472583", "Henry Baker", "henry@example.com", "555-444-3333", "Male"),
    ("UI2589631", "Oliver Perez", "oliver@example.com", "888-777-6666", "Male"),
    ("UI6543119", "Emma Turner", "emma@example.com", "222-111-0000", "Female"),
    ("UI2589234", "Noah Evans", "noah@example.com", "888-777-1111", "Male"),
    ("UI6543219", "Grace Hill", "grace@example.com", "222-111-9999", "Female"),
]

# Employees per cafe, in CAFES order
DISTRIBUTION = [10, 5, 4, 4, 2]


async def seed(database: Database, now: Optional[datetime] = None) -> dict:
    """
    Replace all data with the demo set in one transaction.

    Returns:
        {cafe_name: [employee_id, ...]} as seeded.
    """
    now = now or utcnow()
    roster = {}

    async with database.transaction() as session:
        await session.execute(delete(EmployeeCafeAssignment))
        await session.execute(delete(Employee))
        await session.execute(delete(Cafe))

        cafes = [
            Cafe(
                id=new_cafe_id(),
                name=name,
                description=description,
                location=location,
                # Distinct stamps keep CAFES order as the ranking tie-break
                created_at=now + timedelta(microseconds=index),
            )
            for index, (name, description, location) in enumerate(CAFES)
        ]
        employees = [
            Employee(
                id=employee_id,
                name=name,
                email_address=email,
                phone_number=phone,
                gender=gender,
                created_at=now,
            )
            for employee_id, name, email, phone, gender in EMPLOYEES
        ]
        session.add_all(cafes)
        session.add_all(employees)
        await session.flush()

        remaining = iter(employees)
        for cafe, headcount in zip(cafes, DISTRIBUTION):
            staff = [next(remaining) for _ in range(headcount)]
            session.add_all(
                EmployeeCafeAssignment(employee_id=employee.id, cafe_id=cafe.id, start_date=now)
                for employee in staff
            )
            roster[cafe.name] = [employee.id for employee in staff]

    logger.info("Seeded %d cafes and %d employees", len(CAFES), len(EMPLOYEES))
    return roster


async def main() -> None:
    database = Database()
    try:
        await database.create_all()
        await seed(database)
    finally:
        await database.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
