"""Create cafes, employees and employee_cafe_assignments

Revision ID: 001
Revises: None
Create Date: 2024-06-01 00:00:00.000000+00:00

What:  Initial schema. The assignment table's primary key is employee_id,
       which is what limits an employee to one cafe at a time.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "cafes",
        sa.Column("id", sa.String(36), nullable=False, comment="UUID4 string"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column(
            "logo",
            sa.String(255),
            nullable=True,
            comment="Asset reference relative to the storage root",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_cafes_location", "cafes", ["location"])
    op.create_index("idx_cafes_created_at", "cafes", ["created_at"])

    op.create_table(
        "employees",
        sa.Column("id", sa.String(9), nullable=False, comment="UI + 7 alphanumerics"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email_address", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=False),
        sa.Column("gender", sa.String(16), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "employee_cafe_assignments",
        sa.Column("employee_id", sa.String(9), nullable=False),
        sa.Column("cafe_id", sa.String(36), nullable=False),
        sa.Column("start_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.ForeignKeyConstraint(["cafe_id"], ["cafes.id"]),
        sa.PrimaryKeyConstraint("employee_id"),
    )
    op.create_index("idx_assignments_cafe_id", "employee_cafe_assignments", ["cafe_id"])


def downgrade() -> None:
    """WARNING: destroys all cafe and employee data."""
    op.drop_index("idx_assignments_cafe_id", table_name="employee_cafe_assignments")
    op.drop_table("employee_cafe_assignments")
    op.drop_table("employees")
    op.drop_index("idx_cafes_created_at", table_name="cafes")
    op.drop_index("idx_cafes_location", table_name="cafes")
    op.drop_table("cafes")
