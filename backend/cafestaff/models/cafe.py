"""
CafeStaff Backend — Cafe SQLAlchemy Model
===========================================

What:  ORM model for the `cafes` table.
Who:   Used by CafeService for CRUD and by ReportingService for ranking.

Table Design Rationale:
    - id: UUID4 string generated in Python; opaque to clients
    - logo: Asset reference returned by AssetStore (YYYY/MM/DD/<uuid>.<ext>),
      NULL when the cafe has no logo
    - created_at: Deterministic tie-break when two cafes have the same
      employee count in the popularity ranking
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cafestaff.database import Base
from cafestaff.timeutils import utcnow


def new_cafe_id() -> str:
    return str(uuid.uuid4())


class Cafe(Base):
    """
    A cafe that employees can be assigned to.

    Lifecycle:
        1. Created with an optional logo upload
        2. Updated in place; a new logo replaces (and reclaims) the old one
        3. Deleted together with every employee assigned to it
    """

    __tablename__ = "cafes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_cafe_id,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Free text; filtered with a case-insensitive substring match
    location: Mapped[str] = mapped_column(String(255), nullable=False)

    logo: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        comment="Asset reference relative to the storage root",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        Index("idx_cafes_location", "location"),
        Index("idx_cafes_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Cafe(id={self.id}, name='{self.name}', location='{self.location}')>"
