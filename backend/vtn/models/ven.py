"""VEN ORM and the ven_programs association table.

Invariants:
    - ven_name is unique
    - (program_id, ven_id) pairs are unique; they are relation rows, not entities
    - Association rows go with either side (ON DELETE CASCADE, plus explicit
      deletes for SQLite, which does not enforce foreign keys by default)
"""

from datetime import datetime

from sqlalchemy import String, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from vtn.db.base import Base


class VenRow(Base):
    __tablename__ = "vens"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    created: Mapped[datetime] = mapped_column(
        "created_date_time", DateTime(timezone=True), nullable=False,
    )
    modified: Mapped[datetime] = mapped_column(
        "modification_date_time", DateTime(timezone=True), nullable=False,
    )
    name: Mapped[str] = mapped_column(
        "ven_name", String(128), nullable=False, unique=True,
    )
    document: Mapped[dict] = mapped_column(JSON, nullable=False)


class VenProgramRow(Base):
    __tablename__ = "ven_programs"

    program_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("programs.id", ondelete="CASCADE"),
        primary_key=True,
    )
    ven_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("vens.id", ondelete="CASCADE"),
        primary_key=True, index=True,
    )
