"""Event ORM: one row per Event; program_id may change on update."""

from datetime import datetime

from sqlalchemy import String, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from vtn.db.base import Base


class EventRow(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    created: Mapped[datetime] = mapped_column(
        "created_date_time", DateTime(timezone=True), nullable=False,
    )
    modified: Mapped[datetime] = mapped_column(
        "modification_date_time", DateTime(timezone=True), nullable=False,
    )
    # unique among non-null values; several unnamed events may coexist
    name: Mapped[str | None] = mapped_column(
        "event_name", String(128), nullable=True, unique=True,
    )
    program_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("programs.id"), nullable=False, index=True,
    )
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
