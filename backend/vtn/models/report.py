"""Report ORM: a Report references both its Program and its Event."""

from datetime import datetime

from sqlalchemy import String, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from vtn.db.base import Base


class ReportRow(Base):
    __tablename__ = "reports"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    created: Mapped[datetime] = mapped_column(
        "created_date_time", DateTime(timezone=True), nullable=False,
    )
    modified: Mapped[datetime] = mapped_column(
        "modification_date_time", DateTime(timezone=True), nullable=False,
    )
    name: Mapped[str | None] = mapped_column(
        "report_name", String(128), nullable=True, unique=True,
    )
    program_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("programs.id"), nullable=False, index=True,
    )
    event_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("events.id"), nullable=False, index=True,
    )
    client_name: Mapped[str] = mapped_column(String(128), nullable=False)
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
