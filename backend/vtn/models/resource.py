"""Resource ORM: a Resource always belongs to one VEN."""

from datetime import datetime

from sqlalchemy import String, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from vtn.db.base import Base


class ResourceRow(Base):
    __tablename__ = "resources"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    created: Mapped[datetime] = mapped_column(
        "created_date_time", DateTime(timezone=True), nullable=False,
    )
    modified: Mapped[datetime] = mapped_column(
        "modification_date_time", DateTime(timezone=True), nullable=False,
    )
    name: Mapped[str] = mapped_column(
        "resource_name", String(128), nullable=False, unique=True,
    )
    ven_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("vens.id"), nullable=False, index=True,
    )
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
