"""Program ORM: the ownership anchor for Events and Reports.

Invariants:
    - id is a server-assigned UUID4 string
    - name is unique (program_name)
    - business_id is the owning business; null means unowned (visible only unrestricted)

Design Decisions:
    - JSON document column holds the full entity body as served; the lookup columns
      (name, business_id) are denormalized copies used for indexes and push-down
"""

from datetime import datetime

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from vtn.db.base import Base


class ProgramRow(Base):
    __tablename__ = "programs"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    created: Mapped[datetime] = mapped_column(
        "created_date_time", DateTime(timezone=True), nullable=False,
    )
    modified: Mapped[datetime] = mapped_column(
        "modification_date_time", DateTime(timezone=True), nullable=False,
    )
    name: Mapped[str] = mapped_column(
        "program_name", String(128), nullable=False, unique=True,
    )
    business_id: Mapped[str | None] = mapped_column(
        String(128), nullable=True, index=True,
    )
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
