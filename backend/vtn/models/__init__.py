"""ORM Models: SQLAlchemy declarative models for the five entity kinds.

Invariants:
    - All models inherit from Base (db/base.py)
    - Program is the ownership root for Events and Reports; VEN for Resources

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or Alembic autogenerate runs
"""

from vtn.models.program import ProgramRow  # noqa: F401
from vtn.models.event import EventRow  # noqa: F401
from vtn.models.report import ReportRow  # noqa: F401
from vtn.models.ven import VenRow, VenProgramRow  # noqa: F401
from vtn.models.resource import ResourceRow  # noqa: F401
