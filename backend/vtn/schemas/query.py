"""Query Schemas: list-endpoint query parameters, validated at the HTTP boundary.

Invariants:
    - skip >= 0 and limit >= 1 checked by FastAPI before the route runs
    - The upper limit bound and the targetType/targetValues pairing are checked by
      the core (settings-dependent, and shared with non-HTTP callers)
"""

from fastapi import Query
from pydantic import BaseModel, Field


class ListParams(BaseModel):
    """Filter and window parameters shared by every list endpoint."""
    target_type: str | None = None
    target_values: list[str] | None = None
    skip: int = Field(0, ge=0)
    limit: int | None = Field(None, ge=1)


def list_params(
    target_type: str | None = Query(
        None, alias="targetType", min_length=1, max_length=128,
    ),
    target_values: list[str] | None = Query(None, alias="targetValues"),
    skip: int = Query(0, ge=0),
    limit: int | None = Query(None, ge=1),
) -> ListParams:
    """FastAPI dependency collecting the shared list parameters."""
    return ListParams(
        target_type=target_type, target_values=target_values,
        skip=skip, limit=limit,
    )


class ProgramVens(BaseModel):
    """Body of PUT /programs/{programId}/vens."""
    ven_ids: list[str] = Field(alias="venIDs")
