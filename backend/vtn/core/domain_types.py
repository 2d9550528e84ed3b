"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - Entity ids are strings matching ^[a-zA-Z0-9_-]{1,128}$ and never "null"
    - Name-like fields are 1..128 characters
    - All valid kinds and labels encoded as Enums, no raw string matching

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
"""

import re
from enum import Enum

from vtn.core.errors import ValidationError


# ─── Bounds ──────────────────────────────────────────────────────

NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 128
INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

_IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,128}$")
_FORBIDDEN_IDENTIFIERS = frozenset({"null"})


def check_identifier(value: object, field: str) -> str:
    """Validate a caller-supplied identifier. Raises ValidationError."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field)
    if not _IDENTIFIER_PATTERN.match(value):
        raise ValidationError(
            f"{field} must match [a-zA-Z0-9_-] with length 1..128", field,
        )
    if value.lower() in _FORBIDDEN_IDENTIFIERS:
        raise ValidationError(f"{field} may not be '{value}'", field)
    return value


def check_name(value: object, field: str) -> str:
    """Validate a name-like string against the 1..128 length bound."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field)
    if not NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
        raise ValidationError(
            f"{field} length {len(value)} outside of allowed range "
            f"{NAME_MIN_LENGTH}..{NAME_MAX_LENGTH}",
            field,
        )
    return value


# âââ Enums âââââââââââââââââââââââââââââââââââââââââââââââââââââââ

class EntityKind(str, Enum):
    """The five entity kinds gated by the scope resolver."""
    PROGRAM = "program"
    EVENT = "event"
    REPORT = "report"
    VEN = "ven"
    RESOURCE = "resource"

    @property
    def label(self) -> str:
        return "VEN" if self is EntityKind.VEN else self.value.capitalize()


class Operation(str, Enum):
    """Operations a principal can attempt on an entity kind."""
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class TargetLabel(str, Enum):
    """Well-known target/attribute labels. Any other 1..128 string is a private label."""
    POWER_SERVICE_LOCATION = "POWER_SERVICE_LOCATION"
    SERVICE_AREA = "SERVICE_AREA"
    GROUP = "GROUP"
    RESOURCE_NAME = "RESOURCE_NAME"
    VEN_NAME = "VEN_NAME"
    EVENT_NAME = "EVENT_NAME"
    PROGRAM_NAME = "PROGRAM_NAME"


# Label that selects by the entity's own name instead of its targets
NAME_LABEL_BY_KIND: dict[EntityKind, TargetLabel] = {
    EntityKind.PROGRAM: TargetLabel.PROGRAM_NAME,
    EntityKind.EVENT: TargetLabel.EVENT_NAME,
    EntityKind.VEN: TargetLabel.VEN_NAME,
    EntityKind.RESOURCE: TargetLabel.RESOURCE_NAME,
}
