"""Principal: the fully-resolved caller identity supplied by the identity collaborator.

Invariants:
    - Immutable; never persisted by the core
    - Built either directly or from a role list (ADMIN, ANY_BUSINESS, BUSINESS:<id>,
      VEN:<id>, USER_MANAGER, VEN_MANAGER); unknown roles raise ValidationError
"""

from dataclasses import dataclass, field

from vtn.core.domain_types import check_identifier
from vtn.core.errors import ValidationError


@dataclass(frozen=True)
class Principal:
    is_admin: bool = False
    is_any_business_user: bool = False
    controlled_business_ids: frozenset[str] = field(default_factory=frozenset)
    controlled_ven_ids: frozenset[str] = field(default_factory=frozenset)
    is_user_manager: bool = False
    is_ven_manager: bool = False

    @classmethod
    def from_roles(cls, roles: list[str]) -> "Principal":
        flags = {
            "ADMIN": "is_admin",
            "ANY_BUSINESS": "is_any_business_user",
            "USER_MANAGER": "is_user_manager",
            "VEN_MANAGER": "is_ven_manager",
        }
        values: dict = {}
        businesses: set[str] = set()
        vens: set[str] = set()
        for role in roles:
            role = role.strip()
            if not role:
                continue
            kind, _, ident = role.partition(":")
            kind = kind.upper()
            if kind in flags and not ident:
                values[flags[kind]] = True
            elif kind == "BUSINESS" and ident:
                businesses.add(check_identifier(ident, "role"))
            elif kind == "VEN" and ident:
                vens.add(check_identifier(ident, "role"))
            else:
                raise ValidationError(f"unknown role {role!r}", "role")
        return cls(
            controlled_business_ids=frozenset(businesses),
            controlled_ven_ids=frozenset(vens),
            **values,
        )

    def describe(self) -> str:
        """Compact role summary for log lines."""
        parts = [
            name for name, on in (
                ("admin", self.is_admin),
                ("any_business", self.is_any_business_user),
                ("user_manager", self.is_user_manager),
                ("ven_manager", self.is_ven_manager),
            ) if on
        ]
        parts += [f"business:{b}" for b in sorted(self.controlled_business_ids)]
        parts += [f"ven:{v}" for v in sorted(self.controlled_ven_ids)]
        return ",".join(parts) or "none"
