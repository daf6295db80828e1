"""
Role & Claims Resolver

Maps a signup request to its canonical role and a role to its claim set.
The role table is loaded once from configuration and never mutated.
"""

from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional

from libs.result import Error, Result, Return

from src.domain.entities import EnterpriseType

ENTERPRISE_TYPES = tuple(t.value for t in EnterpriseType)


class RoleClaimsTable:
    """
    Immutable role -> claims mapping.

    Role names must be "<enterprise_type>_<suffix>" for a known enterprise
    type. Empty claim strings are dropped, so a role may legitimately carry
    no claims; an unknown role is never treated as such a role.
    """

    def __init__(self, roles: Mapping[str, FrozenSet[str]]):
        self._roles = MappingProxyType(dict(roles))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]]) -> "RoleClaimsTable":
        """
        Build and validate a table from raw configuration.

        Raises:
            ValueError: unknown role name or malformed claim list
        """
        if not isinstance(mapping, Mapping):
            raise ValueError("ROLES_CLAIMS must be a mapping of role -> claims")

        roles = {}
        for role, claims in mapping.items():
            if not isinstance(role, str) or not _is_known_role_name(role):
                raise ValueError(
                    f"Unknown role '{role}'. Roles must be named "
                    f"<enterprise_type>_<name> with enterprise_type in {ENTERPRISE_TYPES}"
                )
            if isinstance(claims, str) or not isinstance(claims, (list, tuple, set, frozenset)):
                raise ValueError(f"Claims for role '{role}' must be a list")
            for claim in claims:
                if not isinstance(claim, str):
                    raise ValueError(f"Claims for role '{role}' must be strings")
            roles[role] = frozenset(c for c in claims if c)
        return cls(roles)

    def __contains__(self, role: object) -> bool:
        return role in self._roles

    def __len__(self) -> int:
        return len(self._roles)

    def roles(self) -> FrozenSet[str]:
        return frozenset(self._roles)

    def claims_for(self, role: str) -> FrozenSet[str]:
        """Raises KeyError for an unknown role"""
        return self._roles[role]


def _is_known_role_name(role: str) -> bool:
    prefix, sep, suffix = role.partition("_")
    return bool(sep) and bool(suffix) and prefix in ENTERPRISE_TYPES


def admin_role(enterprise_type: str) -> str:
    return f"{enterprise_type}_admin"


def resolve_role(
    table: RoleClaimsTable,
    enterprise_type: str,
    eid: Optional[str] = None,
    role: Optional[str] = None,
    caller_eid: Optional[str] = None,
) -> Result[str]:
    """
    Resolve the role for a signup.

    Without an eid the caller founds a new enterprise and becomes its admin.
    With an eid the caller adds an internal user to an existing enterprise:
    the role must be explicit, known, belong to the enterprise's type and
    not be its admin role, and the caller must belong to that enterprise.
    """
    if not eid:
        return Return.ok(admin_role(enterprise_type))

    if not role:
        return Return.err(
            Error("VALIDATION_ERROR", "Role is required when adding internal users")
        )
    if (
        role not in table
        or not role.startswith(f"{enterprise_type}_")
        or role == admin_role(enterprise_type)
    ):
        return Return.err(Error("INVALID_ROLE", f"Invalid role for internal users: {role}"))
    if caller_eid != eid:
        return Return.err(Error("TENANT_MISMATCH", "Wrong eid provided"))

    return Return.ok(role)


def check_claims(
    table: RoleClaimsTable, role: Optional[str], required: Iterable[str]
) -> Result[None]:
    """Ok when the role's claims intersect the required claims"""
    forbidden = Error("FORBIDDEN", "Forbidden - Not authorised to perform this action")

    if not role or role not in table:
        return Return.err(forbidden)

    if table.claims_for(role).isdisjoint(required):
        return Return.err(forbidden)

    return Return.ok(None)
