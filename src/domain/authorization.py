"""
Authorization checks applied to verified claims.

The checks are pure; the API layer composes them as request dependencies
so a failure stops the request before its handler runs.
"""

from typing import Optional

from libs.result import Error, Result, Return

from src.domain.claims import VerifiedClaims
from src.domain.roles import RoleClaimsTable, check_claims


def check_tenant_scope(claims: VerifiedClaims, requested_eid: Optional[str] = None) -> Result[None]:
    """Claims must carry an eid, and a requested eid must match it"""
    if not claims.eid:
        return Return.err(Error("FORBIDDEN", "Forbidden - Enterprise ID not set"))

    if requested_eid and requested_eid != claims.eid:
        return Return.err(
            Error("FORBIDDEN", "Forbidden - Not authorised to perform this action")
        )

    return Return.ok(None)


def check_role_claims(
    table: RoleClaimsTable, claims: VerifiedClaims, required: tuple
) -> Result[None]:
    return check_claims(table, claims.role, required)
