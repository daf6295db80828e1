"""
Authorization gate

Request dependencies that verify the bearer token and enforce tenant scope
and role claims. They run before the route handler, so a failed check
never reaches business logic.
"""

from typing import Optional

from fastapi import Depends, Request, status

from src.api.error import ClientError, raise_for_error
from src.api.utils.token_verifier import TokenVerifier
from src.depends import get_role_claims, get_token_verifier
from src.domain.authorization import check_role_claims, check_tenant_scope
from src.domain.claims import VerifiedClaims
from src.domain.roles import RoleClaimsTable


def extract_token(request: Request) -> Optional[str]:
    """Token from x-access-token or Authorization: Bearer <token>"""
    token = request.headers.get("x-access-token") or request.headers.get("authorization")
    if token and token.startswith("Bearer "):
        token = token[len("Bearer "):]
    if token is None or token.strip() in ("", "undefined", "null"):
        return None
    return token.strip()


async def _verify(request: Request, verifier: TokenVerifier) -> VerifiedClaims:
    result = await verifier.verify(extract_token(request))
    if result.is_err():
        raise_for_error(result.error)
    return result.value


async def get_current_claims(
    request: Request, verifier: TokenVerifier = Depends(get_token_verifier)
) -> VerifiedClaims:
    """Verified claims of the caller; 401 when the token is missing or bad"""
    return await _verify(request, verifier)


async def get_optional_claims(
    request: Request, verifier: TokenVerifier = Depends(get_token_verifier)
) -> Optional[VerifiedClaims]:
    """Like get_current_claims, but anonymous callers get None"""
    if extract_token(request) is None:
        return None
    return await _verify(request, verifier)


async def _requested_eid(request: Request) -> Optional[str]:
    try:
        body = await request.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    data = body.get("data")
    if isinstance(data, dict) and data.get("eid"):
        return data["eid"]
    return body.get("eid")


async def require_tenant_scope(
    request: Request, claims: VerifiedClaims = Depends(get_current_claims)
) -> VerifiedClaims:
    """Caller must belong to an enterprise and may only address that one"""
    result = check_tenant_scope(claims, await _requested_eid(request))
    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_403_FORBIDDEN)
    return claims


def require_claims(*required: str):
    """Dependency factory: caller's role must grant one of the claims"""

    async def dependency(
        claims: VerifiedClaims = Depends(get_current_claims),
        table: RoleClaimsTable = Depends(get_role_claims),
    ) -> VerifiedClaims:
        result = check_role_claims(table, claims, required)
        if result.is_err():
            raise ClientError(result.error, status_code=status.HTTP_403_FORBIDDEN)
        return claims

    return dependency

