"""
Verified identity claims.

Both token families (identity-provider tokens and locally issued OTP
tokens) verify into the same VerifiedClaims shape; origin records which
family produced it, and nothing downstream of verification branches on it.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from src.domain.entities import TokenOrigin

EID_CLAIM = "custom:eid"
ROLE_CLAIM = "custom:role"
ENTERPRISE_TYPE_CLAIM = "custom:enterpriseType"
CONFIRMED_CLAIM = "custom:isConfirmedByAdmin"


class VerifiedClaims(BaseModel):
    """Identity extracted from a verified bearer token"""

    origin: TokenOrigin
    subject: str
    username: Optional[str] = None
    eid: Optional[str] = None
    role: Optional[str] = None
    enterprise_type: Optional[str] = None
    is_confirmed_by_admin: bool = False
    auth_method: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, origin: TokenOrigin, payload: Dict[str, Any]) -> "VerifiedClaims":
        username = (
            payload.get("cognito:username")
            or payload.get("username")
            or payload.get("email")
            or payload.get("sub")
        )
        return cls(
            origin=origin,
            subject=str(payload.get("sub", "")),
            username=username.lower() if isinstance(username, str) else None,
            eid=payload.get(EID_CLAIM),
            role=payload.get(ROLE_CLAIM),
            enterprise_type=payload.get(ENTERPRISE_TYPE_CLAIM),
            is_confirmed_by_admin=str(payload.get(CONFIRMED_CLAIM, "false")).lower() == "true",
            auth_method=payload.get("auth_method", "password" if origin == TokenOrigin.provider else None),
            raw=dict(payload),
        )
