from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import uuid4

from jose import JWTError, jwt

from libs.result import Error, Result, Return
from src.domain.claims import (
    CONFIRMED_CLAIM,
    EID_CLAIM,
    ENTERPRISE_TYPE_CLAIM,
    ROLE_CLAIM,
    VerifiedClaims,
)
from src.domain.entities import AuthMethod, TokenOrigin

ALGORITHM = "HS256"


class LocalTokenService:
    """
    Issues and verifies the service's own tokens (OTP login path).

    Tokens are HS256 signed with a service-held secret and carry the same
    custom claims as identity-provider ID tokens, tagged with a distinct
    issuer so the two families can be told apart.
    """

    def __init__(self, secret: str, issuer: str, ttl: timedelta = timedelta(hours=4)):
        self.secret = secret
        self.issuer = issuer
        self.ttl = ttl

    def issue(
        self,
        username: str,
        eid: str,
        role: str,
        enterprise_type: str,
        is_confirmed_by_admin: bool,
        auth_method: str = AuthMethod.otp.value,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Generate a signed token

        Returns:
            JWT string (HS256, expires issued-at + ttl)
        """
        issued_at = int((now or datetime.now(UTC)).timestamp())
        payload = {
            "sub": username,
            "username": username,
            "iss": self.issuer,
            EID_CLAIM: eid,
            ROLE_CLAIM: role,
            ENTERPRISE_TYPE_CLAIM: enterprise_type,
            CONFIRMED_CLAIM: "true" if is_confirmed_by_admin else "false",
            "auth_method": auth_method,
            "iat": issued_at,
            "exp": issued_at + int(self.ttl.total_seconds()),
            "jti": str(uuid4()),
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def verify(self, token: Optional[str], now: Optional[datetime] = None) -> Result[VerifiedClaims]:
        """
        Verify signature, issuer and expiry of a locally issued token

        Expiry is checked against `now` so a token is valid up to and
        including its exp second.
        """
        if not token:
            return Return.err(Error("TOKEN_NOT_SUPPLIED", "Auth token is not supplied"))

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTError:
            return Return.err(Error("TOKEN_INVALID", "Token is not valid"))

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            return Return.err(Error("TOKEN_INVALID", "Token is not valid"))

        current = (now or datetime.now(UTC)).timestamp()
        if exp < current:
            return Return.err(Error("TOKEN_EXPIRED", "Token has expired"))

        return Return.ok(VerifiedClaims.from_payload(TokenOrigin.local, payload))


