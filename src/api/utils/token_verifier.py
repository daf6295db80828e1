from datetime import datetime
from typing import Optional

from jose import JWTError, jwt

from libs.result import Error, Result, Return
from src.adapter.services.provider_token_verifier import ProviderTokenVerifier
from src.api.utils.jwt import LocalTokenService
from src.domain.claims import VerifiedClaims


class TokenVerifier:
    """
    Verifies either token family into VerifiedClaims.

    The unverified issuer only selects the verification path; each path
    then checks the signature against its own key material.
    """

    def __init__(self, local: LocalTokenService, provider: ProviderTokenVerifier):
        self.local = local
        self.provider = provider

    async def verify(self, token: Optional[str], now: Optional[datetime] = None) -> Result[VerifiedClaims]:
        if not token:
            return Return.err(Error("TOKEN_MISSING", "Access Token Required"))

        try:
            issuer = jwt.get_unverified_claims(token).get("iss")
        except JWTError:
            return Return.err(Error("TOKEN_INVALID", "Invalid Access Token"))

        if issuer == self.local.issuer:
            return self.local.verify(token, now=now)
        return await self.provider.verify(token)
