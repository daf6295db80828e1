"""
Verification of identity-provider (Cognito) ID tokens against the pool's
published JSON Web Key Set.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

import httpx
from jose import ExpiredSignatureError, JWTError, jwt

from libs.result import Error, Result, Return
from src.domain.claims import VerifiedClaims
from src.domain.entities import TokenOrigin

logger = logging.getLogger(__name__)


class JwksFetchError(Exception):
    pass


class ProviderTokenVerifier:
    """
    Verifies RS256 tokens issued by the identity provider.

    Keys are cached for cache_ttl_seconds; a token whose kid is not in a
    fresh cache triggers one refetch (key rotation) before it is rejected.
    """

    def __init__(
        self,
        issuer: str,
        cache_ttl_seconds: int = 300,
        timeout_seconds: float = 5.0,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.issuer = issuer.rstrip("/")
        self.jwks_url = f"{self.issuer}/.well-known/jwks.json"
        self.cache_ttl_seconds = cache_ttl_seconds
        self.timeout_seconds = timeout_seconds
        self.http_client = http_client
        self.clock = clock
        self._keys: Dict[str, Dict[str, Any]] = {}
        self._fetched_at: Optional[float] = None

    def _cache_fresh(self) -> bool:
        return (
            self._fetched_at is not None
            and self.clock() - self._fetched_at < self.cache_ttl_seconds
        )

    async def _fetch_keys(self) -> Dict[str, Dict[str, Any]]:
        try:
            if self.http_client is not None:
                response = await self.http_client.get(self.jwks_url)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.get(self.jwks_url)
            response.raise_for_status()
            document = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise JwksFetchError(f"Failed to fetch JWKS from {self.jwks_url}: {e}") from e

        keys = document.get("keys") if isinstance(document, dict) else None
        if not isinstance(keys, list):
            raise JwksFetchError("Malformed JWKS document")

        return {key["kid"]: key for key in keys if isinstance(key, dict) and key.get("kid")}

    async def _get_key(self, kid: str) -> Optional[Dict[str, Any]]:
        if self._cache_fresh() and kid in self._keys:
            return self._keys[kid]

        self._keys = await self._fetch_keys()
        self._fetched_at = self.clock()
        return self._keys.get(kid)

    async def verify(self, token: Optional[str]) -> Result[VerifiedClaims]:
        if not token or token in ("undefined", "null") or not token.strip():
            return Return.err(Error("TOKEN_MISSING", "Access Token Required"))

        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            return Return.err(Error("TOKEN_INVALID", "Invalid Access Token"))

        kid = header.get("kid")
        if not kid:
            return Return.err(Error("TOKEN_INVALID", "Invalid Access Token"))

        try:
            key = await self._get_key(kid)
        except JwksFetchError as e:
            logger.error(str(e))
            return Return.err(Error("UPSTREAM_FAILURE", "Unable to fetch signing keys"))

        if key is None:
            logger.warning(f"No matching signing key for kid {kid}")
            return Return.err(Error("TOKEN_INVALID", "Invalid Access Token"))

        try:
            payload = jwt.decode(
                token,
                key,
                algorithms=[key.get("alg", "RS256")],
                issuer=self.issuer,
                options={"verify_aud": False, "verify_at_hash": False},
            )
        except ExpiredSignatureError:
            return Return.err(Error("TOKEN_EXPIRED", "Token has expired"))
        except JWTError as e:
            logger.warning(f"Provider token verification failed: {e}")
            return Return.err(Error("TOKEN_INVALID", "Invalid Access Token"))

        return Return.ok(VerifiedClaims.from_payload(TokenOrigin.provider, payload))
