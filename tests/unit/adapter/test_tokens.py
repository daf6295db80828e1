from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from src.adapter.services.provider_token_verifier import ProviderTokenVerifier
from src.api.utils.jwt import LocalTokenService
from src.api.utils.token_verifier import TokenVerifier
from src.domain.entities import TokenOrigin
from tests.fixtures.tokens import ISSUER, JwksServer, RsaSigner, admin_claims

NOW = datetime(2026, 3, 1, 8, 0, 0, tzinfo=UTC)


@pytest.fixture
def local():
    return LocalTokenService(secret="test-secret", issuer="lsp-oms-local")


@pytest.fixture(scope="module")
def signer():
    return RsaSigner()


def issue(local, now=NOW):
    return local.issue(
        username="+919999900001@lsp-rider.local",
        eid="e-lsp",
        role="lsp_rider",
        enterprise_type="lsp",
        is_confirmed_by_admin=True,
        now=now,
    )


def test_local_token_carries_custom_claims(local):
    payload = jwt.get_unverified_claims(issue(local))

    assert payload["iss"] == "lsp-oms-local"
    assert payload["custom:eid"] == "e-lsp"
    assert payload["custom:role"] == "lsp_rider"
    assert payload["custom:enterpriseType"] == "lsp"
    assert payload["custom:isConfirmedByAdmin"] == "true"
    assert payload["auth_method"] == "otp"
    assert payload["exp"] - payload["iat"] == 4 * 3600
    assert payload["jti"]


def test_local_tokens_are_unique(local):
    assert issue(local) != issue(local)


def test_local_token_valid_one_second_before_expiry(local):
    token = issue(local)

    result = local.verify(token, now=NOW + timedelta(hours=4) - timedelta(seconds=1))

    assert result.is_ok()
    assert result.value.origin == TokenOrigin.local
    assert result.value.eid == "e-lsp"
    assert result.value.is_confirmed_by_admin is True


def test_local_token_expired_one_second_after_expiry(local):
    token = issue(local)

    result = local.verify(token, now=NOW + timedelta(hours=4) + timedelta(seconds=1))

    assert result.error.code == "TOKEN_EXPIRED"


def test_local_token_with_other_secret_is_invalid(local):
    forged = LocalTokenService(secret="other", issuer="lsp-oms-local")

    assert local.verify(issue(forged), now=NOW).error.code == "TOKEN_INVALID"


def test_local_token_missing(local):
    assert local.verify(None).error.code == "TOKEN_NOT_SUPPLIED"


@pytest.mark.asyncio
async def test_provider_token_verifies_against_jwks(signer):
    server = JwksServer(signer)
    verifier = ProviderTokenVerifier(ISSUER, http_client=server.client())
    token = signer.mint(extra=admin_claims("e-1", "supplier_admin", "supplier", "Founder@Acme.com"))

    result = await verifier.verify(token)

    assert result.is_ok()
    claims = result.value
    assert claims.origin == TokenOrigin.provider
    assert claims.username == "founder@acme.com"
    assert claims.eid == "e-1"
    assert claims.role == "supplier_admin"


@pytest.mark.asyncio
async def test_provider_keys_are_cached(signer):
    server = JwksServer(signer)
    verifier = ProviderTokenVerifier(ISSUER, http_client=server.client())
    token = signer.mint()

    await verifier.verify(token)
    await verifier.verify(token)

    assert server.requests == 1


@pytest.mark.asyncio
async def test_provider_keys_refetched_after_ttl(signer):
    server = JwksServer(signer)
    clock = [1000.0]
    verifier = ProviderTokenVerifier(
        ISSUER, cache_ttl_seconds=300, http_client=server.client(), clock=lambda: clock[0]
    )
    token = signer.mint()

    await verifier.verify(token)
    clock[0] += 301
    await verifier.verify(token)

    assert server.requests == 2


@pytest.mark.asyncio
async def test_unknown_kid_refetches_once_then_rejects(signer):
    server = JwksServer(signer)
    verifier = ProviderTokenVerifier(ISSUER, http_client=server.client())
    await verifier.verify(signer.mint())

    result = await verifier.verify(signer.mint(kid="rotated-away"))

    assert result.error.code == "TOKEN_INVALID"
    assert server.requests == 2


@pytest.mark.asyncio
async def test_rotated_key_is_picked_up(signer):
    rotated = RsaSigner(kid="new-kid")
    server = JwksServer(signer)
    verifier = ProviderTokenVerifier(ISSUER, http_client=server.client())
    await verifier.verify(signer.mint())
    server.signers.append(rotated)

    result = await verifier.verify(rotated.mint())

    assert result.is_ok()


@pytest.mark.asyncio
async def test_provider_token_expired(signer):
    verifier = ProviderTokenVerifier(ISSUER, http_client=JwksServer(signer).client())

    result = await verifier.verify(signer.mint(expires_in_s=-60))

    assert result.error.code == "TOKEN_EXPIRED"


@pytest.mark.asyncio
async def test_provider_token_wrong_issuer(signer):
    verifier = ProviderTokenVerifier(ISSUER, http_client=JwksServer(signer).client())

    result = await verifier.verify(signer.mint(issuer="https://evil.example.com"))

    assert result.error.code == "TOKEN_INVALID"


@pytest.mark.asyncio
async def test_provider_token_signed_by_other_key(signer):
    impostor = RsaSigner(kid=signer.kid)
    verifier = ProviderTokenVerifier(ISSUER, http_client=JwksServer(signer).client())

    result = await verifier.verify(impostor.mint())

    assert result.error.code == "TOKEN_INVALID"


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, "", "undefined", "null"])
async def test_provider_token_missing(signer, token):
    verifier = ProviderTokenVerifier(ISSUER, http_client=JwksServer(signer).client())

    assert (await verifier.verify(token)).error.code == "TOKEN_MISSING"


@pytest.mark.asyncio
async def test_provider_garbage_token(signer):
    verifier = ProviderTokenVerifier(ISSUER, http_client=JwksServer(signer).client())

    assert (await verifier.verify("not-a-jwt")).error.code == "TOKEN_INVALID"


@pytest.mark.asyncio
async def test_jwks_outage_is_upstream_failure(signer):
    verifier = ProviderTokenVerifier(ISSUER, http_client=JwksServer(signer, status_code=503).client())

    result = await verifier.verify(signer.mint())

    assert result.error.code == "UPSTREAM_FAILURE"


@pytest.mark.asyncio
async def test_dispatcher_routes_by_issuer(local, signer):
    verifier = TokenVerifier(
        local=local, provider=ProviderTokenVerifier(ISSUER, http_client=JwksServer(signer).client())
    )

    local_result = await verifier.verify(issue(local, now=datetime.now(UTC)))
    provider_result = await verifier.verify(signer.mint())

    assert local_result.value.origin == TokenOrigin.local
    assert provider_result.value.origin == TokenOrigin.provider


@pytest.mark.asyncio
async def test_dispatcher_rejects_local_issuer_with_bad_signature(local, signer):
    verifier = TokenVerifier(
        local=local, provider=ProviderTokenVerifier(ISSUER, http_client=JwksServer(signer).client())
    )
    forged = LocalTokenService(secret="guess", issuer="lsp-oms-local")

    result = await verifier.verify(issue(forged, now=datetime.now(UTC)))

    assert result.error.code == "TOKEN_INVALID"


@pytest.mark.asyncio
async def test_dispatcher_missing_token(local, signer):
    verifier = TokenVerifier(local=local, provider=ProviderTokenVerifier(ISSUER))

    assert (await verifier.verify(None)).error.code == "TOKEN_MISSING"
