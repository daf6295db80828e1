from datetime import timedelta
from functools import lru_cache

from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.cognito_identity_provider import CognitoIdentityProvider
from src.adapter.services.provider_token_verifier import ProviderTokenVerifier
from src.adapter.services.sns_sms_gateway import SnsSmsGateway
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils.jwt import LocalTokenService
from src.api.utils.token_verifier import TokenVerifier
from src.app.services.identity_provider import IIdentityProvider
from src.app.services.request_context import RequestContext
from src.app.services.sms_gateway import ISmsGateway
from src.app.use_cases.auth.otp_policy import OtpSettings
from src.domain.roles import RoleClaimsTable

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Validated once at startup; an unknown role name fails the import
role_claims_table = RoleClaimsTable.from_mapping(ApplicationConfig.ROLES_CLAIMS)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_role_claims() -> RoleClaimsTable:
    return role_claims_table


@lru_cache
def get_identity_provider() -> IIdentityProvider:
    return CognitoIdentityProvider(
        user_pool_id=ApplicationConfig.COGNITO_USER_POOL_ID,
        region_name=ApplicationConfig.AWS_REGION,
        endpoint_url=ApplicationConfig.COGNITO_ENDPOINT_URL,
    )


@lru_cache
def get_sms_gateway() -> ISmsGateway:
    return SnsSmsGateway(
        region_name=ApplicationConfig.AWS_REGION,
        sender_id=ApplicationConfig.SMS_SENDER_ID,
        endpoint_url=ApplicationConfig.SNS_ENDPOINT_URL,
    )


@lru_cache
def get_local_token_service() -> LocalTokenService:
    return LocalTokenService(
        secret=ApplicationConfig.JWT_SECRET,
        issuer=ApplicationConfig.LOCAL_TOKEN_ISSUER,
        ttl=timedelta(hours=ApplicationConfig.LOCAL_TOKEN_TTL_HOURS),
    )


@lru_cache
def get_token_verifier() -> TokenVerifier:
    provider = ProviderTokenVerifier(
        issuer=ApplicationConfig.COGNITO_ISSUER,
        cache_ttl_seconds=ApplicationConfig.JWKS_CACHE_TTL_SECONDS,
        timeout_seconds=ApplicationConfig.JWKS_TIMEOUT_SECONDS,
    )
    return TokenVerifier(local=get_local_token_service(), provider=provider)


def get_otp_settings() -> OtpSettings:
    return OtpSettings.from_config()


def get_request_context(request: Request) -> RequestContext:
    return RequestContext(request_id=getattr(request.state, "request_id", None))
