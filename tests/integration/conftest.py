import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain.entities  # noqa: F401  registers the records table
from src.adapter.services.provider_token_verifier import ProviderTokenVerifier
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils.token_verifier import TokenVerifier
from src.app.use_cases.auth.otp_policy import OtpSettings
from src.depends import (
    get_identity_provider,
    get_local_token_service,
    get_otp_settings,
    get_sms_gateway,
    get_token_verifier,
    get_unit_of_work,
)
from tests.fixtures.fakes import FakeIdentityProvider, FakeSmsGateway
from tests.fixtures.json_loader import TestDataLoader
from tests.fixtures.tokens import ISSUER, JwksServer, RsaSigner, admin_claims

TEST_NUMBER_PREFIX = "+919999900"


@pytest.fixture
def test_data():
    return TestDataLoader()


@pytest.fixture(scope="session")
def signer():
    return RsaSigner()


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def sms_gateway():
    return FakeSmsGateway()


@pytest.fixture
def superadmin_token(signer):
    return signer.mint(
        extra=admin_claims("platform", "superadmin_admin", "superadmin", "root@platform.io")
    )


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session, identity_provider, sms_gateway, signer):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)
    jwks = JwksServer(signer)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    def override_get_token_verifier():
        return TokenVerifier(
            local=get_local_token_service(),
            provider=ProviderTokenVerifier(ISSUER, http_client=jwks.client()),
        )

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    app.dependency_overrides[get_sms_gateway] = lambda: sms_gateway
    app.dependency_overrides[get_token_verifier] = override_get_token_verifier
    app.dependency_overrides[get_otp_settings] = lambda: OtpSettings(test_number_prefix=TEST_NUMBER_PREFIX)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
