import pytest
from unittest.mock import AsyncMock, MagicMock

from config import DEFAULT_ROLES_CLAIMS
from src.domain.roles import RoleClaimsTable
from tests.fixtures.fakes import FakeIdentityProvider, FakeSmsGateway, InMemoryUnitOfWork


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    uow.records = MagicMock()
    uow.records.get = AsyncMock(return_value=None)
    uow.records.query = AsyncMock(return_value=[])
    uow.records.conditional_update = AsyncMock()
    uow.records.delete = AsyncMock()
    uow.records.transact_write = AsyncMock()
    return uow


@pytest.fixture
def uow():
    """Stateful unit of work backed by a dict; uncommitted writes roll back"""
    return InMemoryUnitOfWork()


@pytest.fixture
def role_claims():
    return RoleClaimsTable.from_mapping(DEFAULT_ROLES_CLAIMS)


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def sms_gateway():
    return FakeSmsGateway()
