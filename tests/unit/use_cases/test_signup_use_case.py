import pytest

from src.app.services.identity_provider import IdentityProviderError
from src.app.use_cases.auth.signup_dto import SignupCommand
from src.app.use_cases.auth.signup_use_case import SignupUseCase
from src.domain.keys import (
    enterprise_profile_key,
    enterprise_type_key,
    member_key,
    profile_key,
)
from tests.fixtures.fakes import seed_enterprise, seed_member


def founder_command(**overrides) -> SignupCommand:
    values = {
        "email": "Founder@Acme.com",
        "password": "SecurePass123!",
        "enterprise_type": "supplier",
        "client_id": "client-1",
        "business_name": "Acme Supplies",
    }
    values.update(overrides)
    return SignupCommand(**values)


@pytest.mark.asyncio
async def test_founder_signup_writes_four_consistent_records(uow, identity_provider, role_claims):
    use_case = SignupUseCase(uow, identity_provider, role_claims)

    result = await use_case.execute(founder_command())

    assert result.is_ok()
    response = result.value
    assert response.username == "founder@acme.com"
    assert response.role == "supplier_admin"

    eid = response.eid
    records = [
        uow.data[enterprise_type_key("supplier", eid)],
        uow.data[enterprise_profile_key(eid)],
        uow.data[profile_key("founder@acme.com")],
        uow.data[member_key(eid, "founder@acme.com")],
    ]
    assert len(uow.data) == 4
    assert {r["eid"] for r in records} == {eid}
    assert len({r["create_datetime"] for r in records}) == 1
    assert records[0]["admin"] == "founder@acme.com"
    assert records[0]["email_verified"] == "no"
    assert records[2]["role"] == "supplier_admin"
    assert records[2]["isConfirmedByAdmin"] == "false"
    assert records[2]["auth_method"] == "password"
    assert uow.commits == 1


@pytest.mark.asyncio
async def test_founder_signup_registers_provider_attributes(uow, identity_provider, role_claims):
    result = await SignupUseCase(uow, identity_provider, role_claims).execute(founder_command())

    name, username, attributes = identity_provider.calls[0]
    assert name == "sign_up"
    assert username == "founder@acme.com"
    assert attributes == {
        "isConfirmedByAdmin": "false",
        "enterpriseType": "supplier",
        "role": "supplier_admin",
        "eid": result.value.eid,
    }


@pytest.mark.asyncio
async def test_resignup_reuses_existing_eid(uow, identity_provider, role_claims):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    seed_member(uow, "e-1", "founder@acme.com", "supplier", "supplier_admin")

    result = await SignupUseCase(uow, identity_provider, role_claims).execute(founder_command())

    assert result.is_ok()
    assert result.value.eid == "e-1"
    assert len(uow.data) == 4


@pytest.mark.asyncio
async def test_resignup_does_not_rewrite_existing_records(uow, identity_provider, role_claims):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    seed_member(uow, "e-1", "founder@acme.com", "supplier", "supplier_admin", confirmed=True)
    before = dict(uow.data)

    result = await SignupUseCase(uow, identity_provider, role_claims).execute(
        founder_command(business_name="Renamed Co")
    )

    assert result.is_ok()
    assert uow.data == before
    assert identity_provider.call_names() == ["sign_up"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [{"enterprise_type": "retailer"}, {"enterprise_type": "lsp", "business_name": "Other"}],
)
async def test_resignup_as_other_enterprise_type_conflicts(uow, identity_provider, role_claims, overrides):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    seed_member(uow, "e-1", "founder@acme.com", "supplier", "supplier_admin", confirmed=True)
    before = dict(uow.data)

    result = await SignupUseCase(uow, identity_provider, role_claims).execute(founder_command(**overrides))

    assert result.error.code == "USERNAME_EXISTS"
    assert uow.data == before
    assert identity_provider.calls == []


@pytest.mark.asyncio
async def test_founder_signup_of_internal_user_conflicts(uow, identity_provider, role_claims):
    seed_enterprise(uow, "e-1", "supplier", "boss@acme.com")
    seed_member(uow, "e-1", "founder@acme.com", "supplier", "supplier_sales_rm")
    before = dict(uow.data)

    result = await SignupUseCase(uow, identity_provider, role_claims).execute(founder_command())

    assert result.error.code == "USERNAME_EXISTS"
    assert uow.data == before


@pytest.mark.asyncio
async def test_member_readd_with_other_role_conflicts(uow, identity_provider, role_claims):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    seed_member(uow, "e-1", "rm@acme.com", "supplier", "supplier_sales_rm", confirmed=True)
    before = dict(uow.data)
    command = founder_command(email="rm@acme.com", eid="e-1", role="supplier_sales_head")

    result = await SignupUseCase(uow, identity_provider, role_claims).execute(command, caller_eid="e-1")

    assert result.error.code == "USERNAME_EXISTS"
    assert uow.data == before


@pytest.mark.asyncio
async def test_resignup_with_existing_provider_account_reports_eid(uow, identity_provider, role_claims):
    use_case = SignupUseCase(uow, identity_provider, role_claims)
    first = await use_case.execute(founder_command())

    second = await use_case.execute(founder_command())

    assert second.is_err()
    assert second.error.code == "USERNAME_EXISTS"
    assert second.error.details == {"eid": first.value.eid}


@pytest.mark.asyncio
async def test_enterprise_owned_by_another_admin_conflicts(uow, identity_provider, role_claims):
    seed_enterprise(uow, "e-1", "supplier", "someone.else@acme.com")
    seed_member(uow, "e-1", "founder@acme.com", "supplier", "supplier_admin")
    before = dict(uow.data)

    result = await SignupUseCase(uow, identity_provider, role_claims).execute(founder_command())

    assert result.error.code == "ENTERPRISE_CONFLICT"
    assert uow.data == before
    assert identity_provider.calls == []


@pytest.mark.asyncio
async def test_member_add_leaves_enterprise_records_untouched(uow, identity_provider, role_claims):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    enterprise_before = dict(uow.data[enterprise_profile_key("e-1")])
    command = founder_command(
        email="rm@acme.com", business_name=None, eid="e-1", role="supplier_sales_rm"
    )

    result = await SignupUseCase(uow, identity_provider, role_claims).execute(command, caller_eid="e-1")

    assert result.is_ok()
    assert result.value.role == "supplier_sales_rm"
    assert uow.data[enterprise_profile_key("e-1")] == enterprise_before
    assert uow.data[profile_key("rm@acme.com")]["eid"] == "e-1"
    assert member_key("e-1", "rm@acme.com") in uow.data


@pytest.mark.asyncio
async def test_member_add_to_missing_enterprise(uow, identity_provider, role_claims):
    command = founder_command(email="rm@acme.com", eid="e-404", role="supplier_sales_rm")

    result = await SignupUseCase(uow, identity_provider, role_claims).execute(command, caller_eid="e-404")

    assert result.error.code == "ENTERPRISE_NOT_FOUND"
    assert uow.data == {}


@pytest.mark.asyncio
async def test_member_add_of_user_from_other_enterprise(uow, identity_provider, role_claims):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    seed_member(uow, "e-2", "rm@acme.com", "supplier", "supplier_sales_rm")
    command = founder_command(email="rm@acme.com", eid="e-1", role="supplier_sales_rm")

    result = await SignupUseCase(uow, identity_provider, role_claims).execute(command, caller_eid="e-1")

    assert result.error.code == "USERNAME_EXISTS"


@pytest.mark.asyncio
async def test_eid_without_role_fails_before_store_access(mock_uow, identity_provider, role_claims):
    command = founder_command(eid="e-1")

    result = await SignupUseCase(mock_uow, identity_provider, role_claims).execute(command, caller_eid="e-1")

    assert result.error.code == "VALIDATION_ERROR"
    mock_uow.records.get.assert_not_called()
    mock_uow.records.transact_write.assert_not_called()
    assert identity_provider.calls == []


@pytest.mark.asyncio
async def test_wrong_eid_is_tenant_mismatch(mock_uow, identity_provider, role_claims):
    command = founder_command(eid="e-1", role="supplier_sales_rm")

    result = await SignupUseCase(mock_uow, identity_provider, role_claims).execute(command, caller_eid="e-2")

    assert result.error.code == "TENANT_MISMATCH"
    mock_uow.records.transact_write.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides,code",
    [
        ({"email": None}, "VALIDATION_ERROR"),
        ({"client_id": None}, "VALIDATION_ERROR"),
        ({"business_name": None}, "VALIDATION_ERROR"),
        ({"enterprise_type": "warehouse"}, "INVALID_ENTERPRISE_TYPE"),
    ],
)
async def test_invalid_commands_fail_without_side_effects(mock_uow, identity_provider, role_claims, overrides, code):
    result = await SignupUseCase(mock_uow, identity_provider, role_claims).execute(founder_command(**overrides))

    assert result.error.code == code
    mock_uow.records.get.assert_not_called()
    assert identity_provider.calls == []


@pytest.mark.asyncio
async def test_provider_failure_keeps_committed_records(uow, identity_provider, role_claims):
    identity_provider.failures["sign_up"] = IdentityProviderError(
        "InvalidPasswordException", "Password does not conform to policy", 400
    )

    result = await SignupUseCase(uow, identity_provider, role_claims).execute(founder_command())

    assert result.error.code == "UPSTREAM_FAILURE"
    assert result.error.details["status_code"] == 400
    assert result.error.message == "Password does not conform to policy"
    assert profile_key("founder@acme.com") in uow.data
    assert uow.commits == 1
