import pytest

from src.app.services.identity_provider import IdentityProviderError, IdentityUser
from src.app.use_cases.enterprises import (
    AddRiderUseCase,
    AddUserCommand,
    AddUserUseCase,
    ConfirmUserUseCase,
    DeleteEnterpriseUseCase,
    DeleteUserUseCase,
    ListEnterprisesUseCase,
)
from src.domain.claims import VerifiedClaims
from src.domain.entities import TokenOrigin
from src.domain.keys import (
    enterprise_profile_key,
    enterprise_type_key,
    member_key,
    mobile_key,
    profile_key,
    rider_username,
)
from tests.fixtures.fakes import seed, seed_enterprise, seed_member

RIDER_MOBILE = "+919999900001"


def register(identity_provider, username):
    identity_provider.users[username] = IdentityUser(
        username, "CONFIRMED", {"custom:isConfirmedByAdmin": "false"}
    )


def supplier_admin_claims(eid="e-1") -> VerifiedClaims:
    return VerifiedClaims(
        origin=TokenOrigin.provider,
        subject="sub-1",
        username="founder@acme.com",
        eid=eid,
        role="supplier_admin",
        enterprise_type="supplier",
        is_confirmed_by_admin=True,
    )


@pytest.mark.asyncio
async def test_confirm_user_flips_both_records_then_provider(uow, identity_provider):
    seed_member(uow, "e-1", "rm@acme.com", "supplier", "supplier_sales_rm")
    register(identity_provider, "rm@acme.com")

    result = await ConfirmUserUseCase(uow, identity_provider).execute("RM@acme.com", eid="e-1")

    assert result.is_ok()
    assert uow.data[profile_key("rm@acme.com")]["isConfirmedByAdmin"] == "true"
    assert uow.data[member_key("e-1", "rm@acme.com")]["isConfirmedByAdmin"] == "true"
    assert identity_provider.users["rm@acme.com"].attribute("custom:isConfirmedByAdmin") == "true"
    assert uow.commits == 1


@pytest.mark.asyncio
async def test_confirm_user_of_other_enterprise_is_not_found(uow, identity_provider):
    seed_member(uow, "e-2", "rm@acme.com", "supplier", "supplier_sales_rm")

    result = await ConfirmUserUseCase(uow, identity_provider).execute("rm@acme.com", eid="e-1")

    assert result.error.code == "USER_NOT_FOUND"
    assert identity_provider.calls == []


@pytest.mark.asyncio
async def test_platform_admin_confirm_uses_profile_eid(uow, identity_provider):
    seed_member(uow, "e-7", "founder@acme.com", "supplier", "supplier_admin")
    register(identity_provider, "founder@acme.com")

    result = await ConfirmUserUseCase(uow, identity_provider).execute("founder@acme.com")

    assert result.value.eid == "e-7"
    assert uow.data[member_key("e-7", "founder@acme.com")]["isConfirmedByAdmin"] == "true"


@pytest.mark.asyncio
async def test_confirm_rider_skips_provider(uow, identity_provider):
    username = rider_username(RIDER_MOBILE)
    seed_member(uow, "e-lsp", username, "lsp", "lsp_rider", auth_method="otp")

    result = await ConfirmUserUseCase(uow, identity_provider).execute(username, eid="e-lsp")

    assert result.is_ok()
    assert identity_provider.calls == []


@pytest.mark.asyncio
async def test_delete_user_deletes_provider_account_before_records(uow, identity_provider):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    seed_member(uow, "e-1", "rm@acme.com", "supplier", "supplier_sales_rm")
    register(identity_provider, "rm@acme.com")

    result = await DeleteUserUseCase(uow, identity_provider).execute("e-1", "rm@acme.com")

    assert result.is_ok()
    assert identity_provider.call_names() == ["admin_delete_user"]
    assert profile_key("rm@acme.com") not in uow.data
    assert member_key("e-1", "rm@acme.com") not in uow.data
    assert enterprise_profile_key("e-1") in uow.data


@pytest.mark.asyncio
async def test_delete_user_provider_failure_leaves_store(uow, identity_provider):
    seed_member(uow, "e-1", "rm@acme.com", "supplier", "supplier_sales_rm")
    identity_provider.failures["admin_delete_user"] = IdentityProviderError(
        "InternalErrorException", "Provider unavailable", 503
    )
    before = dict(uow.data)

    result = await DeleteUserUseCase(uow, identity_provider).execute("e-1", "rm@acme.com")

    assert result.error.code == "UPSTREAM_FAILURE"
    assert result.error.details["status_code"] == 503
    assert uow.data == before


@pytest.mark.asyncio
async def test_delete_user_missing_provider_account_counts_as_deleted(uow, identity_provider):
    seed_member(uow, "e-1", "rm@acme.com", "supplier", "supplier_sales_rm")

    result = await DeleteUserUseCase(uow, identity_provider).execute("e-1", "rm@acme.com")

    assert result.is_ok()
    assert profile_key("rm@acme.com") not in uow.data


@pytest.mark.asyncio
async def test_delete_user_refuses_enterprise_admin(uow, identity_provider):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    seed_member(uow, "e-1", "founder@acme.com", "supplier", "supplier_admin")

    result = await DeleteUserUseCase(uow, identity_provider).execute("e-1", "founder@acme.com")

    assert result.error.code == "FORBIDDEN"
    assert identity_provider.calls == []


@pytest.mark.asyncio
async def test_delete_rider_removes_otp_record_without_provider(uow, identity_provider):
    username = rider_username(RIDER_MOBILE)
    seed_member(uow, "e-lsp", username, "lsp", "lsp_rider", auth_method="otp", mobile_number=RIDER_MOBILE)
    seed(uow, mobile_key(RIDER_MOBILE), {"mobile_number": RIDER_MOBILE})

    result = await DeleteUserUseCase(uow, identity_provider).execute("e-lsp", username)

    assert result.is_ok()
    assert identity_provider.calls == []
    assert uow.data == {}


@pytest.mark.asyncio
async def test_add_user_enrolls_into_callers_enterprise(uow, identity_provider, role_claims):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    command = AddUserCommand(
        email="rm@acme.com", password="SecurePass123!", role="supplier_sales_rm", client_id="c"
    )

    result = await AddUserUseCase(uow, identity_provider, role_claims).execute(command, supplier_admin_claims())

    assert result.is_ok()
    assert result.value.eid == "e-1"
    assert uow.data[profile_key("rm@acme.com")]["enterprise_type"] == "supplier"


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["superadmin_admin", "supplier_admin"])
async def test_add_user_rejects_privileged_role(uow, identity_provider, role_claims, role):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    before = dict(uow.data)
    command = AddUserCommand(email="rm@acme.com", password="x" * 8, role=role, client_id="c")

    result = await AddUserUseCase(uow, identity_provider, role_claims).execute(command, supplier_admin_claims())

    assert result.error.code == "INVALID_ROLE"
    assert uow.data == before
    assert identity_provider.calls == []


@pytest.mark.asyncio
async def test_add_user_requires_enterprise_claims(uow, identity_provider, role_claims):
    command = AddUserCommand(email="rm@acme.com", password="x" * 8, role="supplier_sales_rm", client_id="c")

    result = await AddUserUseCase(uow, identity_provider, role_claims).execute(
        command, supplier_admin_claims(eid=None)
    )

    assert result.error.code == "FORBIDDEN"


@pytest.mark.asyncio
async def test_add_rider_writes_unapproved_otp_profile(uow, role_claims):
    seed_enterprise(uow, "e-lsp", "lsp", "ops@fastlane.in")

    result = await AddRiderUseCase(uow, role_claims).execute("e-lsp", RIDER_MOBILE)

    assert result.is_ok()
    profile = uow.data[profile_key(rider_username(RIDER_MOBILE))]
    assert profile["role"] == "lsp_rider"
    assert profile["auth_method"] == "otp"
    assert profile["isConfirmedByAdmin"] == "false"
    assert member_key("e-lsp", rider_username(RIDER_MOBILE)) in uow.data


@pytest.mark.asyncio
async def test_add_rider_twice_conflicts(uow, role_claims):
    seed_enterprise(uow, "e-lsp", "lsp", "ops@fastlane.in")
    await AddRiderUseCase(uow, role_claims).execute("e-lsp", RIDER_MOBILE)

    result = await AddRiderUseCase(uow, role_claims).execute("e-lsp", RIDER_MOBILE)

    assert result.error.code == "USERNAME_EXISTS"


@pytest.mark.asyncio
async def test_add_rider_requires_lsp_enterprise(uow, role_claims):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")

    result = await AddRiderUseCase(uow, role_claims).execute("e-1", RIDER_MOBILE)

    assert result.error.code == "ENTERPRISE_NOT_FOUND"
    assert profile_key(rider_username(RIDER_MOBILE)) not in uow.data


@pytest.mark.asyncio
async def test_list_enterprises(uow):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    seed_enterprise(uow, "e-2", "lsp", "ops@fastlane.in")

    result = await ListEnterprisesUseCase(uow).execute()

    assert sorted((e.eid, e.enterprise_type) for e in result.value.data) == [
        ("e-1", "supplier"),
        ("e-2", "lsp"),
    ]


@pytest.mark.asyncio
async def test_delete_enterprise_removes_members_and_accounts(uow, identity_provider):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    seed_member(uow, "e-1", "founder@acme.com", "supplier", "supplier_admin")
    seed_member(uow, "e-1", "rm@acme.com", "supplier", "supplier_sales_rm")
    register(identity_provider, "founder@acme.com")
    register(identity_provider, "rm@acme.com")
    seed_enterprise(uow, "e-2", "lsp", "ops@fastlane.in")

    result = await DeleteEnterpriseUseCase(uow, identity_provider).execute("e-1", "supplier")

    assert result.value.deleted_members == ["founder@acme.com", "rm@acme.com"]
    assert identity_provider.users == {}
    assert set(uow.data) == {enterprise_type_key("lsp", "e-2"), enterprise_profile_key("e-2")}


@pytest.mark.asyncio
async def test_delete_enterprise_keeps_profile_rebound_elsewhere(uow, identity_provider):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")
    seed(uow, member_key("e-1", "moved@acme.com"), {"eid": "e-1", "username": "moved@acme.com"})
    seed_member(uow, "e-9", "moved@acme.com", "supplier", "supplier_sales_rm")
    register(identity_provider, "moved@acme.com")

    result = await DeleteEnterpriseUseCase(uow, identity_provider).execute("e-1")

    assert result.is_ok()
    assert "moved@acme.com" in identity_provider.users
    assert uow.data[profile_key("moved@acme.com")]["eid"] == "e-9"
    assert member_key("e-1", "moved@acme.com") not in uow.data


@pytest.mark.asyncio
async def test_delete_unknown_enterprise(uow, identity_provider):
    result = await DeleteEnterpriseUseCase(uow, identity_provider).execute("e-404")

    assert result.error.code == "ENTERPRISE_NOT_FOUND"


@pytest.mark.asyncio
async def test_delete_enterprise_type_mismatch(uow, identity_provider):
    seed_enterprise(uow, "e-1", "supplier", "founder@acme.com")

    result = await DeleteEnterpriseUseCase(uow, identity_provider).execute("e-1", "lsp")

    assert result.error.code == "ENTERPRISE_NOT_FOUND"
