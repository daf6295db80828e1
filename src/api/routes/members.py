"""
Tenant-scoped member management.

The same handlers serve each enterprise type's router; every route checks
tenant scope (body eid must be the caller's eid) and the type's
manageUser claim before the handler runs.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from src.api.error import raise_for_error
from src.api.utils.authorization import require_claims, require_tenant_scope
from src.app.services.identity_provider import IIdentityProvider
from src.app.services.request_context import RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import OtpSettings, SignupResponse
from src.app.use_cases.enterprises import (
    AddRiderUseCase,
    AddUserCommand,
    AddUserUseCase,
    ConfirmUserUseCase,
    DeleteUserUseCase,
    MemberResponse,
)
from src.depends import (
    get_identity_provider,
    get_otp_settings,
    get_request_context,
    get_role_claims,
    get_unit_of_work,
)
from src.domain.claims import VerifiedClaims
from src.domain.roles import RoleClaimsTable


class AddUserData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=8)
    role: str = Field(..., min_length=1)
    client_id: str = Field(..., alias="clientId", min_length=1)
    username: Optional[str] = None


class AddUserRequest(BaseModel):
    data: AddUserData


class AddUserResponse(BaseModel):
    status: str = "success"
    data: SignupResponse


class MemberData(BaseModel):
    username: str = Field(..., min_length=1)
    eid: Optional[str] = Field(None, description="Must equal the caller's eid when given")


class MemberRequest(BaseModel):
    data: MemberData


class AddRiderData(BaseModel):
    mobile_number: str = Field(..., description="E.164 mobile number")
    eid: Optional[str] = Field(None, description="Must equal the caller's eid when given")


class AddRiderRequest(BaseModel):
    data: AddRiderData


def build_member_router(enterprise_type: str, include_riders: bool = False) -> APIRouter:
    manage_claim = f"{enterprise_type}:manageUser"
    router = APIRouter(
        prefix=f"/{enterprise_type}",
        tags=[enterprise_type.capitalize()],
        dependencies=[Depends(require_tenant_scope)],
    )

    @router.post("/addUser", status_code=status.HTTP_200_OK, response_model=AddUserResponse)
    async def add_user(
        request: AddUserRequest,
        caller: VerifiedClaims = Depends(require_claims(manage_claim)),
        uow: UnitOfWork = Depends(get_unit_of_work),
        identity_provider: IIdentityProvider = Depends(get_identity_provider),
        role_claims: RoleClaimsTable = Depends(get_role_claims),
        context: RequestContext = Depends(get_request_context),
    ):
        """Enroll an internal user into the caller's enterprise"""
        data = request.data
        command = AddUserCommand(
            email=data.email,
            password=data.password,
            role=data.role,
            client_id=data.client_id,
            username=data.username,
        )
        result = await AddUserUseCase(uow, identity_provider, role_claims).execute(
            command, caller, context=context
        )
        if result.is_err():
            raise_for_error(result.error)
        return AddUserResponse(data=result.value)

    @router.post("/confirmUser", status_code=status.HTTP_200_OK, response_model=MemberResponse)
    async def confirm_user(
        request: MemberRequest,
        caller: VerifiedClaims = Depends(require_claims(manage_claim)),
        uow: UnitOfWork = Depends(get_unit_of_work),
        identity_provider: IIdentityProvider = Depends(get_identity_provider),
        context: RequestContext = Depends(get_request_context),
    ):
        """Approve a member of the caller's enterprise"""
        result = await ConfirmUserUseCase(uow, identity_provider).execute(
            request.data.username, eid=caller.eid, context=context
        )
        if result.is_err():
            raise_for_error(result.error)
        return result.value

    @router.post("/deleteUser", status_code=status.HTTP_200_OK, response_model=MemberResponse)
    async def delete_user(
        request: MemberRequest,
        caller: VerifiedClaims = Depends(require_claims(manage_claim)),
        uow: UnitOfWork = Depends(get_unit_of_work),
        identity_provider: IIdentityProvider = Depends(get_identity_provider),
        context: RequestContext = Depends(get_request_context),
    ):
        """Remove a member from the caller's enterprise"""
        result = await DeleteUserUseCase(uow, identity_provider).execute(
            caller.eid, request.data.username, context=context
        )
        if result.is_err():
            raise_for_error(result.error)
        return result.value

    if include_riders:

        @router.post("/addRider", status_code=status.HTTP_200_OK, response_model=MemberResponse)
        async def add_rider(
            request: AddRiderRequest,
            caller: VerifiedClaims = Depends(require_claims(manage_claim)),
            uow: UnitOfWork = Depends(get_unit_of_work),
            role_claims: RoleClaimsTable = Depends(get_role_claims),
            settings: OtpSettings = Depends(get_otp_settings),
            context: RequestContext = Depends(get_request_context),
        ):
            """Register a mobile-only rider who signs in with OTP"""
            result = await AddRiderUseCase(uow, role_claims, settings.rider_domain).execute(
                caller.eid, request.data.mobile_number, context=context
            )
            if result.is_err():
                raise_for_error(result.error)
            return result.value

    return router


supplier_router = build_member_router("supplier")
lsp_router = build_member_router("lsp", include_riders=True)
