"""
Platform administration endpoints, gated on the superadmin claim.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import raise_for_error
from src.api.utils.authorization import require_claims
from src.app.services.identity_provider import IIdentityProvider
from src.app.services.request_context import RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.enterprises import (
    ConfirmUserUseCase,
    DeleteEnterpriseResponse,
    DeleteEnterpriseUseCase,
    ListEnterprisesResponse,
    ListEnterprisesUseCase,
    MemberResponse,
)
from src.depends import get_identity_provider, get_request_context, get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])

ADMIN_CLAIMS = ("superadmin:manage",)


class ConfirmUserSignupData(BaseModel):
    username: str = Field(..., min_length=1)
    eid: Optional[str] = Field(None, description="Restrict approval to this enterprise")


class ConfirmUserSignupRequest(BaseModel):
    data: ConfirmUserSignupData


@router.post(
    "/confirmUserSignup",
    status_code=status.HTTP_200_OK,
    response_model=MemberResponse,
    dependencies=[Depends(require_claims(*ADMIN_CLAIMS))],
)
async def confirm_user_signup(
    request: ConfirmUserSignupRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    identity_provider: IIdentityProvider = Depends(get_identity_provider),
    context: RequestContext = Depends(get_request_context),
):
    """Approve a user (typically a newly signed-up enterprise admin)"""
    result = await ConfirmUserUseCase(uow, identity_provider).execute(
        request.data.username, eid=request.data.eid, context=context
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class DeleteEnterpriseData(BaseModel):
    eid: str = Field(..., min_length=1)
    enterprise_type: Optional[str] = None


class DeleteEnterpriseRequest(BaseModel):
    data: DeleteEnterpriseData


@router.post(
    "/deleteEnterprise",
    status_code=status.HTTP_200_OK,
    response_model=DeleteEnterpriseResponse,
    dependencies=[Depends(require_claims(*ADMIN_CLAIMS))],
)
async def delete_enterprise(
    request: DeleteEnterpriseRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    identity_provider: IIdentityProvider = Depends(get_identity_provider),
    context: RequestContext = Depends(get_request_context),
):
    """Delete an enterprise with all of its members"""
    result = await DeleteEnterpriseUseCase(uow, identity_provider).execute(
        request.data.eid, request.data.enterprise_type, context=context
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/getAllEnterprises",
    status_code=status.HTTP_200_OK,
    response_model=ListEnterprisesResponse,
    dependencies=[Depends(require_claims(*ADMIN_CLAIMS))],
)
async def get_all_enterprises(uow: UnitOfWork = Depends(get_unit_of_work)):
    """List all enterprises"""
    result = await ListEnterprisesUseCase(uow).execute()
    if result.is_err():
        raise_for_error(result.error)
    return result.value
