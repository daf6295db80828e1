from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.api.error import raise_for_error
from src.api.utils.authorization import get_current_claims, get_optional_claims
from src.app.services.identity_provider import IIdentityProvider
from src.app.services.request_context import RequestContext
from src.app.services.sms_gateway import ISmsGateway
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    ConfirmForgotPasswordUseCase,
    ConfirmSignupUseCase,
    ForgotPasswordUseCase,
    LoginResponse,
    LoginUseCase,
    OtpSettings,
    ResendCodeUseCase,
    SendOtpResponse,
    SendOtpUseCase,
    SignupCommand,
    SignupResponse,
    SignupUseCase,
    StatusResponse,
    VerifyOtpResponse,
    VerifyOtpUseCase,
)
from src.api.utils.jwt import LocalTokenService
from src.depends import (
    get_identity_provider,
    get_local_token_service,
    get_otp_settings,
    get_request_context,
    get_role_claims,
    get_sms_gateway,
    get_unit_of_work,
)
from src.domain.claims import VerifiedClaims
from src.domain.roles import RoleClaimsTable

router = APIRouter(prefix="/auth", tags=["Authentication"])


class ClientRequestData(BaseModel):
    """Fields shared by requests addressed to an identity-provider app client"""

    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(..., alias="clientId", min_length=1, description="Identity provider app client id")


class SignupData(ClientRequestData):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, description="User password (min 8 chars)")
    enterprise_type: str = Field(..., description="superadmin | supplier | retailer | financier | lsp")
    username: Optional[str] = Field(None, description="Defaults to the lower-cased email")
    business_name: Optional[str] = Field(None, max_length=255, description="Required for a new enterprise")
    eid: Optional[str] = Field(None, description="Existing enterprise to add the user to")
    role: Optional[str] = Field(None, description="Role of an internal user (requires eid)")


class SignupRequest(BaseModel):
    """
    Signup HTTP request payload

    Validates incoming HTTP request before converting to SignupCommand.
    """

    data: SignupData


class SignupHttpResponse(BaseModel):
    status: str = "success"
    data: SignupResponse


@router.post("/signup", status_code=status.HTTP_200_OK, response_model=SignupHttpResponse)
async def signup(
    request: SignupRequest,
    caller: Optional[VerifiedClaims] = Depends(get_optional_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
    identity_provider: IIdentityProvider = Depends(get_identity_provider),
    role_claims: RoleClaimsTable = Depends(get_role_claims),
    context: RequestContext = Depends(get_request_context),
):
    """
    Enterprise Signup

    Without eid: founds a new enterprise, the caller becomes <type>_admin.
    With eid and role: adds an internal user; requires a bearer token of a
    member of that enterprise.

    Raises:
        - 400 Bad Request: missing/invalid fields, invalid role
        - 403 Forbidden: eid does not match the caller's enterprise
        - 404 Not Found: eid names no enterprise
        - 409 Conflict: username already exists / enterprise owned by another admin
        - 5xx: identity provider failure (status forwarded)
    """
    data = request.data
    command = SignupCommand(
        email=data.email,
        password=data.password,
        enterprise_type=data.enterprise_type,
        client_id=data.client_id,
        username=data.username,
        business_name=data.business_name,
        eid=data.eid,
        role=data.role,
    )

    use_case = SignupUseCase(uow, identity_provider, role_claims)
    result = await use_case.execute(
        command, caller_eid=caller.eid if caller else None, context=context
    )

    if result.is_err():
        raise_for_error(result.error)

    return SignupHttpResponse(data=result.value)


class ConfirmSignupData(ClientRequestData):
    username: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, description="Code sent by the identity provider")


class ConfirmSignupRequest(BaseModel):
    data: ConfirmSignupData


@router.post("/confirm", status_code=status.HTTP_200_OK, response_model=StatusResponse)
async def confirm_signup(
    request: ConfirmSignupRequest,
    identity_provider: IIdentityProvider = Depends(get_identity_provider),
):
    """Confirm a registration with the emailed code"""
    data = request.data
    result = await ConfirmSignupUseCase(identity_provider).execute(
        data.client_id, data.username, data.code
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class LoginData(ClientRequestData):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    data: LoginData


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    identity_provider: IIdentityProvider = Depends(get_identity_provider),
    context: RequestContext = Depends(get_request_context),
):
    """
    Password Login

    Raises:
        - 403 Forbidden: email not verified or not approved by enterprise admin
        - 404 Not Found: no authentication profile
        - 4xx/5xx: identity provider rejection (status forwarded)
    """
    data = request.data
    result = await LoginUseCase(uow, identity_provider).execute(
        data.client_id, data.username, data.password, context=context
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class UsernameData(ClientRequestData):
    username: str = Field(..., min_length=1)


class UsernameRequest(BaseModel):
    data: UsernameData


@router.post("/forgot-password", status_code=status.HTTP_200_OK, response_model=StatusResponse)
async def forgot_password(
    request: UsernameRequest,
    identity_provider: IIdentityProvider = Depends(get_identity_provider),
):
    """Start a password reset"""
    result = await ForgotPasswordUseCase(identity_provider).execute(
        request.data.client_id, request.data.username
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class ConfirmForgotPasswordData(ClientRequestData):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)
    confirmation_code: str = Field(..., alias="confirmationCode", min_length=1)


class ConfirmForgotPasswordRequest(BaseModel):
    data: ConfirmForgotPasswordData


@router.post(
    "/confirm-forgot-password", status_code=status.HTTP_200_OK, response_model=StatusResponse
)
async def confirm_forgot_password(
    request: ConfirmForgotPasswordRequest,
    identity_provider: IIdentityProvider = Depends(get_identity_provider),
):
    """Complete a password reset"""
    data = request.data
    result = await ConfirmForgotPasswordUseCase(identity_provider).execute(
        data.client_id, data.username, data.confirmation_code, data.password
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/resend-code", status_code=status.HTTP_200_OK, response_model=StatusResponse)
async def resend_code(
    request: UsernameRequest,
    identity_provider: IIdentityProvider = Depends(get_identity_provider),
):
    """Resend the registration confirmation code"""
    result = await ResendCodeUseCase(identity_provider).execute(
        request.data.client_id, request.data.username
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class SendOtpData(BaseModel):
    mobile_number: str = Field(..., description="E.164 mobile number")
    eid: str = Field(..., min_length=1, description="Enterprise the rider belongs to")


class SendOtpRequest(BaseModel):
    data: SendOtpData


@router.post("/sendOTP", status_code=status.HTTP_200_OK, response_model=SendOtpResponse)
async def send_otp(
    request: SendOtpRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    sms_gateway: ISmsGateway = Depends(get_sms_gateway),
    settings: OtpSettings = Depends(get_otp_settings),
    context: RequestContext = Depends(get_request_context),
):
    """
    Send OTP

    Raises:
        - 400 Bad Request: invalid mobile number
        - 403 Forbidden: rider not an approved member of the enterprise
        - 502 Bad Gateway: SMS delivery failed
    """
    result = await SendOtpUseCase(uow, sms_gateway, settings).execute(
        request.data.mobile_number, request.data.eid, context=context
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class VerifyOtpData(BaseModel):
    mobile_number: str = Field(..., description="E.164 mobile number")
    otp: str = Field(..., description="6-digit code")


class VerifyOtpRequest(BaseModel):
    data: VerifyOtpData


@router.post("/verifyOTP", status_code=status.HTTP_200_OK, response_model=VerifyOtpResponse)
async def verify_otp(
    request: VerifyOtpRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_service: LocalTokenService = Depends(get_local_token_service),
    settings: OtpSettings = Depends(get_otp_settings),
    context: RequestContext = Depends(get_request_context),
):
    """
    Verify OTP

    Raises:
        - 400 Bad Request: invalid mobile number or code format
        - 401 Unauthorized: code expired or wrong
        - 403 Forbidden: rider not approved
        - 404 Not Found: no pending code / no rider profile
    """
    result = await VerifyOtpUseCase(uow, token_service, settings).execute(
        request.data.mobile_number, request.data.otp, context=context
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class ValidateTokenResponse(BaseModel):
    status: str = "success"
    data: VerifiedClaims


@router.post("/validate-token", status_code=status.HTTP_200_OK, response_model=ValidateTokenResponse)
async def validate_token(claims: VerifiedClaims = Depends(get_current_claims)):
    """Verify the bearer token (either family) and echo its claims"""
    return ValidateTokenResponse(data=claims.model_copy(update={"raw": {}}))
