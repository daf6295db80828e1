"""
Authentication Use Case DTOs (Data Transfer Objects)

All Response classes for the auth domain.
"""

from pydantic import BaseModel


class StatusResponse(BaseModel):
    """Response for passthrough identity-provider operations"""

    status: str = "success"
    message: str


class TokenInfo(BaseModel):
    """Token and identity returned by both login paths"""

    jwt: str
    eid: str
    username: str
    enterprise_type: str
    display_name: str
    role: str


class LoginResponse(BaseModel):
    """Response for password login use case"""

    status: str = "success"
    token: TokenInfo


class SendOtpResponse(BaseModel):
    """Response for send OTP use case"""

    status: str = "success"
    message: str
    expires_at: int


class VerifyOtpResponse(BaseModel):
    """Response for verify OTP use case"""

    status: str = "success"
    token: TokenInfo
