"""
Authentication Use Cases

Enrollment, password-path passthroughs and the OTP lifecycle.
"""

from .signup_use_case import SignupUseCase, build_enrollment_items
from .signup_dto import SignupCommand, SignupResponse
from .login_use_case import LoginUseCase, display_name_for
from .confirm_signup_use_case import ConfirmSignupUseCase
from .resend_code_use_case import ResendCodeUseCase
from .forgot_password_use_case import ForgotPasswordUseCase
from .confirm_forgot_password_use_case import ConfirmForgotPasswordUseCase
from .send_otp_use_case import SendOtpUseCase
from .verify_otp_use_case import VerifyOtpUseCase
from .otp_policy import OtpSettings
from .dtos import (
    LoginResponse,
    SendOtpResponse,
    StatusResponse,
    TokenInfo,
    VerifyOtpResponse,
)

__all__ = [
    # Use Cases
    "SignupUseCase",
    "LoginUseCase",
    "ConfirmSignupUseCase",
    "ResendCodeUseCase",
    "ForgotPasswordUseCase",
    "ConfirmForgotPasswordUseCase",
    "SendOtpUseCase",
    "VerifyOtpUseCase",
    # Helpers
    "build_enrollment_items",
    "display_name_for",
    "OtpSettings",
    # DTOs - Commands
    "SignupCommand",
    # DTOs - Responses
    "SignupResponse",
    "LoginResponse",
    "SendOtpResponse",
    "StatusResponse",
    "TokenInfo",
    "VerifyOtpResponse",
]
