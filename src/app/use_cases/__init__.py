"""
Use Cases

Organized into domain folders:
- auth/: Enrollment, password login passthroughs and OTP lifecycle
- enterprises/: Member approval/removal and enterprise administration
"""

from .auth import (
    ConfirmForgotPasswordUseCase,
    ConfirmSignupUseCase,
    ForgotPasswordUseCase,
    LoginUseCase,
    ResendCodeUseCase,
    SendOtpUseCase,
    SignupCommand,
    SignupResponse,
    SignupUseCase,
    VerifyOtpUseCase,
)
from .enterprises import (
    AddRiderUseCase,
    AddUserUseCase,
    ConfirmUserUseCase,
    DeleteEnterpriseUseCase,
    DeleteUserUseCase,
    ListEnterprisesUseCase,
)

__all__ = [
    # Auth
    "SignupUseCase",
    "SignupCommand",
    "SignupResponse",
    "LoginUseCase",
    "ConfirmSignupUseCase",
    "ResendCodeUseCase",
    "ForgotPasswordUseCase",
    "ConfirmForgotPasswordUseCase",
    "SendOtpUseCase",
    "VerifyOtpUseCase",
    # Enterprises
    "AddRiderUseCase",
    "AddUserUseCase",
    "ConfirmUserUseCase",
    "DeleteEnterpriseUseCase",
    "DeleteUserUseCase",
    "ListEnterprisesUseCase",
]
