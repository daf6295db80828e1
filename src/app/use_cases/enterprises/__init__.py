"""
Enterprise Use Cases

Member approval, member removal and enterprise administration.
"""

from .add_rider_use_case import AddRiderUseCase
from .add_user_use_case import AddUserUseCase
from .confirm_user_use_case import ConfirmUserUseCase
from .delete_enterprise_use_case import DeleteEnterpriseUseCase
from .delete_user_use_case import DeleteUserUseCase
from .list_enterprises_use_case import ListEnterprisesUseCase
from .dtos import (
    AddUserCommand,
    DeleteEnterpriseResponse,
    EnterpriseSummary,
    ListEnterprisesResponse,
    MemberResponse,
)

__all__ = [
    # Use Cases
    "AddRiderUseCase",
    "AddUserUseCase",
    "ConfirmUserUseCase",
    "DeleteEnterpriseUseCase",
    "DeleteUserUseCase",
    "ListEnterprisesUseCase",
    # DTOs
    "AddUserCommand",
    "DeleteEnterpriseResponse",
    "EnterpriseSummary",
    "ListEnterprisesResponse",
    "MemberResponse",
]
