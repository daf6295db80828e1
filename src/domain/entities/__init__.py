"""
Enterprise Auth Domain Entities

All domain entities organized by model.
"""

from .enums import AuthMethod, EnterpriseType, OtpState, TokenOrigin
from .record import Record

__all__ = [
    # Enums
    "AuthMethod",
    "EnterpriseType",
    "OtpState",
    "TokenOrigin",
    # Entities
    "Record",
]
