"""
Enterprise Auth Domain Enums

All enumeration types used across domain records and claims.
"""

from enum import Enum


class EnterpriseType(str, Enum):
    """Kind of organization an enterprise represents"""

    superadmin = "superadmin"
    supplier = "supplier"
    retailer = "retailer"
    financier = "financier"
    lsp = "lsp"


class AuthMethod(str, Enum):
    """How a user authenticates"""

    password = "password"
    otp = "otp"


class TokenOrigin(str, Enum):
    """Which token family produced a set of verified claims"""

    provider = "provider"
    local = "local"


class OtpState(str, Enum):
    """Observable state of a mobile number's OTP record"""

    no_otp = "no_otp"
    issued = "issued"
    expired = "expired"
