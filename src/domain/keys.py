"""
Store key scheme.

Every logical entity is denormalized into one or more (pk, sk) records:

    Authentication / Username#<u>#Profile        authentication profile
    Authentication / Mobile#<mobile>             OTP record
    Enterprise / EnterpriseType#<t>:Eid#<eid>    enterprise type-index
    Enterprise / Profile:Eid#<eid>               enterprise profile-index
    Eid#<eid> / Username#<u>                     enterprise-member index
"""

from typing import Tuple

Key = Tuple[str, str]

AUTHENTICATION_PK = "Authentication"
ENTERPRISE_PK = "Enterprise"
ENTERPRISE_PROFILE_PREFIX = "Profile:Eid#"
MEMBER_SK_PREFIX = "Username#"


def normalize_username(username: str) -> str:
    return username.strip().lower()


def profile_key(username: str) -> Key:
    return AUTHENTICATION_PK, f"Username#{normalize_username(username)}#Profile"


def mobile_key(mobile_number: str) -> Key:
    return AUTHENTICATION_PK, f"Mobile#{mobile_number}"


def enterprise_type_key(enterprise_type: str, eid: str) -> Key:
    return ENTERPRISE_PK, f"EnterpriseType#{enterprise_type}:Eid#{eid}"


def enterprise_profile_key(eid: str) -> Key:
    return ENTERPRISE_PK, f"{ENTERPRISE_PROFILE_PREFIX}{eid}"


def member_partition(eid: str) -> str:
    return f"Eid#{eid}"


def member_key(eid: str, username: str) -> Key:
    return member_partition(eid), f"{MEMBER_SK_PREFIX}{normalize_username(username)}"


def rider_username(mobile_number: str, domain: str = "lsp-rider.local") -> str:
    return normalize_username(f"{mobile_number}@{domain}")
