"""
OTP rules shared by the send and verify use cases.
"""

import re
import secrets
from dataclasses import dataclass

from config import ApplicationConfig

MOBILE_PATTERN = re.compile(r"^\+[1-9]\d{0,14}$")
OTP_PATTERN = re.compile(r"^\d{6}$")

OTP_FIELDS = ("otp", "otp_expiry")


@dataclass(frozen=True)
class OtpSettings:
    ttl_seconds: int = 300
    test_number_prefix: str = ""
    test_code: str = "123456"
    rider_domain: str = "lsp-rider.local"

    def is_test_number(self, mobile_number: str) -> bool:
        return bool(self.test_number_prefix) and mobile_number.startswith(self.test_number_prefix)

    @classmethod
    def from_config(cls) -> "OtpSettings":
        return cls(
            ttl_seconds=ApplicationConfig.OTP_TTL_SECONDS,
            test_number_prefix=ApplicationConfig.OTP_TEST_NUMBER_PREFIX,
            test_code=ApplicationConfig.OTP_TEST_CODE,
            rider_domain=ApplicationConfig.RIDER_USERNAME_DOMAIN,
        )


def is_valid_mobile(mobile_number) -> bool:
    return isinstance(mobile_number, str) and MOBILE_PATTERN.match(mobile_number) is not None


def is_valid_otp(otp) -> bool:
    return isinstance(otp, str) and OTP_PATTERN.match(otp) is not None


def generate_otp(mobile_number: str, settings: OtpSettings) -> str:
    if settings.is_test_number(mobile_number):
        return settings.test_code
    return f"{secrets.randbelow(10**6):06d}"


def mask_mobile(mobile_number: str) -> str:
    return f"{mobile_number[:3]}****{mobile_number[-3:]}" if len(mobile_number) > 6 else "****"
