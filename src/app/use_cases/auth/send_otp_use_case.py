"""
Send OTP Use Case

Issues a one-time code for a rider's mobile number.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Callable

from libs.result import Error, Result, Return

from src.app.services.enterprise_membership import EnterpriseMembershipChecker
from src.app.services.request_context import EMPTY_CONTEXT, RequestContext
from src.app.services.sms_gateway import ISmsGateway, SmsDeliveryError
from src.app.services.unit_of_work import UnitOfWork
from src.domain.keys import mobile_key, rider_username

from .dtos import SendOtpResponse
from .otp_policy import OtpSettings, generate_otp, is_valid_mobile, mask_mobile

logger = logging.getLogger(__name__)


class SendOtpUseCase:
    """
    Use case for issuing an OTP.

    Business Rules:
    - Mobile number must be E.164
    - <mobile>@lsp-rider.local must be an admin-confirmed member of eid
    - Numbers under the configured test prefix get the fixed test code and
      no SMS; everything else gets a random 6-digit code by SMS
    - The code expires after ttl_seconds; a new request overwrites (and so
      invalidates) any earlier code for the number
    - If SMS dispatch fails the stored code stays; a new request replaces it
    """

    def __init__(
        self,
        uow: UnitOfWork,
        sms_gateway: ISmsGateway,
        settings: OtpSettings,
        now: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self.uow = uow
        self.sms_gateway = sms_gateway
        self.settings = settings
        self.now = now

    async def execute(
        self, mobile_number: str, eid: str, context: RequestContext = EMPTY_CONTEXT
    ) -> Result[SendOtpResponse]:
        if not is_valid_mobile(mobile_number):
            return Return.err(Error("INVALID_FORMAT", "Invalid mobile number format"))
        if not eid:
            return Return.err(Error("VALIDATION_ERROR", "eid is required"))

        username = rider_username(mobile_number, self.settings.rider_domain)
        otp = generate_otp(mobile_number, self.settings)
        expires_at = int((self.now() + timedelta(seconds=self.settings.ttl_seconds)).timestamp())

        async with self.uow:
            membership = await EnterpriseMembershipChecker(self.uow).check(eid, username)
            if membership.is_err():
                return Return.err(Error("FORBIDDEN", membership.error.message))

            await self.uow.records.conditional_update(
                *mobile_key(mobile_number),
                set_attrs={
                    "mobile_number": mobile_number,
                    "otp": otp,
                    "otp_expiry": expires_at,
                },
            )
            await self.uow.commit()

        masked = mask_mobile(mobile_number)
        if self.settings.is_test_number(mobile_number):
            logger.info(f"{context.tag()}Test OTP issued for {masked} eid={eid}")
            return Return.ok(SendOtpResponse(message="OTP sent", expires_at=expires_at))

        minutes = max(1, self.settings.ttl_seconds // 60)
        try:
            await self.sms_gateway.send(
                mobile_number,
                f"Your verification code is {otp}. It is valid for {minutes} minutes.",
            )
        except SmsDeliveryError as e:
            logger.error(f"{context.tag()}OTP SMS delivery failed for {masked}: {e.message}")
            return Return.err(
                Error(
                    "SMS_DELIVERY_FAILED",
                    "Failed to send OTP",
                    details={"status_code": e.status_code},
                )
            )

        logger.info(f"{context.tag()}OTP issued for {masked} eid={eid}")
        return Return.ok(SendOtpResponse(message="OTP sent", expires_at=expires_at))
