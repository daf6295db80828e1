"""
Verify OTP Use Case

Consumes a one-time code and issues a locally signed token.
"""

import logging
from datetime import UTC, datetime
from typing import Callable

from libs.result import Error, Result, Return

from src.api.utils.jwt import LocalTokenService
from src.app.repositories.record_repository import Condition, TransactionCanceledError
from src.app.services.request_context import EMPTY_CONTEXT, RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthMethod
from src.domain.keys import mobile_key, profile_key, rider_username

from .dtos import TokenInfo, VerifyOtpResponse
from .otp_policy import OTP_FIELDS, OtpSettings, is_valid_mobile, is_valid_otp, mask_mobile

logger = logging.getLogger(__name__)


class VerifyOtpUseCase:
    """
    Use case for OTP verification.

    Business Rules:
    - Expiry is checked before the code is compared, so an expired code is
      rejected even when it matches
    - The rider profile must exist and be approved by the enterprise admin
    - A verified code is cleared from the record (single use)
    - Token: locally signed, 4-hour lifetime
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_service: LocalTokenService,
        settings: OtpSettings,
        now: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self.uow = uow
        self.token_service = token_service
        self.settings = settings
        self.now = now

    async def execute(
        self, mobile_number: str, otp: str, context: RequestContext = EMPTY_CONTEXT
    ) -> Result[VerifyOtpResponse]:
        if not is_valid_mobile(mobile_number):
            return Return.err(Error("INVALID_FORMAT", "Invalid mobile number format"))
        if not is_valid_otp(otp):
            return Return.err(Error("INVALID_FORMAT", "OTP must be exactly 6 digits"))

        masked = mask_mobile(mobile_number)
        username = rider_username(mobile_number, self.settings.rider_domain)
        now = self.now()

        async with self.uow:
            record = await self.uow.records.get(*mobile_key(mobile_number))
            if not record or not record.get("otp"):
                return Return.err(Error("OTP_NOT_FOUND", "OTP not found. Please request a new OTP"))

            if now.timestamp() > float(record.get("otp_expiry") or 0):
                return Return.err(Error("OTP_EXPIRED", "OTP has expired. Please request a new OTP"))

            if str(record["otp"]) != otp:
                logger.warning(f"{context.tag()}OTP mismatch for {masked}")
                return Return.err(Error("OTP_MISMATCH", "Invalid OTP"))

            profile = await self.uow.records.get(*profile_key(username))
            if profile is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))
            if profile.get("isConfirmedByAdmin") != "true":
                return Return.err(Error("NOT_APPROVED", "User is not confirmed by admin"))

            try:
                # Only clear the code that was checked; a concurrent resend wins
                await self.uow.records.conditional_update(
                    *mobile_key(mobile_number),
                    remove_attrs=OTP_FIELDS,
                    condition=Condition.equals("otp", record["otp"]),
                    upsert=False,
                )
            except TransactionCanceledError:
                return Return.err(Error("OTP_NOT_FOUND", "OTP not found. Please request a new OTP"))

            await self.uow.commit()

        token = self.token_service.issue(
            username=username,
            eid=profile["eid"],
            role=profile["role"],
            enterprise_type=profile["enterprise_type"],
            is_confirmed_by_admin=True,
            auth_method=AuthMethod.otp.value,
            now=now,
        )

        logger.info(f"{context.tag()}OTP verified for {masked} eid={profile['eid']}")
        return Return.ok(
            VerifyOtpResponse(
                token=TokenInfo(
                    jwt=token,
                    eid=profile["eid"],
                    username=username,
                    enterprise_type=profile["enterprise_type"],
                    display_name=f"Lsp-{mobile_number}",
                    role=profile["role"],
                )
            )
        )
