"""
Add Rider Use Case

Registers a mobile-only rider who signs in through the OTP flow.
"""

import logging
from datetime import UTC, datetime

from libs.result import Error, Result, Return

from src.app.repositories.record_repository import (
    Condition,
    TransactItem,
    TransactionCanceledError,
)
from src.app.services.request_context import EMPTY_CONTEXT, RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.otp_policy import is_valid_mobile
from src.domain.entities import AuthMethod, EnterpriseType
from src.domain.keys import enterprise_profile_key, member_key, profile_key, rider_username
from src.domain.roles import RoleClaimsTable

from .dtos import MemberResponse

logger = logging.getLogger(__name__)

RIDER_ROLE = "lsp_rider"


class AddRiderUseCase:
    """
    Use case for adding a rider to an LSP enterprise.

    Business Rules:
    - Mobile number must be E.164; username is <mobile>@<rider domain>
    - Rider starts unapproved (isConfirmedByAdmin="false") until confirmed
    - Profile and member index are written in one transaction, guarded by
      the enterprise existing and the username being unused
    - Riders have no identity-provider account
    """

    def __init__(self, uow: UnitOfWork, role_claims: RoleClaimsTable, rider_domain: str = "lsp-rider.local"):
        self.uow = uow
        self.role_claims = role_claims
        self.rider_domain = rider_domain

    async def execute(
        self, eid: str, mobile_number: str, context: RequestContext = EMPTY_CONTEXT
    ) -> Result[MemberResponse]:
        if not eid:
            return Return.err(Error("VALIDATION_ERROR", "eid is required"))
        if not is_valid_mobile(mobile_number):
            return Return.err(Error("INVALID_FORMAT", "Invalid mobile number format"))
        if RIDER_ROLE not in self.role_claims:
            return Return.err(Error("INVALID_ROLE", f"Role {RIDER_ROLE} is not configured"))

        username = rider_username(mobile_number, self.rider_domain)
        attrs = {
            "eid": eid,
            "username": username,
            "enterprise_type": EnterpriseType.lsp.value,
            "create_datetime": int(datetime.now(UTC).timestamp() * 1000),
            "role": RIDER_ROLE,
            "isConfirmedByAdmin": "false",
            "auth_method": AuthMethod.otp.value,
            "mobile_number": mobile_number,
        }

        async with self.uow:
            try:
                await self.uow.records.transact_write(
                    [
                        TransactItem.condition_check(
                            enterprise_profile_key(eid),
                            Condition.equals("enterprise_type", EnterpriseType.lsp.value),
                        ),
                        TransactItem.put(profile_key(username), attrs, Condition.not_exists()),
                        TransactItem.put(member_key(eid, username), attrs, Condition.not_exists()),
                    ]
                )
            except TransactionCanceledError as e:
                logger.warning(f"{context.tag()}Add rider rejected for eid={eid}: {e}")
                if enterprise_profile_key(eid) in e.failed_keys:
                    return Return.err(Error("ENTERPRISE_NOT_FOUND", "LSP enterprise not found"))
                return Return.err(Error("USERNAME_EXISTS", "Rider already registered"))

            await self.uow.commit()

        logger.info(f"{context.tag()}Rider {username} added to eid={eid}")
        return Return.ok(MemberResponse(eid=eid, username=username, message="Rider added"))
