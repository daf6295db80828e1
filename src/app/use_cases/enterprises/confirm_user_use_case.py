"""
Confirm User Use Case

Records enterprise-admin approval of a user.
"""

import logging
from typing import Optional

from libs.result import Error, Result, Return

from src.app.repositories.record_repository import (
    Condition,
    TransactItem,
    TransactionCanceledError,
)
from src.app.services.identity_provider import (
    IdentityProviderError,
    IIdentityProvider,
    upstream_error,
)
from src.app.services.request_context import EMPTY_CONTEXT, RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthMethod
from src.domain.keys import member_key, normalize_username, profile_key

from .dtos import MemberResponse

logger = logging.getLogger(__name__)


class ConfirmUserUseCase:
    """
    Use case for admin approval of a user.

    Business Rules:
    - Profile and member index are flipped to isConfirmedByAdmin="true" in
      one transaction
    - Password users then get the same attribute on the provider account,
      which login checks; OTP riders have no provider account
    - eid=None (platform admin) approves the user in whatever enterprise
      their profile names
    """

    def __init__(self, uow: UnitOfWork, identity_provider: IIdentityProvider):
        self.uow = uow
        self.identity_provider = identity_provider

    async def execute(
        self,
        username: str,
        eid: Optional[str] = None,
        context: RequestContext = EMPTY_CONTEXT,
    ) -> Result[MemberResponse]:
        if not username:
            return Return.err(Error("VALIDATION_ERROR", "username is required"))
        username = normalize_username(username)

        async with self.uow:
            profile = await self.uow.records.get(*profile_key(username))
            if profile is None or (eid and profile.get("eid") != eid):
                return Return.err(Error("USER_NOT_FOUND", "User not found in this enterprise"))

            target_eid = profile["eid"]
            confirmed = {"isConfirmedByAdmin": "true"}
            try:
                await self.uow.records.transact_write(
                    [
                        TransactItem.update(
                            profile_key(username), confirmed, Condition.equals("eid", target_eid)
                        ),
                        TransactItem.update(
                            member_key(target_eid, username), confirmed, Condition.exists()
                        ),
                    ]
                )
            except TransactionCanceledError as e:
                logger.warning(f"{context.tag()}Confirm rejected for {username} eid={target_eid}: {e}")
                return Return.err(Error("USER_NOT_FOUND", "User not found in this enterprise"))

            await self.uow.commit()

        if profile.get("auth_method", AuthMethod.password.value) == AuthMethod.password.value:
            try:
                await self.identity_provider.admin_update_user_attributes(username, confirmed)
            except IdentityProviderError as e:
                logger.error(
                    f"{context.tag()}Provider approval failed after records committed "
                    f"for {username} eid={target_eid}: {e.code}"
                )
                return Return.err(upstream_error(e, "Confirm user failed"))

        logger.info(f"{context.tag()}User {username} confirmed in eid={target_eid}")
        return Return.ok(
            MemberResponse(eid=target_eid, username=username, message="User confirmed")
        )
