"""
Delete User Use Case

Removes a user from an enterprise and from the identity provider.
"""

import logging

from libs.result import Error, Result, Return

from src.app.repositories.record_repository import (
    Condition,
    TransactItem,
    TransactionCanceledError,
)
from src.app.services.identity_provider import (
    USER_NOT_FOUND,
    IdentityProviderError,
    IIdentityProvider,
    upstream_error,
)
from src.app.services.request_context import EMPTY_CONTEXT, RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthMethod
from src.domain.keys import (
    enterprise_profile_key,
    member_key,
    mobile_key,
    normalize_username,
    profile_key,
)

from .dtos import MemberResponse

logger = logging.getLogger(__name__)


async def delete_provider_account(identity_provider: IIdentityProvider, username: str) -> None:
    """Delete a provider account; an already-missing account counts as deleted"""
    try:
        await identity_provider.admin_delete_user(username)
    except IdentityProviderError as e:
        if e.code != USER_NOT_FOUND:
            raise


def member_delete_items(eid: str, username: str, profile: dict) -> list:
    items = [
        TransactItem.delete(member_key(eid, username)),
        TransactItem.delete(profile_key(username), Condition.equals("eid", eid)),
    ]
    if profile.get("mobile_number"):
        items.append(TransactItem.delete(mobile_key(profile["mobile_number"])))
    return items


class DeleteUserUseCase:
    """
    Use case for deleting an enterprise member.

    Business Rules:
    - The user must belong to eid; the enterprise admin cannot be removed
      this way (delete the enterprise instead)
    - The provider account is deleted first; a provider failure leaves the
      store untouched
    - Member index and profile are then deleted in one transaction; if that
      fails the provider account is already gone and the error is logged
      for reconciliation
    """

    def __init__(self, uow: UnitOfWork, identity_provider: IIdentityProvider):
        self.uow = uow
        self.identity_provider = identity_provider

    async def execute(
        self, eid: str, username: str, context: RequestContext = EMPTY_CONTEXT
    ) -> Result[MemberResponse]:
        if not (eid and username):
            return Return.err(Error("VALIDATION_ERROR", "eid and username are required"))
        username = normalize_username(username)

        async with self.uow:
            profile = await self.uow.records.get(*profile_key(username))
            enterprise = await self.uow.records.get(*enterprise_profile_key(eid))

        if profile is None or profile.get("eid") != eid:
            return Return.err(Error("USER_NOT_FOUND", "User not found in this enterprise"))
        if enterprise and enterprise.get("admin") == username:
            return Return.err(
                Error("FORBIDDEN", "Enterprise admin cannot be deleted; delete the enterprise instead")
            )

        if profile.get("auth_method", AuthMethod.password.value) == AuthMethod.password.value:
            try:
                await delete_provider_account(self.identity_provider, username)
            except IdentityProviderError as e:
                logger.error(f"{context.tag()}Provider delete failed for {username} eid={eid}: {e.code}")
                return Return.err(upstream_error(e, "Delete user failed"))

        async with self.uow:
            try:
                await self.uow.records.transact_write(member_delete_items(eid, username, profile))
            except TransactionCanceledError as e:
                logger.error(
                    f"{context.tag()}Store delete failed after provider delete "
                    f"for {username} eid={eid}: {e}"
                )
                return Return.err(Error("USER_NOT_FOUND", "User not found in this enterprise"))
            await self.uow.commit()

        logger.info(f"{context.tag()}User {username} deleted from eid={eid}")
        return Return.ok(MemberResponse(eid=eid, username=username, message="User deleted"))
