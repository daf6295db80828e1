"""
Delete Enterprise Use Case

Removes an enterprise, all of its members and their provider accounts.
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
from src.domain.keys import (
    MEMBER_SK_PREFIX,
    enterprise_profile_key,
    enterprise_type_key,
    member_key,
    member_partition,
    profile_key,
)

from .delete_user_use_case import delete_provider_account, member_delete_items
from .dtos import DeleteEnterpriseResponse

logger = logging.getLogger(__name__)


class DeleteEnterpriseUseCase:
    """
    Use case for deleting an enterprise.

    Business Rules:
    - The enterprise profile must exist; a supplied enterprise_type must match it
    - Provider accounts of password members are deleted first; the first
      provider failure aborts before any store change
    - Every member index, member profile and both enterprise records are
      then deleted in one transaction
    """

    def __init__(self, uow: UnitOfWork, identity_provider: IIdentityProvider):
        self.uow = uow
        self.identity_provider = identity_provider

    async def execute(
        self,
        eid: str,
        enterprise_type: Optional[str] = None,
        context: RequestContext = EMPTY_CONTEXT,
    ) -> Result[DeleteEnterpriseResponse]:
        if not eid:
            return Return.err(Error("VALIDATION_ERROR", "eid is required"))

        async with self.uow:
            enterprise = await self.uow.records.get(*enterprise_profile_key(eid))
            if enterprise is None:
                return Return.err(Error("ENTERPRISE_NOT_FOUND", "Enterprise not found"))
            if enterprise_type and enterprise.get("enterprise_type") != enterprise_type:
                return Return.err(Error("ENTERPRISE_NOT_FOUND", "Enterprise not found"))

            members = await self.uow.records.query(member_partition(eid), MEMBER_SK_PREFIX)
            profiles = {}
            for member in members:
                username = member["username"]
                profile = await self.uow.records.get(*profile_key(username))
                # A profile re-bound to another enterprise is not ours to delete
                profiles[username] = profile if profile and profile.get("eid") == eid else None

        stored_type = enterprise["enterprise_type"]

        for username, profile in profiles.items():
            if profile is None:
                continue
            if profile.get("auth_method", AuthMethod.password.value) != AuthMethod.password.value:
                continue
            try:
                await delete_provider_account(self.identity_provider, username)
            except IdentityProviderError as e:
                logger.error(
                    f"{context.tag()}Provider delete failed for {username} while deleting "
                    f"eid={eid}: {e.code}"
                )
                return Return.err(upstream_error(e, "Delete enterprise failed"))

        items = []
        for username, profile in profiles.items():
            if profile is None:
                items.append(TransactItem.delete(member_key(eid, username)))
            else:
                items.extend(member_delete_items(eid, username, profile))
        items.append(TransactItem.delete(enterprise_type_key(stored_type, eid)))
        items.append(TransactItem.delete(enterprise_profile_key(eid), Condition.exists()))

        async with self.uow:
            try:
                await self.uow.records.transact_write(items)
            except TransactionCanceledError as e:
                logger.error(f"{context.tag()}Store delete failed for eid={eid}: {e}")
                return Return.err(Error("ENTERPRISE_NOT_FOUND", "Enterprise not found"))
            await self.uow.commit()

        logger.info(f"{context.tag()}Enterprise eid={eid} deleted with {len(profiles)} members")
        return Return.ok(DeleteEnterpriseResponse(eid=eid, deleted_members=sorted(profiles)))
