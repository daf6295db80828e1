"""
Login Use Case

Password login delegated to the identity provider, gated on email
confirmation and enterprise-admin approval.
"""

import logging

from libs.result import Error, Result, Return

from src.app.services.identity_provider import (
    CONFIRMED_STATUS,
    USER_NOT_FOUND,
    IdentityProviderError,
    IIdentityProvider,
    upstream_error,
)
from src.app.services.request_context import EMPTY_CONTEXT, RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.domain.keys import normalize_username, profile_key

from .dtos import LoginResponse, TokenInfo

logger = logging.getLogger(__name__)


def display_name_for(enterprise_type: str, username: str) -> str:
    """supplier + alice@acme.com -> Supplier-Alice"""
    local_part = username.split("@")[0]
    return f"{enterprise_type[:1].upper()}{enterprise_type[1:]}-{local_part[:1].upper()}{local_part[1:]}"


class LoginUseCase:
    """
    Use case for password login.

    Business Rules:
    - Provider account must be CONFIRMED (email verified)
    - Authentication profile must exist with eid, enterprise_type and role
    - custom:isConfirmedByAdmin must be "true" on the provider account
    - The provider's ID token is returned as the session token
    """

    def __init__(self, uow: UnitOfWork, identity_provider: IIdentityProvider):
        self.uow = uow
        self.identity_provider = identity_provider

    async def execute(
        self,
        client_id: str,
        username: str,
        password: str,
        context: RequestContext = EMPTY_CONTEXT,
    ) -> Result[LoginResponse]:
        if not (client_id and username and password):
            return Return.err(
                Error("VALIDATION_ERROR", "Username, password and clientId are required")
            )
        username = normalize_username(username)

        try:
            provider_user = await self.identity_provider.admin_get_user(username)
        except IdentityProviderError as e:
            if e.code == USER_NOT_FOUND:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))
            return Return.err(upstream_error(e, "Authentication failed"))

        if provider_user.status != CONFIRMED_STATUS:
            return Return.err(
                Error("USER_NOT_CONFIRMED", "User is not confirmed. Please verify your email.")
            )

        async with self.uow:
            profile = await self.uow.records.get(*profile_key(username))

        if profile is None:
            return Return.err(Error("USER_NOT_FOUND", "User not found - Please signup again"))

        eid = profile.get("eid")
        enterprise_type = profile.get("enterprise_type")
        role = profile.get("role")
        if not (eid and enterprise_type and role):
            return Return.err(Error("PROFILE_NOT_FOUND", "User details not found"))

        if provider_user.attribute("custom:isConfirmedByAdmin") != "true":
            return Return.err(Error("NOT_APPROVED", "User is not confirmed by admin"))

        try:
            id_token = await self.identity_provider.initiate_auth(client_id, username, password)
        except IdentityProviderError as e:
            logger.warning(f"{context.tag()}Login failed for {username}: {e.code}")
            return Return.err(upstream_error(e, "Authentication failed"))

        logger.info(f"{context.tag()}Password login for {username} eid={eid}")
        return Return.ok(
            LoginResponse(
                token=TokenInfo(
                    jwt=id_token,
                    eid=eid,
                    username=username,
                    enterprise_type=enterprise_type,
                    display_name=display_name_for(enterprise_type, username),
                    role=role,
                )
            )
        )
