import logging
from datetime import UTC, datetime
from typing import List, Optional
from uuid import uuid4

from libs.result import Error, Result, Return

from src.app.repositories.record_repository import (
    Condition,
    TransactItem,
    TransactionCanceledError,
)
from src.app.services.identity_provider import (
    USERNAME_EXISTS,
    IdentityProviderError,
    IIdentityProvider,
    upstream_error,
)
from src.app.services.request_context import EMPTY_CONTEXT, RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthMethod, EnterpriseType
from src.domain.keys import (
    enterprise_profile_key,
    enterprise_type_key,
    member_key,
    normalize_username,
    profile_key,
)
from src.domain.roles import RoleClaimsTable, resolve_role

from .signup_dto import SignupCommand, SignupResponse

logger = logging.getLogger(__name__)


def build_enrollment_items(
    eid: str,
    username: str,
    enterprise_type: str,
    role: str,
    business_name: Optional[str],
    created_at_ms: int,
    new_enterprise: bool,
) -> List[TransactItem]:
    """
    Build the denormalized record set for one enrollment.

    Enterprise type-index, enterprise profile-index, authentication profile
    and enterprise-member index share eid, role and timestamp. A founding
    signup writes the enterprise records unless another admin already owns
    them; adding a member only asserts the enterprise exists.
    """
    enterprise_attrs = {
        "eid": eid,
        "enterprise_type": enterprise_type,
        "create_datetime": created_at_ms,
        "admin": username,
        "business_name": business_name,
        "email_verified": "no",
    }
    auth_attrs = {
        "eid": eid,
        "username": username,
        "enterprise_type": enterprise_type,
        "create_datetime": created_at_ms,
        "role": role,
        "isConfirmedByAdmin": "false",
        "auth_method": AuthMethod.password.value,
    }

    if new_enterprise:
        owned = Condition.not_exists_or_equals("admin", username)
        enterprise_items = [
            TransactItem.put(enterprise_type_key(enterprise_type, eid), enterprise_attrs, owned),
            TransactItem.put(enterprise_profile_key(eid), enterprise_attrs, owned),
        ]
    else:
        enterprise_items = [
            TransactItem.condition_check(enterprise_type_key(enterprise_type, eid), Condition.exists()),
            TransactItem.condition_check(enterprise_profile_key(eid), Condition.exists()),
        ]

    return enterprise_items + [
        TransactItem.put(profile_key(username), auth_attrs),
        TransactItem.put(member_key(eid, username), auth_attrs),
    ]


def is_same_enrollment(
    profile: dict, eid: Optional[str], enterprise_type: str, role: str
) -> bool:
    return (
        (not eid or profile.get("eid") == eid)
        and profile.get("enterprise_type") == enterprise_type
        and profile.get("role") == role
        and profile.get("auth_method", AuthMethod.password.value) == AuthMethod.password.value
    )


def build_rebind_items(
    eid: str, username: str, enterprise_type: str, founder: bool
) -> List[TransactItem]:
    """Assert an existing enrollment is still intact without rewriting it"""
    enterprise_guard = Condition.equals("admin", username) if founder else Condition.exists()
    return [
        TransactItem.condition_check(enterprise_type_key(enterprise_type, eid), enterprise_guard),
        TransactItem.condition_check(enterprise_profile_key(eid), enterprise_guard),
        TransactItem.condition_check(profile_key(username), Condition.equals("eid", eid)),
        TransactItem.condition_check(member_key(eid, username), Condition.exists()),
    ]


class SignupUseCase:
    """
    Signup Use Case - enterprise enrollment

    Command/Response Pattern:
    - Input: SignupCommand
    - Output: Result[SignupResponse]

    Business Logic:
    1. Validate required fields, enterprise type and business name
    2. Resolve the role (founder -> <type>_admin, internal add -> explicit role)
    3. An existing profile for the username is only re-bound: same eid,
       type and role, records asserted intact and left unchanged
    4. Otherwise write enterprise, profile and member records in one transaction
    5. Only after commit, register the credential with the identity provider

    A provider failure after commit leaves the records in place; the error
    is logged with eid and username for manual reconciliation.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        identity_provider: IIdentityProvider,
        role_claims: RoleClaimsTable,
    ):
        self.uow = uow
        self.identity_provider = identity_provider
        self.role_claims = role_claims

    async def execute(
        self,
        command: SignupCommand,
        caller_eid: Optional[str] = None,
        context: RequestContext = EMPTY_CONTEXT,
    ) -> Result[SignupResponse]:
        """
        Execute signup use case

        Args:
            command: SignupCommand
            caller_eid: eid claim of the authenticated caller (internal adds)
            context: request context for log correlation

        Returns:
            Result[SignupResponse] with the bound eid and role, or Error
        """
        if not (command.email and command.password and command.enterprise_type and command.client_id):
            return Return.err(
                Error(
                    "VALIDATION_ERROR",
                    "Email, password, enterprise_type and clientId are required",
                )
            )

        if command.enterprise_type not in {t.value for t in EnterpriseType}:
            return Return.err(
                Error(
                    "INVALID_ENTERPRISE_TYPE",
                    "Invalid enterprise type. Supported types: "
                    + ", ".join(t.value for t in EnterpriseType),
                )
            )

        if not command.eid and not command.business_name:
            return Return.err(Error("VALIDATION_ERROR", "business_name is required"))

        username = normalize_username(command.username or command.email)
        enterprise_type = command.enterprise_type

        role_result = resolve_role(
            self.role_claims,
            enterprise_type,
            eid=command.eid,
            role=command.role,
            caller_eid=caller_eid,
        )
        if role_result.is_err():
            return role_result
        role = role_result.value

        async with self.uow:
            existing = await self.uow.records.get(*profile_key(username))
            existing_eid = (existing or {}).get("eid")

            if existing_eid:
                # Re-signup only re-binds to the enrollment already on record
                if not is_same_enrollment(existing, command.eid, enterprise_type, role):
                    return Return.err(
                        Error("USERNAME_EXISTS", "User already exists with this email address")
                    )
                eid = existing_eid
                items = build_rebind_items(eid, username, enterprise_type, founder=not command.eid)
                logger.info(f"{context.tag()}Re-signup of {username} re-binds to eid={eid}")
            else:
                eid = command.eid or str(uuid4())
                items = build_enrollment_items(
                    eid=eid,
                    username=username,
                    enterprise_type=enterprise_type,
                    role=role,
                    business_name=command.business_name,
                    created_at_ms=int(datetime.now(UTC).timestamp() * 1000),
                    new_enterprise=not command.eid,
                )

            try:
                await self.uow.records.transact_write(items)
            except TransactionCanceledError as e:
                logger.warning(f"{context.tag()}Enrollment rejected for {username} eid={eid}: {e}")
                if command.eid:
                    return Return.err(Error("ENTERPRISE_NOT_FOUND", "Enterprise not found"))
                return Return.err(
                    Error("ENTERPRISE_CONFLICT", "Enterprise is owned by another admin")
                )

            await self.uow.commit()

        logger.info(f"{context.tag()}Enrollment records committed for {username} eid={eid} role={role}")

        try:
            await self.identity_provider.sign_up(
                client_id=command.client_id,
                username=username,
                email=command.email,
                password=command.password,
                custom_attributes={
                    "isConfirmedByAdmin": "false",
                    "enterpriseType": enterprise_type,
                    "role": role,
                    "eid": eid,
                },
            )
        except IdentityProviderError as e:
            if e.code == USERNAME_EXISTS:
                return Return.err(
                    Error(
                        "USERNAME_EXISTS",
                        "User already exists with this email address",
                        details={"eid": eid},
                    )
                )
            logger.error(
                f"{context.tag()}Identity provider sign-up failed after records committed "
                f"for {username} eid={eid}: {e.code}"
            )
            return Return.err(upstream_error(e, "User signup failed"))

        return Return.ok(SignupResponse(eid=eid, username=username, role=role))
