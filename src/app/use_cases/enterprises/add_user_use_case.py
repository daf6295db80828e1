from libs.result import Error, Result, Return

from src.app.services.identity_provider import IIdentityProvider
from src.app.services.request_context import EMPTY_CONTEXT, RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import SignupCommand, SignupResponse, SignupUseCase
from src.domain.claims import VerifiedClaims
from src.domain.roles import RoleClaimsTable

from .dtos import AddUserCommand


class AddUserUseCase:
    """
    Enrolls an internal user into the caller's enterprise.

    The target eid and enterprise type come from the caller's verified
    claims, so a caller can only add users to their own enterprise.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        identity_provider: IIdentityProvider,
        role_claims: RoleClaimsTable,
    ):
        self.signup = SignupUseCase(uow, identity_provider, role_claims)

    async def execute(
        self,
        command: AddUserCommand,
        caller: VerifiedClaims,
        context: RequestContext = EMPTY_CONTEXT,
    ) -> Result[SignupResponse]:
        if not (caller.eid and caller.enterprise_type):
            return Return.err(Error("FORBIDDEN", "Forbidden - Enterprise ID not set"))

        signup_command = SignupCommand(
            email=command.email,
            password=command.password,
            enterprise_type=caller.enterprise_type,
            client_id=command.client_id,
            username=command.username,
            eid=caller.eid,
            role=command.role,
        )
        return await self.signup.execute(signup_command, caller_eid=caller.eid, context=context)
