from libs.result import Result, Return

from src.app.services.identity_provider import (
    IdentityProviderError,
    IIdentityProvider,
    upstream_error,
)
from src.domain.keys import normalize_username

from .dtos import StatusResponse


class ConfirmSignupUseCase:
    """Confirms a registration with the code the identity provider sent"""

    def __init__(self, identity_provider: IIdentityProvider):
        self.identity_provider = identity_provider

    async def execute(self, client_id: str, username: str, code: str) -> Result[StatusResponse]:
        try:
            await self.identity_provider.confirm_sign_up(
                client_id, normalize_username(username), code
            )
        except IdentityProviderError as e:
            return Return.err(upstream_error(e, "Confirm signup failed"))

        return Return.ok(StatusResponse(message="Signup confirmed"))
