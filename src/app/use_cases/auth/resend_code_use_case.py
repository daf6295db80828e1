from libs.result import Result, Return

from src.app.services.identity_provider import (
    IdentityProviderError,
    IIdentityProvider,
    upstream_error,
)
from src.domain.keys import normalize_username

from .dtos import StatusResponse


class ResendCodeUseCase:
    """Asks the identity provider to resend the registration code"""

    def __init__(self, identity_provider: IIdentityProvider):
        self.identity_provider = identity_provider

    async def execute(self, client_id: str, username: str) -> Result[StatusResponse]:
        try:
            await self.identity_provider.resend_confirmation_code(
                client_id, normalize_username(username)
            )
        except IdentityProviderError as e:
            return Return.err(upstream_error(e, "Resend code failed"))

        return Return.ok(StatusResponse(message="Confirmation code sent"))
