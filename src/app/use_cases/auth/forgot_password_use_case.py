from libs.result import Result, Return

from src.app.services.identity_provider import (
    IdentityProviderError,
    IIdentityProvider,
    upstream_error,
)
from src.domain.keys import normalize_username

from .dtos import StatusResponse


class ForgotPasswordUseCase:
    """Starts the identity provider's password reset flow"""

    def __init__(self, identity_provider: IIdentityProvider):
        self.identity_provider = identity_provider

    async def execute(self, client_id: str, username: str) -> Result[StatusResponse]:
        try:
            await self.identity_provider.forgot_password(client_id, normalize_username(username))
        except IdentityProviderError as e:
            return Return.err(upstream_error(e, "Forgot Password failed"))

        return Return.ok(StatusResponse(message="Password reset code sent"))
