from libs.result import Result, Return

from src.app.services.identity_provider import (
    IdentityProviderError,
    IIdentityProvider,
    upstream_error,
)
from src.domain.keys import normalize_username

from .dtos import StatusResponse


class ConfirmForgotPasswordUseCase:
    """Completes a password reset with the emailed code"""

    def __init__(self, identity_provider: IIdentityProvider):
        self.identity_provider = identity_provider

    async def execute(
        self, client_id: str, username: str, code: str, password: str
    ) -> Result[StatusResponse]:
        try:
            await self.identity_provider.confirm_forgot_password(
                client_id, normalize_username(username), code, password
            )
        except IdentityProviderError as e:
            return Return.err(upstream_error(e, "Confirm Forgot Password failed"))

        return Return.ok(StatusResponse(message="Password has been reset"))
