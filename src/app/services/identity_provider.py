from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional

from libs.result import Error

USERNAME_EXISTS = "UsernameExistsException"
USER_NOT_FOUND = "UserNotFoundException"
CONFIRMED_STATUS = "CONFIRMED"


class IdentityProviderError(Exception):
    """Failure reported by the identity provider"""

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"{code}: {message}")


@dataclass
class IdentityUser:
    """User as known to the identity provider"""

    username: str
    status: str
    attributes: Dict[str, str] = field(default_factory=dict)

    def attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)


class IIdentityProvider(ABC):
    """
    Identity provider gateway - application layer.

    Custom attributes are passed without the "custom:" prefix
    (e.g. {"eid": "..."}); implementations add it.
    All methods raise IdentityProviderError on failure.
    """

    @abstractmethod
    async def sign_up(
        self,
        client_id: str,
        username: str,
        email: str,
        password: str,
        custom_attributes: Dict[str, str],
    ) -> None:
        pass

    @abstractmethod
    async def confirm_sign_up(self, client_id: str, username: str, code: str) -> None:
        pass

    @abstractmethod
    async def resend_confirmation_code(self, client_id: str, username: str) -> None:
        pass

    @abstractmethod
    async def initiate_auth(self, client_id: str, username: str, password: str) -> str:
        """Authenticate with username/password and return the ID token"""
        pass

    @abstractmethod
    async def forgot_password(self, client_id: str, username: str) -> None:
        pass

    @abstractmethod
    async def confirm_forgot_password(
        self, client_id: str, username: str, code: str, password: str
    ) -> None:
        pass

    @abstractmethod
    async def admin_get_user(self, username: str) -> IdentityUser:
        pass

    @abstractmethod
    async def admin_update_user_attributes(
        self, username: str, custom_attributes: Dict[str, str]
    ) -> None:
        pass

    @abstractmethod
    async def admin_delete_user(self, username: str) -> None:
        pass


def upstream_error(e: IdentityProviderError, fallback_message: str = "Identity provider request failed"):
    """Convert a gateway failure into a use case Error, keeping its status"""
    return Error(
        "UPSTREAM_FAILURE",
        e.message or fallback_message,
        details={"status_code": e.status_code, "provider_code": e.code},
    )
