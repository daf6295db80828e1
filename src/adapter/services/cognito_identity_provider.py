"""
Cognito implementation of the identity provider gateway.

boto3 is synchronous; calls run in the starlette threadpool so request
handlers stay non-blocking.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from src.app.services.identity_provider import (
    IdentityProviderError,
    IdentityUser,
    IIdentityProvider,
)

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "custom:"


def to_user_attributes(custom_attributes: Dict[str, str]) -> List[Dict[str, str]]:
    """{"eid": "x"} -> [{"Name": "custom:eid", "Value": "x"}]"""
    return [
        {"Name": f"{CUSTOM_PREFIX}{name}", "Value": str(value)}
        for name, value in custom_attributes.items()
    ]


class CognitoIdentityProvider(IIdentityProvider):
    """Identity provider gateway backed by a Cognito user pool"""

    def __init__(
        self,
        user_pool_id: str,
        region_name: str,
        endpoint_url: Optional[str] = None,
        client: Any = None,
    ):
        self.user_pool_id = user_pool_id
        if client is None:
            config = Config(
                region_name=region_name,
                retries={"max_attempts": 1, "mode": "standard"},
                connect_timeout=5,
                read_timeout=10,
            )
            kwargs = {"config": config}
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            client = boto3.client("cognito-idp", **kwargs)
        self.client = client

    async def _call(self, operation: str, fn: Callable[..., Dict], **kwargs) -> Dict:
        try:
            return await run_in_threadpool(fn, **kwargs)
        except ClientError as e:
            error = e.response.get("Error", {})
            status_code = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            code = error.get("Code", "ClientError")
            logger.warning(f"Cognito {operation} failed: {code} (status={status_code})")
            raise IdentityProviderError(
                code, error.get("Message") or str(e), status_code
            ) from e
        except BotoCoreError as e:
            logger.error(f"Cognito {operation} unreachable: {e}")
            raise IdentityProviderError("IdentityProviderUnavailable", str(e)) from e

    async def sign_up(
        self,
        client_id: str,
        username: str,
        email: str,
        password: str,
        custom_attributes: Dict[str, str],
    ) -> None:
        attributes = [{"Name": "email", "Value": email}]
        attributes.extend(to_user_attributes(custom_attributes))
        await self._call(
            "sign_up",
            self.client.sign_up,
            ClientId=client_id,
            Username=username,
            Password=password,
            UserAttributes=attributes,
        )

    async def confirm_sign_up(self, client_id: str, username: str, code: str) -> None:
        await self._call(
            "confirm_sign_up",
            self.client.confirm_sign_up,
            ClientId=client_id,
            Username=username,
            ConfirmationCode=code,
        )

    async def resend_confirmation_code(self, client_id: str, username: str) -> None:
        await self._call(
            "resend_confirmation_code",
            self.client.resend_confirmation_code,
            ClientId=client_id,
            Username=username,
        )

    async def initiate_auth(self, client_id: str, username: str, password: str) -> str:
        response = await self._call(
            "initiate_auth",
            self.client.initiate_auth,
            ClientId=client_id,
            AuthFlow="USER_PASSWORD_AUTH",
            AuthParameters={"USERNAME": username, "PASSWORD": password},
        )
        result = response.get("AuthenticationResult") or {}
        if "IdToken" not in result:
            # A challenge (e.g. NEW_PASSWORD_REQUIRED) instead of tokens
            challenge = response.get("ChallengeName", "UNKNOWN")
            raise IdentityProviderError(
                "ChallengeRequired", f"Authentication challenge required: {challenge}", 400
            )
        return result["IdToken"]

    async def forgot_password(self, client_id: str, username: str) -> None:
        await self._call(
            "forgot_password",
            self.client.forgot_password,
            ClientId=client_id,
            Username=username,
        )

    async def confirm_forgot_password(
        self, client_id: str, username: str, code: str, password: str
    ) -> None:
        await self._call(
            "confirm_forgot_password",
            self.client.confirm_forgot_password,
            ClientId=client_id,
            Username=username,
            ConfirmationCode=code,
            Password=password,
        )

    async def admin_get_user(self, username: str) -> IdentityUser:
        response = await self._call(
            "admin_get_user",
            self.client.admin_get_user,
            UserPoolId=self.user_pool_id,
            Username=username,
        )
        attributes = {
            attr["Name"]: attr.get("Value", "")
            for attr in response.get("UserAttributes", [])
        }
        return IdentityUser(
            username=response.get("Username", username),
            status=response.get("UserStatus", ""),
            attributes=attributes,
        )

    async def admin_update_user_attributes(
        self, username: str, custom_attributes: Dict[str, str]
    ) -> None:
        await self._call(
            "admin_update_user_attributes",
            self.client.admin_update_user_attributes,
            UserPoolId=self.user_pool_id,
            Username=username,
            UserAttributes=to_user_attributes(custom_attributes),
        )

    async def admin_delete_user(self, username: str) -> None:
        await self._call(
            "admin_delete_user",
            self.client.admin_delete_user,
            UserPoolId=self.user_pool_id,
            Username=username,
        )
