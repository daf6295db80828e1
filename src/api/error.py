from fastapi import status
from libs.result import Error

# Codes that map to a fixed client status; anything else is a server error
CLIENT_ERROR_STATUS = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "INVALID_ENTERPRISE_TYPE": status.HTTP_400_BAD_REQUEST,
    "INVALID_ROLE": status.HTTP_400_BAD_REQUEST,
    "INVALID_FORMAT": status.HTTP_400_BAD_REQUEST,
    "TOKEN_MISSING": status.HTTP_401_UNAUTHORIZED,
    "TOKEN_NOT_SUPPLIED": status.HTTP_401_UNAUTHORIZED,
    "TOKEN_INVALID": status.HTTP_401_UNAUTHORIZED,
    "TOKEN_EXPIRED": status.HTTP_401_UNAUTHORIZED,
    "OTP_MISMATCH": status.HTTP_401_UNAUTHORIZED,
    "OTP_EXPIRED": status.HTTP_401_UNAUTHORIZED,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "TENANT_MISMATCH": status.HTTP_403_FORBIDDEN,
    "NOT_APPROVED": status.HTTP_403_FORBIDDEN,
    "USER_NOT_CONFIRMED": status.HTTP_403_FORBIDDEN,
    "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "OTP_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ENTERPRISE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PROFILE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "USERNAME_EXISTS": status.HTTP_409_CONFLICT,
    "ENTERPRISE_CONFLICT": status.HTTP_409_CONFLICT,
}


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


def raise_upstream(error: Error, default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
    """
    Raise for a gateway failure, forwarding the upstream HTTP status.

    4xx upstream statuses become ClientError so their message reaches the
    caller; everything else is a ServerError.
    """
    upstream_status = (error.details or {}).get("status_code")
    if isinstance(upstream_status, int) and 400 <= upstream_status < 500:
        raise ClientError(error, status_code=upstream_status)
    raise ServerError(
        error,
        status_code=upstream_status if isinstance(upstream_status, int) and upstream_status >= 500 else default_status,
    )


def raise_for_error(error: Error):
    """Raise the HTTP error for a use case Error"""
    if error.code == "UPSTREAM_FAILURE":
        raise_upstream(error)
    if error.code == "SMS_DELIVERY_FAILED":
        raise_upstream(error, default_status=status.HTTP_502_BAD_GATEWAY)
    if error.code in CLIENT_ERROR_STATUS:
        raise ClientError(error, status_code=CLIENT_ERROR_STATUS[error.code])
    raise ServerError(error)
