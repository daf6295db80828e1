import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


DEFAULT_ROLES_CLAIMS = {
    "superadmin_admin": ["superadmin:manage"],
    "supplier_admin": ["supplier:manageUser"],
    "supplier_sales_rm": [""],
    "supplier_sales_head": [""],
    "supplier_sales_manager": [""],
    "supplier_sales_executive": [""],
    "retailer_admin": ["retailer:manageUser"],
    "financier_admin": ["financier:manageUser"],
    "lsp_admin": ["lsp:manageUser"],
    "lsp_rider": ["lsp:delivery"],
}


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PREFIX = data.get("API_PREFIX", "/v1")
    API_PORT = data.get("API_PORT", 4000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", ["*"])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))

    # Identity provider (Cognito user pool)
    AWS_REGION = data.get("AWS_REGION", "ap-south-1")
    COGNITO_USER_POOL_ID = data.get("COGNITO_USER_POOL_ID", "")
    COGNITO_ISSUER = data.get("COGNITO_ISSUER", "")
    COGNITO_ENDPOINT_URL = data.get("COGNITO_ENDPOINT_URL", None)
    JWKS_CACHE_TTL_SECONDS = int(data.get("JWKS_CACHE_TTL_SECONDS", 300))
    JWKS_TIMEOUT_SECONDS = float(data.get("JWKS_TIMEOUT_SECONDS", 5))

    # SMS gateway
    SNS_ENDPOINT_URL = data.get("SNS_ENDPOINT_URL", None)
    SMS_SENDER_ID = data.get("SMS_SENDER_ID", "LSPOMS")

    # Locally issued tokens (OTP path)
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    LOCAL_TOKEN_ISSUER = data.get("LOCAL_TOKEN_ISSUER", "lsp-oms-local")
    LOCAL_TOKEN_TTL_HOURS = int(data.get("LOCAL_TOKEN_TTL_HOURS", 4))

    # OTP
    OTP_TTL_SECONDS = int(data.get("OTP_TTL_SECONDS", 300))
    # Empty disables the fixed-code test range
    OTP_TEST_NUMBER_PREFIX = data.get("OTP_TEST_NUMBER_PREFIX", "")
    OTP_TEST_CODE = str(data.get("OTP_TEST_CODE", "123456"))
    RIDER_USERNAME_DOMAIN = data.get("RIDER_USERNAME_DOMAIN", "lsp-rider.local")

    ROLES_CLAIMS = data.get("ROLES_CLAIMS", DEFAULT_ROLES_CLAIMS)
