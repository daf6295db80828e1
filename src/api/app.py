import logging
import re
import time
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError

logger = logging.getLogger(__name__)

# Upstream failures carry a message that is safe and useful to show
PUBLIC_SERVER_ERRORS = {"UPSTREAM_FAILURE", "SMS_DELIVERY_FAILED"}

# Inbound ids are logged and echoed, so only plain bounded tokens are kept
REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}\Z")


def error_body(code: str, message: str) -> dict:
    return {"status": "error", "code": code, "message": message}


def resolve_request_id(request: Request) -> str:
    request_id = request.headers.get("X-Request-ID", "")
    if REQUEST_ID_PATTERN.match(request_id):
        return request_id
    trace = request.headers.get("X-Amzn-Trace-Id", "")
    for part in trace.split(";"):
        key, _, value = part.strip().partition("=")
        if key == "Root" and REQUEST_ID_PATTERN.match(value):
            return value
    return str(uuid.uuid4())


async def handle_client_error(request: Request, exc: ClientError):
    logger.warning(f"Client error: {exc.base_error.code} {exc.base_error.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.base_error.code, exc.base_error.message),
    )


async def handle_server_error(request: Request, exc: ServerError):
    logger.error(f"Server error: {exc.base_error.code} {exc.base_error.message}")
    message = (
        exc.base_error.message
        if exc.base_error.code in PUBLIC_SERVER_ERRORS
        else "Internal server error"
    )
    return JSONResponse(
        status_code=exc.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(exc.base_error.code, message),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(loc) for loc in first.get("loc", []) if loc != "body")
    message = f"Invalid field '{field}': {first.get('msg', 'invalid value')}" if field else "Invalid request"
    logger.warning(f"Validation error: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("VALIDATION_ERROR", message),
    )


async def request_id_middleware(request: Request, call_next):
    request_id = resolve_request_id(request)
    request.state.request_id = request_id
    started = time.perf_counter()
    logger.info(f"[{request_id}] {request.method} {request.url.path} started")

    response = await call_next(request)

    duration_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"[{request_id}] {request.method} {request.url.path} "
        f"finished {response.status_code} in {duration_ms:.1f}ms"
    )
    response.headers["X-Request-ID"] = request_id
    return response


def create_app(ApplicationConfig) -> FastAPI:
    app = FastAPI(title="Enterprise Auth Service", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if ApplicationConfig.ENABLE_LOGGING_MIDDLEWARE:
        app.middleware("http")(request_id_middleware)

    from src.api.routes import admin, auth, health_check, members

    prefix = ApplicationConfig.API_PREFIX
    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, prefix=prefix)
    app.include_router(admin.router, prefix=prefix)
    app.include_router(members.supplier_router, prefix=prefix)
    app.include_router(members.lsp_router, prefix=prefix)

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
