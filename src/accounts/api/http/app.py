"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.accounts.api.http.app_data import ApplicationDependencies
from src.accounts.api.http.routers.auth import router as auth_router
from src.accounts.api.http.routers.health import router as health_router
from src.accounts.api.http.routers.users import router as users_router
from src.accounts.api.utils.app_startup import configure_logging
from src.accounts.core.errors import (
    AccountError,
    AuthenticationError,
    ForbiddenError,
    IdentityProviderError,
    InsufficientPermissionsError,
    ResourceNotFoundError,
    UnauthorizedError,
)
from src.accounts.core.services import (
    AuthGateway,
    DbSessionService,
    JWKSCacheInMemory,
    JwksService,
    KeycloakClient,
    TokenValidator,
)
from src.accounts.runtime.context import get_config

main_config = get_config()
main_config.validate_runtime()

configure_logging()

__all__ = ["app", "startup", "shutdown", "status_code_for"]


ERROR_STATUS_CODES: dict[type[AccountError], int] = {
    InsufficientPermissionsError: 403,
    AuthenticationError: 401,
    ResourceNotFoundError: 404,
    UnauthorizedError: 401,
    ForbiddenError: 403,
    IdentityProviderError: 502,
}


# Provider statuses that describe the caller's request rather than a gateway fault
PROVIDER_CLIENT_STATUSES = {409}


def status_code_for(exc: AccountError) -> int:
    if (
        isinstance(exc, IdentityProviderError)
        and exc.status_code in PROVIDER_CLIENT_STATUSES
    ):
        return exc.status_code
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_type]
    return 500


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
HSTS_HEADER = "max-age=31536000; includeSubDomains; preload"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if get_config().app.environment == "production":
            response.headers.setdefault("Strict-Transport-Security", HSTS_HEADER)
        return response


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


app = FastAPI(
    title=main_config.app.name,
    lifespan=lifespan,
    docs_url=None if main_config.app.environment == "production" else "/docs",
    redoc_url=None if main_config.app.environment == "production" else "/redoc",
)

app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=main_config.app.cors.origins,
    allow_credentials=main_config.app.cors.allow_credentials,
    allow_methods=main_config.app.cors.allow_methods,
    allow_headers=main_config.app.cors.allow_headers,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    request_context = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": _client_ip(request),
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    started = time.perf_counter()
    with logger.contextualize(**request_context):
        try:
            logger.info("request.start")
            response = await call_next(request)

            elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
            logger.bind(
                status_code=response.status_code,
                duration_ms=elapsed_ms,
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
            logger.bind(
                status_code=500,
                duration_ms=elapsed_ms,
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={
                    "name": "InternalServerError",
                    "message": "Internal Server Error",
                    "request_id": request_id,
                },
                headers={"X-Request-ID": request_id},
            )


@app.exception_handler(AccountError)
async def handle_account_error(request: Request, exc: AccountError) -> JSONResponse:
    status_code = status_code_for(exc)
    request_id = getattr(request.state, "request_id", None)

    if status_code >= 500:
        logger.bind(error_type=type(exc).__name__).error(
            "Upstream failure: {}", exc.message
        )
    else:
        logger.bind(status_code=status_code, error_type=type(exc).__name__).info(
            "request.rejected"
        )

    return JSONResponse(
        status_code=status_code,
        content={
            "name": type(exc).__name__,
            "message": exc.message,
            "request_id": request_id,
        },
    )


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(health_router)


async def startup() -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    database_service = DbSessionService(config)
    database_service.create_tables()

    keycloak_client = KeycloakClient(config.identity_provider)
    jwks_service = JwksService(JWKSCacheInMemory(ttl=config.jwt.jwks_cache_ttl))

    app.state.app_dependencies = ApplicationDependencies(
        database_service=database_service,
        keycloak_client=keycloak_client,
        auth_gateway=AuthGateway(keycloak_client),
        jwks_service=jwks_service,
        token_validator=TokenValidator(jwks_service),
    )

    # Verify the JWKS endpoint so auth failures surface early
    try:
        await jwks_service.fetch_jwks(config.identity_provider.jwks_uri)
    except IdentityProviderError:
        logger.exception(
            "Failed to fetch JWKS from {}", config.identity_provider.jwks_uri
        )
        if config.app.environment == "production":
            raise


async def shutdown() -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is None:
        return
    await app_dependencies.keycloak_client.aclose()
    app_dependencies.database_service.close()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=main_config.app.host,
        port=main_config.app.port,
        access_log=False,
    )
