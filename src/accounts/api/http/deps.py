"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.accounts.api.http.app_data import ApplicationDependencies
from src.accounts.core.errors import (
    AuthenticationError,
    ForbiddenError,
    UnauthorizedError,
)
from src.accounts.core.patterns.saga import Saga
from src.accounts.core.services import (
    AuthGateway,
    DbSessionService,
    Principal,
    TokenValidator,
)
from src.accounts.core.use_cases import (
    EditAccountUseCase,
    GetMeUseCase,
    HealthCheckUseCase,
    SearchUsersUseCase,
    SigninOrRegisterUseCase,
)
from src.accounts.entities.core.user import UserRepository


def _app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_database_service(request: Request) -> DbSessionService:
    """Get the database service instance."""
    return _app_dependencies(request).database_service


def get_db_session(
    database_service: DbSessionService = Depends(get_database_service),
) -> Iterator[Session]:
    """Yield a request-scoped database session."""
    session = database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_user_repository(db: Session = Depends(get_db_session)) -> UserRepository:
    return UserRepository(db)


def get_auth_gateway(request: Request) -> AuthGateway:
    """Get the identity provider gateway instance."""
    return _app_dependencies(request).auth_gateway


def get_token_validator(request: Request) -> TokenValidator:
    """Get the access token validator instance."""
    return _app_dependencies(request).token_validator


# --- Use cases ---
def get_signin_or_register_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
    auth_gateway: AuthGateway = Depends(get_auth_gateway),
) -> SigninOrRegisterUseCase:
    return SigninOrRegisterUseCase(user_repo, auth_gateway, saga_factory=Saga)


def get_edit_account_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
) -> EditAccountUseCase:
    return EditAccountUseCase(user_repo)


def get_me_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
) -> GetMeUseCase:
    return GetMeUseCase(user_repo)


def get_search_users_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
) -> SearchUsersUseCase:
    return SearchUsersUseCase(user_repo)


def get_health_check_use_case(
    database_service: DbSessionService = Depends(get_database_service),
) -> HealthCheckUseCase:
    return HealthCheckUseCase(database_probe=database_service.health_check)


# --- Authentication / authorization ---
async def get_current_principal(
    request: Request,
    token_validator: TokenValidator = Depends(get_token_validator),
) -> Principal:
    """Authenticate the request using a Bearer token."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise UnauthorizedError("Missing or invalid authorization header")

    token = auth_header.split(" ", 1)[1].strip()
    try:
        principal = await token_validator.validate(token)
    except AuthenticationError as exc:
        raise UnauthorizedError("Invalid token") from exc

    request.state.principal = principal
    return principal


def require_role(*required_roles: str):
    """Create a dependency that requires one of ``required_roles``."""

    async def dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not any(role in principal.roles for role in required_roles):
            raise ForbiddenError(
                f"Insufficient permissions. Missing roles: {', '.join(required_roles)}"
            )
        return principal

    return dep
