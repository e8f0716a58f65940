from dataclasses import dataclass

from src.accounts.core.services import (
    AuthGateway,
    DbSessionService,
    JwksService,
    KeycloakClient,
    TokenValidator,
)


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    keycloak_client: KeycloakClient
    auth_gateway: AuthGateway
    jwks_service: JwksService
    token_validator: TokenValidator
