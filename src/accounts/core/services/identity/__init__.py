"""Identity provider integration."""

from .auth_gateway import AuthGateway
from .keycloak_client import KeycloakClient, TokenResponse

__all__ = ["AuthGateway", "KeycloakClient", "TokenResponse"]
