"""Core services exports."""

# Database Service
from .database.db_session import DbSessionService

# Identity Provider
from .identity import AuthGateway, KeycloakClient

# JWT Services
from .jwt import JWKSCache, JWKSCacheInMemory, JwksService, Principal, TokenValidator

# Permission rules
from .user_permission import UserPermission

__all__ = [
    # Database Service
    "DbSessionService",
    # Identity Provider
    "AuthGateway",
    "KeycloakClient",
    # JWT Services
    "JWKSCache",
    "JWKSCacheInMemory",
    "JwksService",
    "Principal",
    "TokenValidator",
    # Permission rules
    "UserPermission",
]
