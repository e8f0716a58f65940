"""JWT service package."""

from .jwks import JWKSCache, JWKSCacheInMemory, JwksService
from .token_validator import Principal, TokenValidator, extract_roles

__all__ = [
    "JWKSCache",
    "JWKSCacheInMemory",
    "JwksService",
    "Principal",
    "TokenValidator",
    "extract_roles",
]
