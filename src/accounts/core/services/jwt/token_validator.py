"""Access-token validation for bearer-authenticated routes."""

from dataclasses import dataclass, field
from typing import Any

from authlib.jose import JoseError, JsonWebKey, JsonWebToken
from loguru import logger

from src.accounts.core.errors import AuthenticationError, IdentityProviderError
from src.accounts.core.services.jwt.jwks import JwksService
from src.accounts.runtime.context import get_config


@dataclass(frozen=True)
class Principal:
    """The authenticated caller."""

    internal_id: str
    roles: list[str] = field(default_factory=list)


def extract_roles(claims: dict[str, Any], claim_name: str) -> list[str]:
    """Read roles from ``claim_name``; Keycloak group paths lose their leading '/'."""
    raw = claims.get(claim_name) or []
    if isinstance(raw, str):
        raw = [raw]
    return [str(role).lstrip("/") for role in raw]


class TokenValidator:
    def __init__(self, jwks_service: JwksService):
        self._jwks_service = jwks_service

    async def validate(self, token: str) -> Principal:
        cfg = get_config()

        try:
            jwks = await self._jwks_service.fetch_jwks(cfg.identity_provider.jwks_uri)
            key_set = JsonWebKey.import_key_set(jwks)
            claims = JsonWebToken(cfg.jwt.allowed_algorithms).decode(
                token,
                key_set,
                claims_options={
                    "iss": {"essential": True, "value": cfg.expected_issuer},
                },
            )
            claims.validate(leeway=cfg.jwt.clock_skew)
        except (JoseError, ValueError, KeyError, IdentityProviderError) as exc:
            logger.debug("Token validation failed", error=str(exc))
            raise AuthenticationError("Invalid token") from exc

        internal_id = claims.get(cfg.jwt.claims.user_id)
        if not internal_id:
            logger.debug(
                "Token missing user id claim", claim=cfg.jwt.claims.user_id
            )
            raise AuthenticationError("Invalid token")

        return Principal(
            internal_id=str(internal_id),
            roles=extract_roles(claims, cfg.jwt.claims.roles),
        )
