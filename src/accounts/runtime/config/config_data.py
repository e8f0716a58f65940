"""Typed view of ``config.yaml``.

Every section has defaults that run a local development stack (SQLite and a
Keycloak on localhost:8080), so ``ConfigData()`` is always valid.
``validate_runtime`` is where production refuses those defaults.
"""

from __future__ import annotations

from typing import Annotated, Literal

from loguru import logger
from pydantic import BaseModel, BeforeValidator, Field, computed_field


def _blank_to_none(value: object) -> object:
    return None if value == "" else value


# config.yaml renders unset optional strings as ""
OptionalStr = Annotated[str | None, BeforeValidator(_blank_to_none)]


class CORSConfig(BaseModel):
    origins: list[str] = Field(default=["http://localhost:3000"])
    allow_credentials: bool = True
    allow_methods: list[str] = Field(default=["GET", "POST", "PATCH", "OPTIONS"])
    allow_headers: list[str] = Field(default=["*"])


class IdentityProviderConfig(BaseModel):
    """Keycloak realm used as the managed identity provider."""

    base_url: str = Field(
        default="http://localhost:8080", description="Keycloak server base URL"
    )
    realm: str = Field(default="accounts", description="Realm holding the accounts")
    client_id: str = Field(
        default="accounts-api", description="Confidential client used by the API"
    )
    client_secret: OptionalStr = Field(
        default=None, description="Secret of the confidential client"
    )
    timeout: float = Field(default=10.0, description="HTTP timeout in seconds")
    internal_id_attribute: str = Field(
        default="internal_id",
        description="User attribute carrying the local user id",
    )

    @computed_field
    @property
    def realm_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/realms/{self.realm}"

    @computed_field
    @property
    def admin_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/admin/realms/{self.realm}"

    @computed_field
    @property
    def token_endpoint(self) -> str:
        return f"{self.realm_url}/protocol/openid-connect/token"

    @computed_field
    @property
    def jwks_uri(self) -> str:
        return f"{self.realm_url}/protocol/openid-connect/certs"


class JWTClaimsConfig(BaseModel):
    """Names of the access-token claims the API reads."""

    user_id: str = Field(
        default="internal_id", description="Claim carrying the local user id"
    )
    roles: str = Field(default="groups", description="Claim listing the caller's roles")


class JWTConfig(BaseModel):
    """Access-token verification settings."""

    allowed_algorithms: list[str] = Field(
        default_factory=lambda: ["RS256"],
        description="Signature algorithms accepted on access tokens",
    )
    issuer: OptionalStr = Field(
        default=None,
        description="Expected `iss`; the realm URL when unset",
    )
    clock_skew: int = Field(default=60, description="Leeway for exp/nbf, in seconds")
    jwks_cache_ttl: int = Field(default=3600, description="Seconds a fetched JWKS is reused")
    claims: JWTClaimsConfig = Field(default_factory=JWTClaimsConfig)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Minimum loguru level")
    format: Literal["json", "plain"] = Field(
        default="plain", description="Format of the file sink"
    )
    file: str | None = Field(default=None, description="Optional rotating log file")
    max_size_mb: int = Field(default=10, description="Rotate the file at this size")
    backup_count: int = Field(default=5, description="Rotated files kept")


class DatabaseConfig(BaseModel):
    url: str = Field(
        default="sqlite:///./accounts.db",
        description="SQLAlchemy URL of the accounts database",
    )
    # Pool settings apply to server databases only
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class AppConfig(BaseModel):
    name: str = Field(default="accounts-api", description="Service name")
    environment: Literal["development", "production", "test"] = "development"
    host: str = "0.0.0.0"
    port: int = 8000
    cors: CORSConfig = Field(default_factory=CORSConfig)


class ConfigData(BaseModel):
    """Root of the ``config:`` section of config.yaml."""

    app: AppConfig = Field(default_factory=AppConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    identity_provider: IdentityProviderConfig = Field(
        default_factory=IdentityProviderConfig
    )
    jwt: JWTConfig = Field(default_factory=JWTConfig)

    @property
    def expected_issuer(self) -> str:
        return (self.jwt.issuer or self.identity_provider.realm_url).rstrip("/")

    def validate_runtime(self) -> None:
        """Fail fast on settings that are unsafe for the active environment.

        Production raises ``ValueError``; development only logs warnings.
        """
        if self.app.environment == "production":
            self._require_production_settings()
        elif self.app.environment == "development":
            if not self.identity_provider.client_secret:
                logger.warning(
                    "Identity provider client secret is not set; admin calls will fail"
                )
            if self.database.is_sqlite:
                logger.warning("Using SQLite database in development")

    def _require_production_settings(self) -> None:
        if not self.identity_provider.client_secret:
            raise ValueError("IDP_CLIENT_SECRET must be configured in production")
        if not self.jwt.issuer:
            raise ValueError("JWT_ISSUER must be configured in production")
        if self.database.is_sqlite:
            raise ValueError("SQLite is not supported in production")
        if "*" in self.app.cors.origins:
            raise ValueError(
                "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
            )
